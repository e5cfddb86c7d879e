import json
import asyncio
from typing import List, Tuple
from fastapi.responses import StreamingResponse

from core.logger import get_logger

logger = get_logger(__name__)

async def stream_agent_response_logic(agent, question: str, history: List[Tuple[str, str]]):
    """
    Runs the chat agent and streams back the thought process and final answer.
    """
    try:
        async for event in agent.astream({"question": question, "history": history}):
            last_node = list(event.keys())[-1]
            last_state = event[last_node] or {}

            if last_state.get('streaming_thought'):
                data = {"type": "thought", "content": last_state['streaming_thought']}
                yield f"data: {json.dumps(data)}\n\n"

            if last_state.get('answer'):
                data = {"type": "answer", "content": last_state['answer']}
                yield f"data: {json.dumps(data)}\n\n"

            await asyncio.sleep(0.1)
    except Exception as e:
        logger.error(f"Chat stream failed: {e}", exc_info=True)
        data = {"type": "error", "content": "Internal Server Error"}
        yield f"data: {json.dumps(data)}\n\n"

def stream_agent_response(agent, question: str, history: List[Tuple[str, str]]):
    return StreamingResponse(
        stream_agent_response_logic(agent, question, history),
        media_type="text/event-stream"
    )
