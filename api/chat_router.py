from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_chat_agent
from api.streaming_logic import stream_agent_response
from api.streaming_models import ChatRequest
from core.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/chat",
    tags=["Chat"]
)

ROLE_MAP = {"user": "human", "assistant": "ai"}

@router.post("")
async def chat(request: ChatRequest, agent=Depends(get_chat_agent)):
    """
    Receives the conversation and streams the agent's reasoning and final answer.
    The last user message is the question; earlier turns become history.
    """
    if not request.messages:
        raise HTTPException(status_code=400, detail="Messages are required.")

    last_user = max(
        (i for i, message in enumerate(request.messages) if message.role == "user"),
        default=None,
    )
    if last_user is None:
        raise HTTPException(status_code=400, detail="At least one user message is required.")

    question = request.messages[last_user].content
    history = [
        (ROLE_MAP[message.role], message.content)
        for message in request.messages[:last_user]
        if message.role in ROLE_MAP and message.content
    ]
    logger.info(f"Received chat message: {question[:100]}")
    return stream_agent_response(agent, question, history)
