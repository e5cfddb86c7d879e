from typing import TypedDict, List, Tuple
from langgraph.graph import StateGraph, END
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_core.output_parsers import StrOutputParser

from core.retriever import HybridRetriever
from core.router import get_intent_chain
from core.logger import get_logger
from core.config import settings

logger = get_logger(__name__)

NO_CONTEXT_NOTE = "No specific database matches found."
SKIPPED_CONTEXT_NOTE = "Classifier marked this turn as small talk; gallery context was not fetched."

SYSTEM_PROMPT = """
You are an expert Museum Guide for the Aurum Art Gallery.
You have access to a knowledge graph of information about historical artworks and artists.

CONTEXT FROM DATABASE:
{context}

INSTRUCTIONS:
1. Answer the user's question based on the CONTEXT provided above.
2. If the context contains relevant artworks or artists, mention them specifically.
3. If the context is empty or irrelevant, use your general knowledge but say explicitly that you couldn't find specific details in the gallery database.
4. Be polite, educational, and engaging.
5. Keep answers concise but informative.
"""

# --- Chat State ---
class ChatState(TypedDict, total=False):
    question: str
    # Prior turns as (role, content) with role 'human' or 'ai'
    history: List[Tuple[str, str]]
    intent: str
    context: str
    answer: str
    # Streamed output for the client
    streaming_thought: str


def get_answer_chain():
    """Creates the chain that writes the grounded answer."""
    llm = ChatGoogleGenerativeAI(model=settings.GENERATION_MODEL, temperature=0)
    prompt = ChatPromptTemplate.from_messages([
        ("system", SYSTEM_PROMPT),
        MessagesPlaceholder("history"),
        ("human", "{question}"),
    ])
    return prompt | llm | StrOutputParser()

# --- Agent Nodes ---

def classify_intent(state: ChatState):
    """Entry point: decides whether this turn needs the knowledge graph."""
    question = (state.get("question") or "").strip()
    if not question:
        return {"intent": "retrieve", "streaming_thought": "Looking up the gallery database..."}
    try:
        route = get_intent_chain().invoke({"question": question})
        intent = "skip" if str(route.intent).lower().startswith("skip") else "retrieve"
    except Exception as e:
        # Classifier failure falls back to retrieval.
        logger.warning(f"Intent classifier error: {e}")
        intent = "retrieve"
    logger.info(f"  - Retrieval intent: {intent}")
    thought = "Looking up the gallery database..." if intent == "retrieve" else "No gallery lookup needed."
    return {"intent": intent, "streaming_thought": thought}


def make_retrieve_context(retriever: HybridRetriever):
    def retrieve_context(state: ChatState):
        question = (state.get("question") or "").strip() or "User sent a multimedia message."
        context = retriever.get_context(question)
        if context:
            thought = f"Found gallery context:\n{context[:200]}..."
        else:
            thought = "No matching gallery records; answering from general knowledge."
        return {"context": context, "streaming_thought": thought}
    return retrieve_context


def skip_context(state: ChatState):
    return {"context": SKIPPED_CONTEXT_NOTE, "streaming_thought": "Answering without gallery context."}


def generate_response(state: ChatState):
    """The final step: answer the user with whatever context was gathered."""
    context = state.get("context") or NO_CONTEXT_NOTE
    chain = get_answer_chain()
    answer = chain.invoke({
        "context": context,
        "history": list(state.get("history") or []),
        "question": state.get("question") or "",
    })
    logger.info(
        "chat-request",
        extra={"contextPreview": context[:200], "intent": state.get("intent")},
    )
    return {"answer": answer, "streaming_thought": "Done."}


def route_after_classification(state: ChatState):
    return "skip" if state.get("intent") == "skip" else "retrieve"


# --- Build and Compile the Graph ---
def build_chat_agent(retriever: HybridRetriever):
    workflow = StateGraph(ChatState)
    workflow.add_node("classify_intent", classify_intent)
    workflow.add_node("retrieve_context", make_retrieve_context(retriever))
    workflow.add_node("skip_context", skip_context)
    workflow.add_node("responder", generate_response)

    workflow.set_entry_point("classify_intent")
    workflow.add_conditional_edges(
        "classify_intent",
        route_after_classification,
        {"retrieve": "retrieve_context", "skip": "skip_context"}
    )
    workflow.add_edge("retrieve_context", "responder")
    workflow.add_edge("skip_context", "responder")
    workflow.add_edge("responder", END)

    return workflow.compile()
