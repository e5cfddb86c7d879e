from typing import Literal
from pydantic import BaseModel, Field
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.prompts import ChatPromptTemplate

from core.config import settings

class RetrievalIntent(BaseModel):
    """Decide whether a chat turn needs the gallery knowledge graph."""
    intent: Literal["retrieve", "skip"] = Field(
        ...,
        description="'retrieve' for questions about artworks, artists or art history; 'skip' for small talk."
    )

def get_intent_chain():
    """Creates an LLM chain that classifies whether a message needs graph retrieval."""
    llm = ChatGoogleGenerativeAI(model=settings.FAST_MODEL, temperature=0)
    structured_llm = llm.with_structured_output(RetrievalIntent)
    system_prompt = """
    You decide whether the Aurum Museum assistant must consult its knowledge graph.
    Respond with only 'retrieve' or 'skip'.

    - 'retrieve': any request about artworks, artists, art history, or gallery data.
    - 'skip': greetings, chit-chat, or messages with no museum-specific question.
    """
    prompt = ChatPromptTemplate.from_messages([
        ("system", system_prompt),
        ("human", "{question}"),
    ])
    return prompt | structured_llm
