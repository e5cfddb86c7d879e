from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_db_client
from api.streaming_models import ConsoleRequest
from core.console import execute_raw_query
from core.database import GraphDBInterface
from core.models import ConsoleResult

router = APIRouter(
    prefix="/console",
    tags=["Console"]
)

@router.post("", response_model=ConsoleResult)
def run_console_query(request: ConsoleRequest, db_client: GraphDBInterface = Depends(get_db_client)):
    """
    Runs an arbitrary Cypher statement for administrators. Store errors come
    back inside the payload rather than as an HTTP error.
    """
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Query cannot be empty.")
    return execute_raw_query(db_client, request.query)
