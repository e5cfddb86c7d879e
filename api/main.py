from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.chat_router import router as chat_router
from api.console_router import router as console_router
from api.dependencies import close_db_client
from api.gallery_router import router as gallery_router
from core.config import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_db_client()


app = FastAPI(
    title="Aurum Art Graph API",
    description="Hybrid search, artist graphs and grounded chat over the art knowledge graph.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include all the Routers ---
app.include_router(gallery_router)
app.include_router(console_router)
app.include_router(chat_router)

@app.get("/")
def read_root():
    return {"message": "Aurum Art Graph API is running."}
