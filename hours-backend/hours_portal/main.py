import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from .config import settings
from .db import close_pool, database_configured, initialize_database, open_pool
from .routers import admin, auth, clients, hours

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    database_available = False
    if database_configured():
        try:
            open_pool()
            initialize_database()
            database_available = True
        except Exception as exc:  # pragma: no cover - database is optional
            close_pool()
            logger.warning("Database initialization failed; client URLs fall back to file storage: %s", exc)
    app.state.database_available = database_available
    try:
        yield
    finally:
        close_pool()


app = FastAPI(
    title="Client Hours Portal",
    version="0.1.0",
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(auth.router)
app.include_router(clients.router)
app.include_router(hours.router)
app.include_router(admin.router)


@app.get("/api/health")
def health():
    return {"ok": True}
