import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import check_database, init_db
from api.applications import router as applications_router
from api.error_handlers import register_error_handlers

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_db()
    if await check_database():
        logger.info("Database ready")
    else:
        logger.warning("Database ping failed at startup")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Loan application drafting, submission and cancellation API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
app.include_router(applications_router)


@app.get("/health")
async def health():
    database_ok = await check_database()
    return {"status": "ok", "database": "ok" if database_ok else "unavailable"}
