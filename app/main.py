import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware
from dotenv import load_dotenv

# .env must be loaded before settings are read
load_dotenv()

from app.api.v1.router import api_router
from app.core.config import get_settings
from app.db.session import init_models

settings = get_settings()

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def configure_sqlalchemy_logging() -> None:
    """Format SQLAlchemy engine logs with extra spacing for readability."""
    sql_logger = logging.getLogger("sqlalchemy.engine")
    sql_logger.setLevel(logging.INFO if settings.app_env == "local" else logging.WARNING)
    sql_logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s\n%(message)s\n",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    sql_logger.addHandler(handler)
    sql_logger.propagate = False


configure_logging()
configure_sqlalchemy_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.db_auto_create:
        logger.info("DB_AUTO_CREATE is set, creating missing tables")
        await init_models()
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; recipes will use the rule-based generator")
    yield


app = FastAPI(
    title="Recipe Generator API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# CORS runs before the session middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    session_cookie=settings.session_cookie_name,
    max_age=settings.session_max_age,
    same_site=settings.session_same_site,
    https_only=settings.session_https_only,
)

api_prefix = f"{settings.api_prefix}/{settings.api_version}".rstrip("/")
app.include_router(api_router, prefix=api_prefix)


@app.get("/healthz", tags=["health"])
async def root_health_check() -> dict[str, str]:
    """Basic readiness check for infrastructure monitors."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=settings.port,
        reload=True,
        reload_dirs=["app"],
    )
