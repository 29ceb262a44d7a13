import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .db import create_db_engine, create_session_factory, init_db
from .errors import register_error_handlers
from .llm_service import CompletionClient, OpenAICompletionClient
from .rag import DocumentStore
from .ratelimit import RateLimiter
from .routers import router

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format="[%(asctime)s] %(levelname)s %(name)s - %(message)s")


def create_app(
    settings: Optional[Settings] = None,
    documents: Optional[DocumentStore] = None,
    completion_client: Optional[CompletionClient] = None,
) -> FastAPI:
    """
    Build the API with its storage, documents and completion client wired in.
    Anything not passed in is created from settings.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Support Chat Backend")

    # Storage: created once, shared by all requests through app.state
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    app.state.documents = documents if documents is not None else DocumentStore.from_file(settings.docs_path)
    app.state.completion_client = completion_client or OpenAICompletionClient(
        api_key=settings.openai_api_key,
        model=settings.chat_model,
    )

    # 20 requests per minute per client address, fixed window
    app.state.rate_limiter = RateLimiter(settings.rate_limit, enabled=settings.rate_limit_enabled)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(router, prefix="/api")

    logger.info(
        "Support chat ready: env=%s db=%s documents=%d model=%s",
        settings.app_env,
        engine.url.render_as_string(hide_password=True),
        len(app.state.documents),
        settings.chat_model,
    )
    return app


def run() -> None:
    settings = get_settings()
    uvicorn.run("support_chat.main:create_app", factory=True, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
