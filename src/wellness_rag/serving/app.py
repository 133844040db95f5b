"""FastAPI application exposing the chat pipeline as a REST API."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator, Awaitable, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from wellness_rag.chat.models import ChatRequest, ChatResponse, ErrorResponse
from wellness_rag.chat.pipeline import ChatPipeline
from wellness_rag.config import get_settings
from wellness_rag.errors import classify_error
from wellness_rag.logging_config import configure_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Non-standard "client closed request" status; only ever seen in logs.
CLIENT_CLOSED_REQUEST = 499
DISCONNECT_POLL_SECONDS = 0.5
INVALID_BODY_MESSAGE = "Invalid request body"


class ClientDisconnected(Exception):
    """The HTTP client went away before the answer was ready."""


async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    *,
    poll_interval: float = DISCONNECT_POLL_SECONDS,
) -> T:
    """Await *work*, cancelling it if the client disconnects first.

    A cancelled task is awaited before returning, so its cleanup has run by
    the time the caller answers.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task


def create_app(pipeline: ChatPipeline | None = None) -> FastAPI:
    """Build the API.

    When *pipeline* is omitted, settings are loaded and the clients are
    built during startup, so missing configuration stops the server before
    it accepts traffic.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "pipeline", None) is None:
            settings = get_settings()
            configure_logging(settings.log_level)
            app.state.pipeline = ChatPipeline.from_settings(settings)
            logger.info("Chat pipeline ready (model=%s)", settings.llm_model_name)
        yield

    app = FastAPI(
        title="Wellness RAG API",
        version="0.1.0",
        description="Retrieval-augmented chat grounded in expert women's-health articles.",
        lifespan=lifespan,
    )
    app.state.pipeline = pipeline

    # ── Error handlers ────────────────────────────────────────────────
    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed bodies get the same ``{error}`` shape as every other failure."""
        logger.warning("Rejected malformed %s body: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=INVALID_BODY_MESSAGE).model_dump(),
        )

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.post(
        "/chat",
        response_model=ChatResponse,
        responses={
            400: {"model": ErrorResponse},
            429: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )
    async def chat(body: ChatRequest, request: Request) -> ChatResponse | Response:
        """Answer the conversation, grounded in retrieved context."""
        chat_pipeline: ChatPipeline = request.app.state.pipeline
        try:
            content = await run_until_disconnected(request, chat_pipeline.run(body.messages))
        except ClientDisconnected:
            logger.info("Client disconnected; chat request cancelled")
            return Response(status_code=CLIENT_CLOSED_REQUEST)
        except Exception as exc:
            outcome = classify_error(exc)
            if outcome.status_code >= 500:
                logger.exception("Error in chat route")
            else:
                logger.warning("Chat request rejected (%d): %s", outcome.status_code, exc)
            return JSONResponse(
                status_code=outcome.status_code,
                content=ErrorResponse(error=outcome.message).model_dump(),
            )
        return ChatResponse(content=content)

    return app


app = create_app()


def main() -> None:
    """Console entry point: validate settings, then serve with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run("wellness_rag.serving.app:app", host=settings.host, port=settings.port)
