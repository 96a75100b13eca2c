import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from gateway import qr
from gateway.config import (
    FAIL_FAST,
    HTTP_PORT,
    LOG_BACKUP_COUNT,
    LOG_FILE,
    LOG_LEVEL,
    LOG_MAX_BYTES,
    VIEWER_BASE,
)
from gateway.pages import render_index, render_invited
from gateway.pull import SourceError, create_invite, first
from gateway.schemas import HealthResponse, InvitationResponse
from gateway.viewer import make_viewer

PUBLIC_DIR = Path(__file__).parent / "public"


def _setup_gateway_logging() -> None:
    gateway_logger = logging.getLogger("gateway")
    if getattr(gateway_logger, "_configured", False):
        return

    level = getattr(logging, LOG_LEVEL, logging.INFO)

    gateway_logger.setLevel(level)
    gateway_logger.propagate = False

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    gateway_logger.addHandler(stream_handler)

    if LOG_FILE:
        try:
            os.makedirs(os.path.dirname(LOG_FILE) or ".", exist_ok=True)
            file_handler = RotatingFileHandler(
                LOG_FILE,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            gateway_logger.addHandler(file_handler)
        except Exception:
            gateway_logger.exception("Failed to configure GATEWAY_LOG_FILE=%r", LOG_FILE)

    gateway_logger._configured = True


_setup_gateway_logging()
logger = logging.getLogger(__name__)

FatalHandler = Callable[[Any], None]


def report_if_error(err: Any) -> None:
    """Log an invitation failure and exit; the process supervisor restarts us."""
    if not err:
        return
    if isinstance(err, BaseException):
        logger.critical("Could not create invitation, exiting", exc_info=err)
    else:
        logger.critical("Could not create invitation, exiting: %r", err)
    logging.shutdown()
    os._exit(1)


def _invitation_unavailable(err: Any) -> None:
    logger.error("Could not create invitation: %r", err)


def create_app(
    node: Any,
    *,
    port: Optional[int] = None,
    fatal_handler: Optional[FatalHandler] = None,
    viewer_base: str = VIEWER_BASE,
) -> FastAPI:
    """
    Build the gateway for ``node``.

    ``fatal_handler`` receives the error of a failed invitation. It defaults to
    ``report_if_error`` (exit the process) when GATEWAY_FAIL_FAST is on, and to
    logging only otherwise. Either way the failed request is answered 503 if
    the handler returns.
    """
    if fatal_handler is None:
        fatal_handler = report_if_error if FAIL_FAST else _invitation_unavailable
    port = port or HTTP_PORT

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Runs before uvicorn binds; uvicorn logs the bound address itself
        logger.info("Gateway starting on port %s", app.state.port)
        yield

    app = FastAPI(
        title="Bot Gateway",
        description="Identity, invitations and a message viewer for a peer-to-peer node",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.port = port
    app.state.node = node

    # The identity never changes; its code is computed once and shared read-only
    id_qr = qr.render(node.id)
    app.state.id_qr = id_qr

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled exception method=%s path=%s request_id=%s",
                request.method,
                str(request.url),
                request_id,
            )
            response = JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
            )
        duration_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "HTTP %s %s status=%s ms=%.1f request_id=%s",
            request.method,
            str(request.url),
            response.status_code,
            duration_ms,
            request_id,
        )
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        request_id = getattr(getattr(request, "state", None), "request_id", None)
        logger.exception(
            "Unhandled exception (handler) method=%s path=%s request_id=%s",
            request.method,
            str(request.url),
            request_id,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal Server Error", "request_id": request_id},
        )

    async def take_invitation() -> str:
        # A fresh source per request; nothing is shared between invite requests
        try:
            return await first(create_invite(node, 1))
        except Exception as e:
            fatal_handler(e.error if isinstance(e, SourceError) else e)
            raise HTTPException(status_code=503, detail="Could not create invitation")

    @app.get("/", response_class=HTMLResponse)
    async def identity():
        return HTMLResponse(content=render_index(node.id, id_qr))

    @app.get("/invited", response_class=HTMLResponse)
    async def invited():
        invitation = await take_invitation()
        return HTMLResponse(content=render_invited(invitation, qr.render(invitation)))

    @app.get("/invited/json", response_model=InvitationResponse)
    async def invited_json():
        invitation = await take_invitation()
        return InvitationResponse(invitation=invitation)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="healthy", timestamp=datetime.now(UTC))

    app.mount(viewer_base.rstrip("/"), make_viewer(node, base=viewer_base), name="viewer")
    app.mount("/", StaticFiles(directory=PUBLIC_DIR), name="static")

    return app
