"""PlainWiki FastAPI application.

Run with:
    plainwiki
or:
    uvicorn --factory plainwiki.main:create_app --host 0.0.0.0 --port 8080
"""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from plainwiki.config import Settings
from plainwiki.core.handlers import WikiHandlers
from plainwiki.core.routing import make_handler, not_found
from plainwiki.core.storage import FileStorage
from plainwiki.core.templates import TemplateLoadError, TemplateRenderer

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the wiki application.

    Templates are loaded before anything is registered; TemplateLoadError
    propagates to the caller so a broken template set never serves.
    """
    settings = settings or Settings()

    renderer = TemplateRenderer(
        settings.templates_dir,
        shared={"app_title": settings.app_title},
    )
    storage = FileStorage(settings.data_dir)
    handlers = WikiHandlers(storage, renderer, home_title=settings.home_title)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: log where pages are served from."""
        logger.info("Serving pages from %s", settings.data_dir.resolve())
        yield

    app = FastAPI(
        title=settings.app_title,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )

    app.add_route("/", handlers.home, methods=["GET"])
    app.add_route("/view/{rest:path}", make_handler(handlers.view), methods=["GET"])
    app.add_route("/edit/{rest:path}", make_handler(handlers.edit), methods=["GET"])
    app.add_route("/save/{rest:path}", make_handler(handlers.save), methods=["POST"])

    @app.exception_handler(StarletteHTTPException)
    async def plain_not_found(request: Request, exc: StarletteHTTPException) -> Response:
        """Answer unknown paths with the same 404 as rejected titles."""
        if exc.status_code == 404:
            return not_found()
        return await http_exception_handler(request, exc)

    return app


def run() -> None:
    """Console entry point: build the app and serve it with uvicorn."""
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        app = create_app(settings)
    except TemplateLoadError:
        logger.exception("Cannot start: template set failed to load")
        sys.exit(1)

    logger.info("Listening on %s:%d", settings.host, settings.port)
    # uvicorn exits the process itself if the socket cannot be bound
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
