"""Title-bearing route validation and dispatch.

Every URL of the form ``/<action>/<title>`` goes through ``make_handler``
before reaching a page handler. It is the only place a title taken from the
request path is checked, and the page store trusts it.
"""

import logging
import re
from typing import Awaitable, Callable

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response

from plainwiki.core.models import TITLE_PATTERN

logger = logging.getLogger(__name__)

ACTIONS = ("edit", "save", "view")

PATH_PATTERN = re.compile(rf"^/({'|'.join(ACTIONS)})/({TITLE_PATTERN})$")

NOT_FOUND_TEXT = "404 page not found"

TitleHandler = Callable[[Request, str], Awaitable[Response]]
Endpoint = Callable[[Request], Awaitable[Response]]


def parse_path(path: str) -> tuple[str, str] | None:
    """Split a request path into (action, title).

    Returns None when the path is not one of the allowed actions followed
    by a single alphanumeric title.
    """
    match = PATH_PATTERN.fullmatch(path)
    if match is None:
        return None
    return match.group(1), match.group(2)


def not_found() -> Response:
    """Plain 404 response used for every unroutable path."""
    return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)


def make_handler(fn: TitleHandler) -> Endpoint:
    """Wrap a title-taking handler into a plain request endpoint."""

    async def endpoint(request: Request) -> Response:
        parsed = parse_path(request.url.path)
        if parsed is None:
            logger.debug("Rejected path %r", request.url.path)
            return not_found()
        _, title = parsed
        return await fn(request, title)

    endpoint.__name__ = getattr(fn, "__name__", "endpoint")
    return endpoint
