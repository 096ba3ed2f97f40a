"""Template registry and rendering.

Templates are loaded once when the renderer is built. A missing or broken
template raises TemplateLoadError so the application never starts with a
partial template set. After construction the registry is read-only and is
shared by every request.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any

from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError, meta

from plainwiki.core.models import Page

logger = logging.getLogger(__name__)

TEMPLATE_NAMES = ("home", "edit", "view")


class TemplateLoadError(Exception):
    """A required template is missing or cannot be parsed."""


class TemplateRenderer:
    """Renders the fixed set of wiki templates against a Page."""

    def __init__(
        self,
        directory: Path,
        names: tuple[str, ...] = TEMPLATE_NAMES,
        shared: dict[str, Any] | None = None,
    ):
        self.env = Environment(
            loader=FileSystemLoader(str(directory)),
            autoescape=True,
            undefined=StrictUndefined,
        )
        self.env.globals.update(shared or {})

        loaded: dict[str, Template] = {}
        for name in names:
            try:
                loaded[name] = self.env.get_template(f"{name}.html")
                self._load_referenced(f"{name}.html", set())
            except TemplateError as exc:
                raise TemplateLoadError(
                    f"cannot load template {name!r} from {directory}: {exc}"
                ) from exc
        self._registry = MappingProxyType(loaded)
        logger.info("Loaded %d templates from %s", len(loaded), directory)

    def _load_referenced(self, filename: str, seen: set[str]) -> None:
        """Load every template that `filename` extends, includes or imports.

        Jinja2 only resolves these lazily, at render time.
        """
        seen.add(filename)
        source, _, _ = self.env.loader.get_source(self.env, filename)
        for ref in meta.find_referenced_templates(self.env.parse(source)):
            # None means a dynamic name that cannot be checked ahead of time
            if ref is None or ref in seen:
                continue
            self.env.get_template(ref)
            self._load_referenced(ref, seen)

    @property
    def names(self) -> tuple[str, ...]:
        """Names of the loaded templates."""
        return tuple(self._registry)

    def render(self, name: str, page: Page | None, **context: Any) -> Response:
        """Render template `name` against `page`.

        The whole document is rendered before a response is built, so a
        failure part way through yields a single 500 response carrying the
        error text instead of a half-written page.
        """
        template = self._registry.get(name)
        if template is None:
            logger.error("Unknown template %r", name)
            return PlainTextResponse(f"template {name!r} is not defined", status_code=500)
        try:
            content = template.render(page=page, **context)
        except TemplateError as exc:
            logger.exception("Failed to render template %r", name)
            return PlainTextResponse(str(exc), status_code=500)
        return HTMLResponse(content)
