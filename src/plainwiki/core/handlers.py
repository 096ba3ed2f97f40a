"""Request handlers for the wiki routes."""

import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from plainwiki.core.models import Page
from plainwiki.core.storage import Storage, StorageError
from plainwiki.core.templates import TemplateRenderer

logger = logging.getLogger(__name__)


class WikiHandlers:
    """Home, view, edit and save handlers bound to one store and renderer."""

    def __init__(self, storage: Storage, renderer: TemplateRenderer, home_title: str = "homePage"):
        self.storage = storage
        self.renderer = renderer
        self.home_title = home_title

    async def home(self, request: Request) -> Response:
        """Home page - the home page content plus a list of all pages."""
        try:
            page = await self.storage.load(self.home_title)
        except StorageError:
            page = None
        pages = await self.storage.list_pages()
        return self.renderer.render("home", page, pages=pages, home_title=self.home_title)

    async def view(self, request: Request, title: str) -> Response:
        """View a wiki page."""
        try:
            page = await self.storage.load(title)
        except StorageError:
            # Page doesn't exist - redirect to edit to create it
            return RedirectResponse(url=f"/edit/{title}", status_code=302)
        return self.renderer.render("view", page)

    async def edit(self, request: Request, title: str) -> Response:
        """Edit page form."""
        try:
            page = await self.storage.load(title)
            exists = True
        except StorageError:
            # New page
            page = Page(title=title)
            exists = False
        return self.renderer.render("edit", page, exists=exists)

    async def save(self, request: Request, title: str) -> Response:
        """Save page content."""
        form = await request.form()
        body = form.get("body") or ""
        if not isinstance(body, str):
            body = await body.read()
        try:
            await self.storage.save(title, body)
        except StorageError as exc:
            return PlainTextResponse(str(exc), status_code=500)
        logger.info("Page %s saved", title)
        return RedirectResponse(url=f"/view/{title}", status_code=302)
