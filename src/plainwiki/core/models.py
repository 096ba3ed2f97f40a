"""Data models for PlainWiki."""

from pydantic import BaseModel, Field

# Page titles double as file names, so only plain alphanumerics are allowed.
TITLE_PATTERN = r"[a-zA-Z0-9]+"


class Page(BaseModel):
    """Represents a wiki page."""

    title: str = Field(pattern=rf"^{TITLE_PATTERN}$")
    body: bytes = b""

    @property
    def text(self) -> str:
        """Return the body decoded for display."""
        return self.body.decode("utf-8", errors="replace")

    @property
    def filename(self) -> str:
        """Name of the file backing this page."""
        return self.title + ".txt"
