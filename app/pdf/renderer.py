"""
Renderer interface for turning composed HTML into PDF bytes.
"""
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass


@dataclass(frozen=True)
class PageOptions:
    """Fixed page geometry for every export."""
    page_size: str = "A4"
    margin_px: int = 30
    print_background: bool = True
    # Keep literal font sizes instead of shrinking content to fit
    shrink_to_fit: bool = False

    @property
    def margin(self) -> str:
        return f"{self.margin_px}px"


DEFAULT_PAGE_OPTIONS = PageOptions()


class Renderer(ABC):
    """Abstract base class for HTML-to-PDF renderers."""

    name: str = "renderer"

    def __init__(self, page_options: PageOptions = DEFAULT_PAGE_OPTIONS, timeout_seconds: float = 30.0):
        self.page_options = page_options
        self.timeout_seconds = timeout_seconds

    async def start(self) -> None:
        """Acquire long-lived resources. Called once before serving."""

    async def close(self) -> None:
        """Release long-lived resources. Called once at shutdown."""

    def is_ready(self) -> bool:
        return True

    @abstractmethod
    async def render(self, html: str) -> bytes:
        """
        Render a complete HTML document to PDF.

        Args:
            html: Full HTML document, styles inlined

        Returns:
            PDF file contents

        Raises:
            RenderError: If the engine fails or the timeout elapses
        """

    async def stream(self, html: str, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        """
        Yield the PDF in chunks.

        The default renders fully and slices; converters that produce output
        incrementally override this.
        """
        pdf = await self.render(html)
        for start in range(0, len(pdf), chunk_size):
            yield pdf[start:start + chunk_size]
