"""
Renderer selection.
"""
import logging

from app.core import config
from app.pdf.browser_renderer import BrowserRenderer
from app.pdf.renderer import Renderer
from app.pdf.wkhtmltopdf_renderer import WkhtmltopdfRenderer

logger = logging.getLogger(__name__)

RENDERERS = {
    "browser": BrowserRenderer,
    "wkhtmltopdf": WkhtmltopdfRenderer,
}


def get_renderer(name: str = None) -> Renderer:
    """
    Build the renderer configured by ``PDF_RENDERER``.

    Args:
        name: "browser" or "wkhtmltopdf"; defaults to the configured one

    Returns:
        An unstarted Renderer
    """
    name = (name or config.PDF_RENDERER).lower()
    if name == "browser":
        renderer = BrowserRenderer(
            timeout_seconds=config.PDF_RENDER_TIMEOUT_SECONDS,
            max_concurrent_pages=config.PDF_MAX_CONCURRENT_PAGES,
        )
    elif name == "wkhtmltopdf":
        renderer = WkhtmltopdfRenderer(
            timeout_seconds=config.PDF_RENDER_TIMEOUT_SECONDS,
            binary=config.WKHTMLTOPDF_PATH,
        )
    else:
        raise ValueError(f"Unknown PDF renderer '{name}'. Choose one of: {', '.join(RENDERERS)}")

    logger.info(f"PDF renderer selected: {renderer.name}")
    return renderer
