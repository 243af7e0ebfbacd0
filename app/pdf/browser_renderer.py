"""
Headless Chromium renderer (Playwright).

One browser process is launched at startup and shared by every request.
Each render gets its own page, which is always closed afterwards so pages
never accumulate in the long-lived browser.
"""
import asyncio
import logging
from app.core.errors import RenderError
from app.pdf.renderer import DEFAULT_PAGE_OPTIONS, PageOptions, Renderer

logger = logging.getLogger(__name__)

BROWSER_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-default-apps",
    "--no-first-run",
]


class BrowserRenderer(Renderer):
    """Pooled browser instance, one ephemeral page per render."""

    name = "browser"

    def __init__(
        self,
        page_options: PageOptions = DEFAULT_PAGE_OPTIONS,
        timeout_seconds: float = 30.0,
        max_concurrent_pages: int = 4,
        headless: bool = True,
    ):
        super().__init__(page_options, timeout_seconds)
        self.headless = headless
        self.playwright = None
        self.browser = None
        self._pages = asyncio.Semaphore(max_concurrent_pages)

    async def start(self) -> None:
        """Launch Chromium. Raises if the browser cannot be started."""
        from playwright.async_api import async_playwright

        self.playwright = await async_playwright().start()
        try:
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=BROWSER_LAUNCH_ARGS,
            )
        except Exception:
            await self.playwright.stop()
            self.playwright = None
            raise
        logger.info(f"Browser renderer started: chromium {self.browser.version}")

    async def close(self) -> None:
        if self.browser is not None:
            try:
                await self.browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self.browser = None
        if self.playwright is not None:
            await self.playwright.stop()
            self.playwright = None
        logger.info("Browser renderer stopped")

    def is_ready(self) -> bool:
        return self.browser is not None and self.browser.is_connected()

    def _pdf_options(self) -> dict:
        opts = self.page_options
        return {
            "format": opts.page_size,
            "margin": {
                "top": opts.margin,
                "right": opts.margin,
                "bottom": opts.margin,
                "left": opts.margin,
            },
            "print_background": opts.print_background,
            "scale": 1,
            "prefer_css_page_size": False,
        }

    async def render(self, html: str) -> bytes:
        if not self.is_ready():
            raise RenderError("Browser is not running")
        try:
            async with self._pages:
                return await asyncio.wait_for(self._render_page(html), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Browser render timed out after {self.timeout_seconds}s")
            raise RenderError("Render timed out")
        except RenderError:
            raise
        except Exception as e:
            logger.error(f"Browser render failed: {e}", exc_info=True)
            raise RenderError(str(e)) from e

    async def _render_page(self, html: str) -> bytes:
        page = None
        try:
            page = await self.browser.new_page()
            await page.set_content(html, wait_until="networkidle")
            return await page.pdf(**self._pdf_options())
        finally:
            if page is not None:
                try:
                    await page.close()
                except Exception as e:
                    logger.warning(f"Failed to close render page: {e}")
