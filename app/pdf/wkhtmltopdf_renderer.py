"""
wkhtmltopdf renderer.

Spawns one converter process per request; nothing is shared between
requests. HTML goes in on stdin and the PDF streams out of stdout.
"""
import asyncio
import logging
import shutil
from collections.abc import AsyncIterator

from app.core.errors import RenderError
from app.pdf.renderer import DEFAULT_PAGE_OPTIONS, PageOptions, Renderer

logger = logging.getLogger(__name__)

# Bytes of converter stderr kept for the failure log
STDERR_LIMIT = 8 * 1024


class WkhtmltopdfRenderer(Renderer):
    """Stateless converter process per render."""

    name = "wkhtmltopdf"

    def __init__(
        self,
        page_options: PageOptions = DEFAULT_PAGE_OPTIONS,
        timeout_seconds: float = 30.0,
        binary: str = "wkhtmltopdf",
    ):
        super().__init__(page_options, timeout_seconds)
        self.binary = binary

    def is_ready(self) -> bool:
        return shutil.which(self.binary) is not None

    async def start(self) -> None:
        if not self.is_ready():
            logger.warning(f"wkhtmltopdf binary not found on PATH: {self.binary}")

    def command(self) -> list:
        opts = self.page_options
        args = [
            self.binary,
            "--quiet",
            "--encoding", "utf-8",
            "--page-size", opts.page_size,
            "--margin-top", opts.margin,
            "--margin-right", opts.margin,
            "--margin-bottom", opts.margin,
            "--margin-left", opts.margin,
            "--background" if opts.print_background else "--no-background",
        ]
        if not opts.shrink_to_fit:
            args.append("--disable-smart-shrinking")
        # Read HTML from stdin, write PDF to stdout
        args.extend(["-", "-"])
        return args

    async def _spawn(self):
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command(),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Failed to start wkhtmltopdf: {e}")
            raise RenderError("PDF converter unavailable") from e
        return process

    @staticmethod
    async def _kill(process) -> None:
        if process.returncode is None:
            process.kill()
            await process.wait()

    async def render(self, html: str) -> bytes:
        process = await self._spawn()
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(html.encode("utf-8")),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"wkhtmltopdf timed out after {self.timeout_seconds}s")
            raise RenderError("Render timed out")
        finally:
            await self._kill(process)

        if process.returncode != 0 or not stdout:
            logger.error(
                f"wkhtmltopdf failed: returncode={process.returncode}, "
                f"stderr={stderr.decode('utf-8', errors='replace')[:500]}"
            )
            raise RenderError("PDF conversion failed")
        return stdout

    async def stream(self, html: str, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        process = await self._spawn()
        loop = asyncio.get_running_loop()
        # Only time spent waiting on the converter counts; a slow reader
        # between chunks does not use up the render timeout
        budget = self.timeout_seconds
        stderr = bytearray()

        async def converter(make_awaitable):
            nonlocal budget
            if budget <= 0:
                raise asyncio.TimeoutError()
            started = loop.time()
            try:
                return await asyncio.wait_for(make_awaitable(), timeout=budget)
            finally:
                budget -= loop.time() - started

        async def feed():
            try:
                process.stdin.write(html.encode("utf-8"))
                await process.stdin.drain()
            except (BrokenPipeError, ConnectionResetError) as e:
                # Converter exited early; its return code reports the failure
                logger.warning(f"wkhtmltopdf closed stdin early: {e}")
            finally:
                process.stdin.close()

        async def drain_stderr():
            # Keep the pipe empty so warnings cannot block the converter
            while True:
                data = await process.stderr.read(4096)
                if not data:
                    break
                stderr.extend(data[: max(STDERR_LIMIT - len(stderr), 0)])

        writer = asyncio.create_task(feed())
        errors = asyncio.create_task(drain_stderr())
        sent = 0
        try:
            while True:
                chunk = await converter(lambda: process.stdout.read(chunk_size))
                if not chunk:
                    break
                sent += len(chunk)
                yield chunk

            await converter(lambda: writer)
            returncode = await converter(process.wait)
            await converter(lambda: errors)
            if returncode != 0 or sent == 0:
                logger.error(
                    f"wkhtmltopdf failed: returncode={returncode}, "
                    f"stderr={stderr.decode('utf-8', errors='replace')[:500]}"
                )
                raise RenderError("PDF conversion failed")
        except asyncio.TimeoutError:
            logger.error(f"wkhtmltopdf stream timed out after {self.timeout_seconds}s")
            raise RenderError("Render timed out")
        finally:
            writer.cancel()
            errors.cancel()
            await self._kill(process)
