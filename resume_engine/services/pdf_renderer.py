"""HTML to PDF through headless Chromium."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

from playwright.async_api import async_playwright

from resume_engine.rendering.common import page_dimensions

logger = logging.getLogger(__name__)

PageFormat = Literal["A4", "Letter"]

CHROMIUM_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
)


class RenderFailure(RuntimeError):
    """The PDF collaborator failed or timed out."""


def _default_margins() -> dict[str, str]:
    return {"top": "0mm", "right": "0mm", "bottom": "0mm", "left": "0mm"}


@dataclass(frozen=True)
class PdfOptions:
    format: PageFormat = "A4"
    margins: dict[str, str] = field(default_factory=_default_margins)


class PdfRenderer(Protocol):
    async def to_pdf(self, html: str, options: PdfOptions) -> bytes: ...


class PlaywrightPdfRenderer:
    def __init__(self, timeout_seconds: float = 30.0):
        self.timeout_seconds = timeout_seconds

    async def _render(self, html: str, options: PdfOptions) -> bytes:
        width, height = page_dimensions(options.format)
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True, args=list(CHROMIUM_ARGS))
            try:
                page = await browser.new_page(viewport={"width": width, "height": height})
                await page.set_content(html, wait_until="networkidle")
                return await page.pdf(
                    format=options.format,
                    margin=dict(options.margins),
                    print_background=True,
                )
            finally:
                await browser.close()

    async def to_pdf(self, html: str, options: PdfOptions) -> bytes:
        try:
            return await asyncio.wait_for(self._render(html, options), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.warning("pdf_render_timeout timeout_s=%s", self.timeout_seconds)
            raise RenderFailure(f"PDF rendering timed out after {self.timeout_seconds:g}s") from exc
        except Exception as exc:
            logger.warning("pdf_render_failed error=%s", exc)
            raise RenderFailure(f"PDF rendering failed: {exc}") from exc
