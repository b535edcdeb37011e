"""Utilities for rendering PDFs with headless Chromium."""

from __future__ import annotations

import logging
from typing import Any, Callable

from playwright.sync_api import sync_playwright

from career_matcher.errors import UpstreamError
from career_matcher.models import AnalysisResult, ImprovedCV
from career_matcher.services import report_composer

_LOGGER = logging.getLogger(__name__)

PAGE_FORMAT = "A4"
PAGE_MARGIN = {"top": "15mm", "right": "15mm", "bottom": "15mm", "left": "15mm"}
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class PdfRenderer:
    """Render HTML strings to PDF bytes, one browser process per call."""

    def __init__(self, playwright_factory: Callable[[], Any] = sync_playwright) -> None:
        self._playwright_factory = playwright_factory

    def render(self, html: str) -> bytes:
        try:
            with self._playwright_factory() as playwright:
                browser = playwright.chromium.launch(headless=True, args=BROWSER_ARGS)
                try:
                    page = browser.new_page()
                    page.set_content(html, wait_until="networkidle")
                    return page.pdf(
                        format=PAGE_FORMAT,
                        margin=dict(PAGE_MARGIN),
                        print_background=True,
                        prefer_css_page_size=False,
                    )
                finally:
                    browser.close()
        except Exception as exc:
            _LOGGER.warning("Chromium PDF rendering failed", exc_info=True)
            raise UpstreamError(f"PDF generation failed: {exc}") from exc

    def generate_analysis_report(self, analysis: AnalysisResult) -> bytes:
        return self.render(report_composer.render_analysis_report(analysis))

    def generate_improved_cv(self, cv: ImprovedCV, template: int = 1) -> bytes:
        return self.render(report_composer.render_cv(cv, template))
