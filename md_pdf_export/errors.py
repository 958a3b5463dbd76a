"""
Exception types raised while exporting documents.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from typing import Optional

from .config import CHROME_PATH_ENV, PUPPETEER_PATH_ENV


class MarkdownExportError(Exception):
    """Base class for export failures."""


class BrowserNotFoundError(MarkdownExportError):
    """No usable Chrome/Chromium executable could be located.

    Fatal for the whole run: every remaining document would fail the same way.
    """

    def __init__(self, message: str = ""):
        if not message:
            message = (
                "Chrome/Chromium not found. Install Google Chrome or Chromium "
                f"(or set {CHROME_PATH_ENV}/{PUPPETEER_PATH_ENV} to the browser executable)."
            )
        super().__init__(message)


class PrintToPdfError(MarkdownExportError):
    """The headless browser failed to print a document."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode
