"""
Markdown to PDF export through headless Chrome.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from .browser import require_chrome_executable_path, resolve_chrome_executable_path
from .config import Config
from .errors import BrowserNotFoundError, MarkdownExportError, PrintToPdfError
from .exporter import ExportSummary, MarkdownPdfExporter, list_markdown_files, main
from .html_composer import create_html_template
from .printer import run_chrome_print_to_pdf

__version__ = "1.0.0"

__all__ = [
    "BrowserNotFoundError",
    "Config",
    "ExportSummary",
    "MarkdownExportError",
    "MarkdownPdfExporter",
    "PrintToPdfError",
    "create_html_template",
    "list_markdown_files",
    "main",
    "require_chrome_executable_path",
    "resolve_chrome_executable_path",
    "run_chrome_print_to_pdf",
]
