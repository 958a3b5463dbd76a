"""
Pre-flight dependency report.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from colorama import Fore, Style

from .browser import resolve_chrome_executable_path
from .config import CHROME_PATH_ENV, PUPPETEER_PATH_ENV


def check_python_package(module_name: str, description: str) -> bool:
    """Check if a Python package can be imported."""
    try:
        __import__(module_name)
    except ImportError:
        print(f"{Fore.RED}✗{Style.RESET_ALL} {description} is not available")
        return False
    print(f"{Fore.GREEN}✓{Style.RESET_ALL} {description} is available")
    return True


def check_dependencies(check_optional: bool = True) -> bool:
    """Report on required tools. Returns True when a browser executable was found."""
    if check_optional:
        # Playwright only serves as the last browser lookup fallback
        check_python_package("playwright", "Playwright (optional Chromium lookup)")

    markdown_available = check_python_package("markdown", "Python-Markdown")

    chrome_path = resolve_chrome_executable_path()
    if chrome_path:
        print(f"{Fore.GREEN}✓{Style.RESET_ALL} Chrome/Chromium found: {chrome_path}")
    else:
        print(f"{Fore.RED}✗{Style.RESET_ALL} Chrome/Chromium not found")
        print(f"  Install Google Chrome or Chromium, or set {CHROME_PATH_ENV} / {PUPPETEER_PATH_ENV}.")

    return markdown_available and chrome_path is not None
