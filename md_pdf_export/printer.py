"""
HTML to PDF printing through Chrome's headless command-line mode.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import subprocess
from pathlib import Path
from typing import List, Union

from .config import DEFAULT_VIRTUAL_TIME_BUDGET_MS
from .errors import PrintToPdfError

PathLike = Union[str, Path]


def build_chrome_args(
    html_file_path: PathLike,
    pdf_output_path: PathLike,
    virtual_time_budget: int = DEFAULT_VIRTUAL_TIME_BUDGET_MS,
) -> List[str]:
    """Command-line flags for printing one local HTML file to PDF."""
    file_url = Path(html_file_path).absolute().as_uri()
    return [
        '--headless=new',
        '--disable-gpu',
        '--no-first-run',
        '--no-default-browser-check',
        '--allow-file-access-from-files',
        # Lets the diagram readiness loop run before the page is printed
        f'--virtual-time-budget={virtual_time_budget}',
        '--print-to-pdf-no-header',
        f'--print-to-pdf={pdf_output_path}',
        file_url,
    ]


def run_chrome_print_to_pdf(
    chrome_path: PathLike,
    html_file_path: PathLike,
    pdf_output_path: PathLike,
    virtual_time_budget: int = DEFAULT_VIRTUAL_TIME_BUDGET_MS,
) -> None:
    """Print ``html_file_path`` to ``pdf_output_path`` with a headless browser.

    Blocks until the browser exits. Exit status zero is success; anything
    else raises PrintToPdfError carrying the browser's stderr, or the exit
    code when stderr is empty. There is no retry.
    """
    cmd = [str(chrome_path)] + build_chrome_args(html_file_path, pdf_output_path, virtual_time_budget)

    try:
        result = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise PrintToPdfError(f"Failed to start {chrome_path}: {e}") from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise PrintToPdfError(stderr or f"Chrome exit code {result.returncode}", result.returncode)
