#!/usr/bin/env python3
"""
Export every Markdown file in a project root to PDF.

Each document is rendered to a standalone HTML page (with Mermaid diagrams)
and printed by Chrome/Chromium in headless mode. Documents are processed one
at a time: every conversion spawns its own browser process.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import List, NamedTuple, Optional

from colorama import Fore, Style, init
from tqdm import tqdm

from .browser import require_chrome_executable_path
from .config import (
    DEFAULT_DIAGRAM_TIMEOUT_MS,
    DEFAULT_LANGUAGE,
    DEFAULT_MERMAID_URL,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_VIRTUAL_TIME_BUDGET_MS,
    Config,
)
from .dependencies import check_dependencies
from .errors import BrowserNotFoundError, MarkdownExportError
from .html_composer import create_html_template, extract_title
from .printer import run_chrome_print_to_pdf

# Initialize colorama for cross-platform colored output
init(autoreset=True)

MARKDOWN_SUFFIX = ".md"
TEMP_DIR_PREFIX = "md-pdf-export-"
RULE = "═" * 59


class ExportSummary(NamedTuple):
    """Outcome of one export run."""
    succeeded: int
    failed: int
    total: int
    output_dir: Path


def list_markdown_files(project_root: Path) -> List[Path]:
    """List the Markdown files directly inside ``project_root`` (no recursion), sorted by name."""
    project_root = Path(project_root)
    return sorted(
        path for path in project_root.iterdir()
        if path.is_file() and path.name.endswith(MARKDOWN_SUFFIX)
    )


def display_file_list(files: List[Path]) -> None:
    """Print the numbered list of files that will be processed."""
    print(f"\n{RULE}")
    print("  Files to process:")
    print(f"{RULE}\n")

    for index, md_file in enumerate(files, start=1):
        print(f"  {index}. {md_file.name} → {md_file.stem}.pdf")

    print(f"\n{RULE}\n")


class MarkdownPdfExporter:
    """Sequential Markdown → HTML → PDF exporter driven by headless Chrome."""

    def __init__(self, source_dir: str, output_dir: str, cleanup_script: Optional[str] = None,
                 virtual_time_budget: int = DEFAULT_VIRTUAL_TIME_BUDGET_MS,
                 diagram_timeout: int = DEFAULT_DIAGRAM_TIMEOUT_MS,
                 poll_interval: int = DEFAULT_POLL_INTERVAL_MS,
                 mermaid_url: str = DEFAULT_MERMAID_URL, language: str = DEFAULT_LANGUAGE,
                 save_html: bool = False, show_progress: bool = True, debug: bool = False):
        """Initialize the exporter.

        Args:
            cleanup_script: Shell script run after all documents are processed; None disables it
            virtual_time_budget: Milliseconds of page time Chrome allows before printing
            diagram_timeout: Milliseconds a single diagram may take before it is given up on
            poll_interval: Milliseconds between in-page checks for a rendered diagram
            save_html: If True, keep the composed HTML in output_dir/html/
        """
        self.source_dir = Path(source_dir)
        self.output_dir = Path(output_dir)
        self.cleanup_script = Path(cleanup_script) if cleanup_script else None
        self.virtual_time_budget = virtual_time_budget
        self.diagram_timeout = diagram_timeout
        self.poll_interval = poll_interval
        self.mermaid_url = mermaid_url
        self.language = language
        self.show_progress = show_progress
        self.debug = debug
        self.html_dir = self.output_dir / "html" if save_html else None
        # Located by the first document that needs it, then reused for the run
        self._chrome_path: Optional[str] = None

    @classmethod
    def from_config(cls, config: Config, save_html: bool = False, show_progress: bool = True,
                    use_cleanup_script: bool = True, debug: bool = False) -> "MarkdownPdfExporter":
        """Build an exporter from resolved configuration."""
        return cls(
            config.get_source_dir(),
            config.get_output_dir(),
            cleanup_script=config.get_cleanup_script() if use_cleanup_script else None,
            virtual_time_budget=config.get_virtual_time_budget(),
            diagram_timeout=config.get_diagram_timeout(),
            poll_interval=config.get_poll_interval(),
            mermaid_url=config.get_mermaid_url(),
            language=config.get_language(),
            save_html=save_html,
            show_progress=show_progress,
            debug=debug,
        )

    def _log_debug(self, message: str) -> None:
        """Log debug message with color (only if debug mode is enabled)."""
        if self.debug:
            tqdm.write(f"{Fore.CYAN}[DEBUG]{Style.RESET_ALL} {message}")

    def _log_info(self, message: str) -> None:
        """Log info message with color."""
        tqdm.write(f"{Fore.GREEN}[INFO]{Style.RESET_ALL} {message}")

    def _log_warning(self, message: str) -> None:
        """Log warning message with color."""
        tqdm.write(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {message}")

    def _log_error(self, message: str) -> None:
        """Log error message with color."""
        tqdm.write(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {message}")

    def _log_success(self, message: str) -> None:
        """Log success message with color."""
        tqdm.write(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {message}")

    def compose_html(self, md_file: Path) -> str:
        """Read one Markdown file and build its standalone HTML document."""
        content = md_file.read_text(encoding="utf-8")
        return create_html_template(
            content,
            title=extract_title(content, md_file),
            language=self.language,
            mermaid_url=self.mermaid_url,
            diagram_timeout=self.diagram_timeout,
            poll_interval=self.poll_interval,
        )

    def _locate_browser(self) -> str:
        """Return the browser executable, looking it up only once per exporter."""
        if self._chrome_path is None:
            self._chrome_path = require_chrome_executable_path()
            self._log_debug(f"Using browser: {self._chrome_path}")
        return self._chrome_path

    def export_file(self, md_file: Path) -> Path:
        """Export a single Markdown file. Returns the PDF path.

        Raises BrowserNotFoundError when no browser is available and
        PrintToPdfError when the browser fails; read errors propagate as-is.
        """
        self._log_info(f"Processing: {md_file.name}")

        html_content = self.compose_html(md_file)
        chrome_path = self._locate_browser()

        output_pdf = self.output_dir / f"{md_file.stem}.pdf"
        temp_dir = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX))
        try:
            temp_html = temp_dir / f"{md_file.stem}.html"
            temp_html.write_text(html_content, encoding="utf-8")

            if self.html_dir:
                self.html_dir.mkdir(parents=True, exist_ok=True)
                shutil.copy2(temp_html, self.html_dir / temp_html.name)
                self._log_debug(f"Saved HTML to {self.html_dir / temp_html.name}")

            run_chrome_print_to_pdf(chrome_path, temp_html, output_pdf, self.virtual_time_budget)
        finally:
            # Best-effort: a leftover temp file is harmless
            shutil.rmtree(temp_dir, ignore_errors=True)

        self._log_success(f"Generated: {output_pdf.name}")
        return output_pdf

    def run_cleanup_script(self) -> None:
        """Run the post-export cleanup script if present. Never raises."""
        if self.cleanup_script is None:
            return

        script_name = self.cleanup_script.name
        if not self.cleanup_script.exists():
            self._log_warning(f"Script {script_name} not found. Skipping...")
            return

        self._log_info("Stopping Chrome processes...")
        try:
            result = subprocess.run(
                ["bash", str(self.cleanup_script)],
                cwd=str(self.source_dir),
                capture_output=True,
                text=True,
            )
        except OSError as e:
            self._log_warning(f"Error running {script_name}: {e}")
            return

        if result.returncode != 0:
            reason = result.stderr.strip() or f"exit code {result.returncode}"
            self._log_warning(f"Error running {script_name}: {reason}")
        elif result.stdout:
            print(result.stdout.rstrip())

    def _print_summary(self, summary: ExportSummary) -> None:
        print(f"\n{RULE}")
        print("  Export summary:")
        print(RULE)
        print(f"  {Fore.GREEN}✓{Style.RESET_ALL} Succeeded: {summary.succeeded} file(s)")
        if summary.failed > 0:
            print(f"  {Fore.RED}✗{Style.RESET_ALL} Errors: {summary.failed} file(s)")
        print(f"  Total: {summary.total} file(s)")
        print(f"  PDFs saved to: {summary.output_dir}")
        print(f"{RULE}\n")

    def export_all(self) -> ExportSummary:
        """Export every Markdown file in the source directory, one at a time.

        A failing document is logged and counted; the run moves on to the
        next one. BrowserNotFoundError is not caught here and ends the run.
        """
        md_files = list_markdown_files(self.source_dir)

        if not md_files:
            self._log_warning("No Markdown files found in the project root.")
            return ExportSummary(0, 0, 0, self.output_dir)

        display_file_list(md_files)
        print(f"Total: {len(md_files)} Markdown file(s) found.")
        print(f"Output directory: {self.output_dir}\n")

        self.output_dir.mkdir(parents=True, exist_ok=True)

        success_count = 0
        failed_count = 0

        with tqdm(total=len(md_files), desc="Exporting", unit="file", disable=not self.show_progress) as pbar:
            for md_file in md_files:
                try:
                    self.export_file(md_file)
                    success_count += 1
                except BrowserNotFoundError:
                    raise
                except Exception as e:
                    self._log_error(f"Error processing {md_file.name}: {e}")
                    failed_count += 1
                finally:
                    pbar.update(1)

        summary = ExportSummary(success_count, failed_count, len(md_files), self.output_dir)
        self._print_summary(summary)

        self.run_cleanup_script()
        return summary


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Export the Markdown files of a project root to PDF with headless Chrome (Mermaid diagrams supported)")
    parser.add_argument("--source", default=None, help="Project root holding the .md files (default: from env or current directory)")
    parser.add_argument("--output-dir", default=None, help="Output directory for PDFs (default: <source>/pdf_output)")
    parser.add_argument("--cleanup-script", default=None, help="Script run with bash after the export (default: <source>/kill_chrome.sh)")
    parser.add_argument("--no-cleanup-script", action="store_true", help="Do not run the cleanup script after the export")
    parser.add_argument("--virtual-time-budget", default=None, help=f"Milliseconds Chrome lets page scripts run before printing (default: {DEFAULT_VIRTUAL_TIME_BUDGET_MS})")
    parser.add_argument("--diagram-timeout", default=None, help=f"Milliseconds to wait for each Mermaid diagram (default: {DEFAULT_DIAGRAM_TIMEOUT_MS})")
    parser.add_argument("--poll-interval", default=None, help=f"Milliseconds between checks for a rendered diagram (default: {DEFAULT_POLL_INTERVAL_MS})")
    parser.add_argument("--lang", default=None, help=f"Value of the HTML lang attribute (default: {DEFAULT_LANGUAGE})")
    parser.add_argument("--save-html", action="store_true", help="Keep the composed HTML files in <output-dir>/html/")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("--check-deps", action="store_true", help="Report on required dependencies and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging for detailed output")

    args = parser.parse_args(argv)

    cli_config = {
        "source_dir": args.source,
        "output_dir": args.output_dir,
        "cleanup_script": args.cleanup_script,
        "virtual_time_budget": args.virtual_time_budget,
        "diagram_timeout": args.diagram_timeout,
        "poll_interval": args.poll_interval,
        "language": args.lang,
    }
    config = Config(cli_config)

    try:
        config.validate()
    except ValueError as e:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {e}")
        sys.exit(1)

    if args.check_deps:
        sys.exit(0 if check_dependencies() else 1)

    exporter = MarkdownPdfExporter.from_config(
        config,
        save_html=args.save_html,
        show_progress=not args.no_progress,
        use_cleanup_script=not args.no_cleanup_script,
        debug=args.debug,
    )

    try:
        exporter.export_all()
    except (MarkdownExportError, OSError) as e:
        print(f"\n{Fore.RED}✗ Fatal error:{Style.RESET_ALL} {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
