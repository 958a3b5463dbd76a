"""
Configuration management for the Markdown to PDF exporter.

Values are resolved in priority order: explicit CLI values, environment
variables, built-in defaults.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

# Browser overrides, consulted in this order
PUPPETEER_PATH_ENV = "PUPPETEER_EXECUTABLE_PATH"
CHROME_PATH_ENV = "CHROME_PATH"

ENV_PREFIX = "MD_PDF_EXPORT_"

DEFAULT_OUTPUT_DIRNAME = "pdf_output"
DEFAULT_CLEANUP_SCRIPT = "kill_chrome.sh"
DEFAULT_VIRTUAL_TIME_BUDGET_MS = 30000
DEFAULT_DIAGRAM_TIMEOUT_MS = 10000
DEFAULT_POLL_INTERVAL_MS = 100
DEFAULT_MERMAID_URL = "https://cdn.jsdelivr.net/npm/mermaid/dist/mermaid.min.js"
DEFAULT_LANGUAGE = "en"


def parse_positive_int(value: Any, name: str) -> int:
    """Parse a strictly positive integer setting, raising ValueError otherwise."""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid value for {name}: '{value}'. Expected a positive integer.")
    if parsed <= 0:
        raise ValueError(f"Invalid value for {name}: '{value}'. Expected a positive integer.")
    return parsed


class Config:
    """Resolved exporter settings."""

    ENV_KEYS = {
        "source_dir": ENV_PREFIX + "SOURCE",
        "output_dir": ENV_PREFIX + "OUTPUT",
        "cleanup_script": ENV_PREFIX + "CLEANUP_SCRIPT",
        "virtual_time_budget": ENV_PREFIX + "VIRTUAL_TIME_BUDGET",
        "diagram_timeout": ENV_PREFIX + "DIAGRAM_TIMEOUT",
        "poll_interval": ENV_PREFIX + "POLL_INTERVAL",
        "mermaid_url": ENV_PREFIX + "MERMAID_URL",
        "language": ENV_PREFIX + "LANG",
    }

    def __init__(self, cli_config: Optional[Dict[str, Any]] = None, environ: Optional[Dict[str, str]] = None):
        self._cli = {k: v for k, v in (cli_config or {}).items() if v is not None}
        self._env = os.environ if environ is None else environ

    def _get(self, key: str) -> Optional[Any]:
        if key in self._cli:
            return self._cli[key]
        value = self._env.get(self.ENV_KEYS[key])
        if value:
            return value
        return None

    def get_source_dir(self) -> Path:
        value = self._get("source_dir")
        return Path(value).resolve() if value else Path.cwd().resolve()

    def get_output_dir(self) -> Path:
        value = self._get("output_dir")
        if value:
            return Path(value).resolve()
        return self.get_source_dir() / DEFAULT_OUTPUT_DIRNAME

    def get_cleanup_script(self) -> Path:
        value = self._get("cleanup_script")
        if value:
            return Path(value).resolve()
        return self.get_source_dir() / DEFAULT_CLEANUP_SCRIPT

    def get_virtual_time_budget(self) -> int:
        """Milliseconds of virtual time Chrome grants page scripts before printing."""
        value = self._get("virtual_time_budget")
        if value is None:
            return DEFAULT_VIRTUAL_TIME_BUDGET_MS
        return parse_positive_int(value, "virtual time budget")

    def get_diagram_timeout(self) -> int:
        """Milliseconds a single diagram may take to render before it is skipped."""
        value = self._get("diagram_timeout")
        if value is None:
            return DEFAULT_DIAGRAM_TIMEOUT_MS
        return parse_positive_int(value, "diagram timeout")

    def get_poll_interval(self) -> int:
        """Milliseconds between checks for a rendered diagram."""
        value = self._get("poll_interval")
        if value is None:
            return DEFAULT_POLL_INTERVAL_MS
        return parse_positive_int(value, "poll interval")

    def get_mermaid_url(self) -> str:
        return self._get("mermaid_url") or DEFAULT_MERMAID_URL

    def get_language(self) -> str:
        return self._get("language") or DEFAULT_LANGUAGE

    def validate(self) -> None:
        """Parse every numeric setting once so bad values fail before any work starts."""
        self.get_virtual_time_budget()
        self.get_diagram_timeout()
        self.get_poll_interval()
