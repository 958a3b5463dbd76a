"""
Shared fixtures for the md_pdf_export tests.
"""

from pathlib import Path

import pytest

from md_pdf_export import exporter as exporter_module
from md_pdf_export.config import CHROME_PATH_ENV, PUPPETEER_PATH_ENV, Config
from md_pdf_export.errors import PrintToPdfError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove browser overrides and exporter settings from the environment."""
    monkeypatch.delenv(PUPPETEER_PATH_ENV, raising=False)
    monkeypatch.delenv(CHROME_PATH_ENV, raising=False)
    for env_key in Config.ENV_KEYS.values():
        monkeypatch.delenv(env_key, raising=False)


@pytest.fixture
def project_root(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def fake_browser(monkeypatch, tmp_path):
    """Stub browser lookup and printing; records every print call."""
    chrome = tmp_path / "fake-chrome"
    chrome.write_text("#!/bin/sh\n")

    class FakeBrowser:
        def __init__(self):
            self.lookups = 0
            self.calls = []
            self.failing = set()

        def locate(self):
            self.lookups += 1
            return str(chrome)

        def print_to_pdf(self, chrome_path, html_file_path, pdf_output_path, virtual_time_budget):
            html_file_path = Path(html_file_path)
            self.calls.append({
                "chrome_path": chrome_path,
                "html_path": html_file_path,
                "html": html_file_path.read_text(encoding="utf-8"),
                "pdf_path": Path(pdf_output_path),
                "virtual_time_budget": virtual_time_budget,
            })
            if html_file_path.stem in self.failing:
                raise PrintToPdfError("renderer crashed", 1)
            Path(pdf_output_path).write_bytes(b"%PDF-1.4\n")

    fake = FakeBrowser()
    monkeypatch.setattr(exporter_module, "require_chrome_executable_path", fake.locate)
    monkeypatch.setattr(exporter_module, "run_chrome_print_to_pdf", fake.print_to_pdf)
    return fake
