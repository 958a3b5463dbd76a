"""Tests for document enumeration and the export run."""

import shutil

import pytest

from md_pdf_export import browser
from md_pdf_export.browser import EnvVarResolver
from md_pdf_export.errors import BrowserNotFoundError
from md_pdf_export.exporter import (
    ExportSummary,
    MarkdownPdfExporter,
    display_file_list,
    list_markdown_files,
    main,
)

requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")


def _exporter(project_root, **kwargs):
    kwargs.setdefault("show_progress", False)
    return MarkdownPdfExporter(project_root, project_root / "pdf_output", **kwargs)


class TestListMarkdownFiles:

    def test_root_only_and_sorted(self, project_root):
        (project_root / "zeta.md").write_text("z")
        (project_root / "alpha.md").write_text("a")
        (project_root / "notes.txt").write_text("not markdown")
        nested = project_root / "docs"
        nested.mkdir()
        (nested / "nested.md").write_text("nested")

        files = list_markdown_files(project_root)

        assert [f.name for f in files] == ["alpha.md", "zeta.md"]

    def test_directories_named_like_markdown_skipped(self, project_root):
        (project_root / "folder.md").mkdir()
        assert list_markdown_files(project_root) == []

    def test_display_file_list(self, project_root, capsys):
        (project_root / "notes.md").write_text("n")
        display_file_list(list_markdown_files(project_root))
        assert "1. notes.md → notes.pdf" in capsys.readouterr().out


class TestExportAllEmptyRoot:

    def test_no_documents_touches_nothing(self, project_root, fake_browser, capsys):
        summary = _exporter(project_root).export_all()

        assert summary == ExportSummary(0, 0, 0, project_root / "pdf_output")
        assert not (project_root / "pdf_output").exists()
        assert fake_browser.lookups == 0
        assert fake_browser.calls == []
        assert "No Markdown files found" in capsys.readouterr().out

    def test_no_documents_skips_cleanup_script(self, project_root, fake_browser, capsys):
        script = project_root / "kill_chrome.sh"
        script.write_text("echo should-not-run\n")
        _exporter(project_root, cleanup_script=script).export_all()
        assert "should-not-run" not in capsys.readouterr().out


class TestExportAll:

    def test_each_document_becomes_named_pdf(self, project_root, fake_browser):
        (project_root / "notes.md").write_text("# Notes\n\nhello")
        (project_root / "plan.md").write_text("# Plan")

        summary = _exporter(project_root).export_all()

        assert summary.succeeded == 2
        assert summary.failed == 0
        assert (project_root / "pdf_output" / "notes.pdf").exists()
        assert (project_root / "pdf_output" / "plan.pdf").exists()
        assert [c["pdf_path"].name for c in fake_browser.calls] == ["notes.pdf", "plan.pdf"]

    def test_nested_documents_not_exported(self, project_root, fake_browser):
        (project_root / "notes.md").write_text("top")
        (project_root / "sub").mkdir()
        (project_root / "sub" / "deep.md").write_text("deep")

        summary = _exporter(project_root).export_all()

        assert summary.total == 1
        assert not (project_root / "pdf_output" / "deep.pdf").exists()

    def test_failure_counted_and_run_continues(self, project_root, fake_browser, capsys):
        for name in ("a.md", "bad.md", "c.md"):
            (project_root / name).write_text(f"# {name}")
        fake_browser.failing.add("bad")

        summary = _exporter(project_root).export_all()

        assert summary.succeeded == 2
        assert summary.failed == 1
        assert summary.succeeded + summary.failed == summary.total == 3
        assert len(fake_browser.calls) == 3
        out = capsys.readouterr().out
        assert "Error processing bad.md: renderer crashed" in out
        assert "Errors: 1 file(s)" in out
        assert "Total: 3 file(s)" in out

    def test_unreadable_document_counted_as_failure(self, project_root, fake_browser):
        (project_root / "binary.md").write_bytes(b"\xff\xfe\x00garbage")
        (project_root / "text.md").write_text("fine")

        summary = _exporter(project_root).export_all()

        assert summary.succeeded == 1
        assert summary.failed == 1
        assert summary.total == 2

    def test_composed_html_reaches_printer(self, project_root, fake_browser):
        (project_root / "diagram.md").write_text("# Flow\n\n```mermaid\ngraph TD\n  A-->B\n```\n")

        _exporter(project_root, diagram_timeout=4000, virtual_time_budget=12000).export_all()

        call = fake_browser.calls[0]
        assert '<div class="mermaid">' in call["html"]
        assert "<title>Flow</title>" in call["html"]
        assert "}, 4000);" in call["html"]
        assert call["virtual_time_budget"] == 12000
        assert call["html_path"].name == "diagram.html"

    def test_temp_files_removed(self, project_root, fake_browser):
        (project_root / "good.md").write_text("ok")
        (project_root / "bad.md").write_text("broken")
        fake_browser.failing.add("bad")

        _exporter(project_root).export_all()

        for call in fake_browser.calls:
            assert call["html_path"].parent.name.startswith("md-pdf-export-")
            assert not call["html_path"].parent.exists()

    def test_save_html_keeps_copy(self, project_root, fake_browser):
        (project_root / "notes.md").write_text("# Notes")

        _exporter(project_root, save_html=True).export_all()

        saved = project_root / "pdf_output" / "html" / "notes.html"
        assert saved.exists()
        assert saved.read_text(encoding="utf-8") == fake_browser.calls[0]["html"]

    def test_existing_output_overwritten(self, project_root, fake_browser):
        (project_root / "notes.md").write_text("# Notes")
        output_dir = project_root / "pdf_output"
        output_dir.mkdir()
        (output_dir / "notes.pdf").write_bytes(b"stale")

        _exporter(project_root).export_all()

        assert (output_dir / "notes.pdf").read_bytes() == b"%PDF-1.4\n"


class TestMissingBrowser:

    def test_missing_browser_aborts_run(self, project_root, monkeypatch):
        (project_root / "a.md").write_text("a")
        (project_root / "b.md").write_text("b")
        monkeypatch.setattr(browser, "default_resolvers", lambda: [EnvVarResolver(environ={})])

        with pytest.raises(BrowserNotFoundError):
            _exporter(project_root).export_all()

    def test_main_exits_nonzero_with_fatal_message(self, project_root, monkeypatch, capsys):
        (project_root / "a.md").write_text("a")
        monkeypatch.setattr(browser, "default_resolvers", lambda: [EnvVarResolver(environ={})])

        with pytest.raises(SystemExit) as excinfo:
            main(["--source", str(project_root), "--no-progress", "--no-cleanup-script"])

        assert excinfo.value.code == 1
        out = capsys.readouterr().out
        assert "Fatal error" in out
        assert "CHROME_PATH" in out
        assert "PUPPETEER_EXECUTABLE_PATH" in out


class TestCleanupScript:

    def test_missing_script_warns(self, project_root, fake_browser, capsys):
        (project_root / "notes.md").write_text("n")

        summary = _exporter(project_root, cleanup_script=project_root / "kill_chrome.sh").export_all()

        assert summary.succeeded == 1
        assert "kill_chrome.sh not found" in capsys.readouterr().out

    @requires_bash
    def test_script_output_shown(self, project_root, fake_browser, capsys):
        (project_root / "notes.md").write_text("n")
        script = project_root / "kill_chrome.sh"
        script.write_text("echo 'chrome processes stopped'\n")

        _exporter(project_root, cleanup_script=script).export_all()

        assert "chrome processes stopped" in capsys.readouterr().out

    @requires_bash
    def test_script_failure_tolerated(self, project_root, fake_browser, capsys):
        (project_root / "notes.md").write_text("n")
        script = project_root / "kill_chrome.sh"
        script.write_text("echo 'no permission' >&2\nexit 3\n")

        summary = _exporter(project_root, cleanup_script=script).export_all()

        assert summary.succeeded == 1
        assert "Error running kill_chrome.sh: no permission" in capsys.readouterr().out

    def test_disabled_script_not_run(self, project_root, fake_browser, capsys):
        (project_root / "notes.md").write_text("n")
        _exporter(project_root, cleanup_script=None).export_all()
        assert "kill_chrome.sh" not in capsys.readouterr().out


class TestMain:

    def test_per_document_failures_exit_cleanly(self, project_root, fake_browser, capsys):
        (project_root / "ok.md").write_text("ok")
        (project_root / "bad.md").write_text("bad")
        fake_browser.failing.add("bad")

        main(["--source", str(project_root), "--no-progress", "--no-cleanup-script"])

        out = capsys.readouterr().out
        assert "Succeeded: 1 file(s)" in out
        assert "Errors: 1 file(s)" in out
        assert (project_root / "pdf_output" / "ok.pdf").exists()

    def test_custom_output_dir(self, project_root, tmp_path, fake_browser):
        (project_root / "notes.md").write_text("n")
        out_dir = tmp_path / "exports"

        main(["--source", str(project_root), "--output-dir", str(out_dir), "--no-progress", "--no-cleanup-script"])

        assert (out_dir / "notes.pdf").exists()

    def test_invalid_setting_exits(self, project_root, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--source", str(project_root), "--virtual-time-budget", "never"])
        assert excinfo.value.code == 1
        assert "virtual time budget" in capsys.readouterr().out


class TestBrowserLookupPerRun:

    def test_browser_located_once_for_all_documents(self, project_root, fake_browser):
        for name in ("a.md", "b.md", "c.md"):
            (project_root / name).write_text(name)

        summary = _exporter(project_root).export_all()

        assert summary.succeeded == 3
        assert fake_browser.lookups == 1
        assert len({c["chrome_path"] for c in fake_browser.calls}) == 1

    def test_poll_interval_reaches_page(self, project_root, fake_browser):
        (project_root / "diagram.md").write_text("```mermaid\ngraph TD\n  A-->B\n```\n")

        main(["--source", str(project_root), "--poll-interval", "250", "--no-progress", "--no-cleanup-script"])

        assert "}, 250);" in fake_browser.calls[0]["html"]
