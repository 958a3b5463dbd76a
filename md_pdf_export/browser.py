"""
Chrome/Chromium executable lookup.

The lookup is an ordered list of resolvers; each yields candidate paths and
the first candidate that exists on disk wins. No version checks are made.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import asyncio
import os
import shutil
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence

from playwright.async_api import async_playwright

from .config import CHROME_PATH_ENV, PUPPETEER_PATH_ENV
from .errors import BrowserNotFoundError

DEFAULT_ENV_VARS = (PUPPETEER_PATH_ENV, CHROME_PATH_ENV)

DEFAULT_CANDIDATE_PATHS = (
    # macOS application bundles
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
    "/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge",
    # Linux packages
    "/usr/bin/google-chrome",
    "/usr/bin/google-chrome-stable",
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
    "/snap/bin/chromium",
    # Windows installs
    r"C:\Program Files\Google\Chrome\Application\chrome.exe",
    r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    r"C:\Program Files (x86)\Microsoft\Edge\Application\msedge.exe",
)

DEFAULT_EXECUTABLE_NAMES = ("google-chrome", "chrome", "chromium", "chromium-browser", "msedge")


class ExecutableResolver:
    """A single lookup strategy."""

    def candidates(self) -> Iterable[str]:
        raise NotImplementedError


class EnvVarResolver(ExecutableResolver):
    """Paths named by environment variables, in the given order."""

    def __init__(self, names: Sequence[str] = DEFAULT_ENV_VARS, environ: Optional[Mapping[str, str]] = None):
        self.names = list(names)
        self.environ = environ

    def candidates(self) -> Iterator[str]:
        environ = os.environ if self.environ is None else self.environ
        for name in self.names:
            value = environ.get(name)
            if value:
                yield value


class PathCandidatesResolver(ExecutableResolver):
    """Conventional installation paths of known browsers."""

    def __init__(self, paths: Sequence[str] = DEFAULT_CANDIDATE_PATHS):
        self.paths = list(paths)

    def candidates(self) -> Iterator[str]:
        yield from self.paths


class SystemPathResolver(ExecutableResolver):
    """Browser executables reachable through PATH."""

    def __init__(self, names: Sequence[str] = DEFAULT_EXECUTABLE_NAMES):
        self.names = list(names)

    def candidates(self) -> Iterator[str]:
        for name in self.names:
            found = shutil.which(name)
            if found:
                yield found


class PlaywrightResolver(ExecutableResolver):
    """The Chromium build installed by ``playwright install chromium``."""

    async def _chromium_path(self) -> str:
        playwright = await async_playwright().start()
        try:
            return playwright.chromium.executable_path
        finally:
            await playwright.stop()

    def candidates(self) -> Iterator[str]:
        # asyncio.run cannot nest; skip instead of leaving an unawaited coroutine
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            return

        try:
            path = asyncio.run(self._chromium_path())
        except Exception:
            # Playwright driver missing or not runnable here
            return
        if path:
            yield path


def default_resolvers() -> List[ExecutableResolver]:
    return [
        EnvVarResolver(),
        PathCandidatesResolver(),
        SystemPathResolver(),
        PlaywrightResolver(),
    ]


def resolve_chrome_executable_path(resolvers: Optional[Sequence[ExecutableResolver]] = None) -> Optional[str]:
    """Return the first existing browser executable, or None when there is none."""
    if resolvers is None:
        resolvers = default_resolvers()

    for resolver in resolvers:
        for candidate in resolver.candidates():
            try:
                if candidate and Path(candidate).exists():
                    return candidate
            except OSError:
                continue

    return None


def require_chrome_executable_path(resolvers: Optional[Sequence[ExecutableResolver]] = None) -> str:
    """Like resolve_chrome_executable_path, but raise BrowserNotFoundError instead of returning None."""
    chrome_path = resolve_chrome_executable_path(resolvers)
    if not chrome_path:
        raise BrowserNotFoundError()
    return chrome_path
