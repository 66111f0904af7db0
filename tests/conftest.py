"""
Shared test fixtures and helpers.
"""

import asyncio
import io
import tarfile
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from blindspot.core.config import BlindspotConfig, set_config
from blindspot.core.session import open_session
from blindspot.core.ui import Context, Notify, Progress


class ScriptedInput:
    """Stands in for standard input, replaying prepared answer lines."""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.reads = 0

    def __call__(self) -> str:
        self.reads += 1
        if not self.answers:
            raise EOFError("no more scripted answers")
        return self.answers.pop(0)


class RecordingContext(Context):
    """Context that records messages instead of sending them to an actor."""

    def __init__(self, *answers: str, label: str = "🧪 test"):
        super().__init__(actor=None, label=label)
        self.sent = []
        self.answers = list(answers)
        self.prompts = []

    async def _send(self, message) -> None:
        self.sent.append(message)

    async def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise AssertionError(f"unexpected question: {prompt}")
        return self.answers.pop(0)

    @property
    def notes(self) -> list[str]:
        return [m.text for m in self.sent if isinstance(m, Notify)]

    @property
    def ticks(self) -> list[Progress]:
        return [m for m in self.sent if isinstance(m, Progress)]


class FakeWeb:
    """Routes requests by full URL to canned responses and records them."""

    def __init__(self):
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def serve(self, url: str, content: bytes = b"", status: int = 200, **kwargs) -> None:
        """Answer every request for *url* with a fresh response."""
        self.routes[url] = lambda request: httpx.Response(status, content=content, **kwargs)

    def serve_json(self, url: str, document: dict, status: int = 200) -> None:
        self.routes[url] = lambda request: httpx.Response(status, json=document)

    def release(self, slug: str, tag: str, assets: list[tuple[str, bytes]]) -> list[str]:
        """Publish a GitHub release whose assets are served from example.com."""
        documents = []
        for name, content in assets:
            url = f"https://example.com/{slug}/{tag}/{name}"
            self.serve(url, content)
            documents.append(
                {"name": name, "size": len(content), "browser_download_url": url}
            )
        self.serve_json(
            f"https://api.github.com/repos/{slug}/releases/latest",
            {"tag_name": tag, "name": tag, "assets": documents},
        )
        return [d["browser_download_url"] for d in documents]


def make_tar(path: Path, entries: list[tuple[str, bytes]]) -> Path:
    """Write an uncompressed tar archive with the given files."""
    with tarfile.open(path, "w") as tar:
        for name, content in entries:
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
    return path


def quiet_console(height: int = 40) -> Console:
    """Console writing into memory instead of the terminal."""
    return Console(file=io.StringIO(), width=120, height=height)


@pytest.fixture
def config(tmp_path: Path) -> BlindspotConfig:
    """Configuration rooted in a temporary directory."""
    cfg = BlindspotConfig(
        registry_path=tmp_path / "config" / "bspm.yaml",
        bin_dir=tmp_path / "bin",
        data_dir=tmp_path / "data",
        scratch_dir=tmp_path / "scratch",
        log_path=tmp_path / "blindspot.log",
        jobs=4,
    )
    cfg.ensure_dirs()
    set_config(cfg)
    yield cfg
    set_config(None)


@pytest.fixture
def web() -> FakeWeb:
    return FakeWeb()


@pytest.fixture
def in_session(config: BlindspotConfig, web: FakeWeb) -> Callable:
    """Run ``body(session)`` inside a session wired to the fake web.

    Extra positional arguments are the lines typed in reply to questions.
    """

    def runner(body, *answers: str):
        async def main():
            async with open_session(
                config,
                console=quiet_console(),
                read_line=ScriptedInput(*answers),
                transport=web.transport(),
            ) as session:
                return await body(session)

        return asyncio.run(main())

    return runner
