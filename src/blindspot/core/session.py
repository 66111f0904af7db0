"""Shared services for one blindspot command."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from rich.console import Console

from blindspot.core.backup import BackupVault
from blindspot.core.config import BlindspotConfig, get_config
from blindspot.core.downloader import create_http_client
from blindspot.core.github import GitHubClient
from blindspot.core.ui import Context, OutputActor, output_actor, read_stdin_line


@dataclass
class Session:
    """Everything a package operation needs, created once per command."""

    config: BlindspotConfig
    actor: OutputActor
    http: httpx.AsyncClient
    github: GitHubClient
    vault: BackupVault

    def context(self, prefix: str, name: str) -> Context:
        return self.actor.context(prefix, name)


@asynccontextmanager
async def open_session(
    config: BlindspotConfig | None = None,
    console: Console | None = None,
    read_line: Callable[[], str] = read_stdin_line,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[Session]:
    """Start the output actor and network clients for the duration of a command."""
    config = config or get_config()
    config.ensure_dirs()

    async with create_http_client(transport) as http, GitHubClient(transport) as github:
        async with output_actor(console, read_line) as actor:
            yield Session(
                config=config,
                actor=actor,
                http=http,
                github=github,
                vault=BackupVault(config.data_dir),
            )
