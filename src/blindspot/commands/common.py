"""Helpers shared by the command implementations."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from rich.console import Console
from rich.markup import escape

from blindspot.core.errors import BlindspotError

logger = logging.getLogger(__name__)

console = Console()


def run(coroutine: Coroutine[Any, Any, Any]) -> Any:
    """Run a command coroutine, turning failures into an error message and exit 1."""
    try:
        return asyncio.run(coroutine)
    except (BlindspotError, OSError, RuntimeError) as e:
        logger.error("Command failed: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)
