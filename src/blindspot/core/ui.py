"""Terminal output actor.

Every line blindspot prints while a command runs goes through a single
:class:`OutputActor`. Producers hold a :class:`Context` bound to a display
label and enqueue messages onto the actor's capacity-1 queue; the actor
renders them one at a time, so output from concurrent package workers never
interleaves.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TypeVar

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

logger = logging.getLogger(__name__)

T = TypeVar("T")

TITLE = "🔦 blindspot package manager"
MAX_LABEL_WIDTH = 64
BAR_PADDING = 30
MIN_BAR_WIDTH = 10
MESSAGE_HISTORY = 1000


class OutputClosedError(RuntimeError):
    """The output actor stopped while a producer still needed it."""


@dataclass
class Notify:
    text: str


@dataclass
class Progress:
    current: int
    total: int
    label: str


@dataclass
class Question:
    prompt: str
    answer: asyncio.Future


@dataclass
class Quit:
    ack: asyncio.Future


Message = Notify | Progress | Question | Quit


@dataclass
class TransferBar:
    """Progress of one transfer, rendered as a single line."""

    label: str
    current: int
    total: int

    def render(self, width: int) -> RenderableType:
        label = self.label[:MAX_LABEL_WIDTH]
        bar_width = max(width - len(label) - BAR_PADDING, MIN_BAR_WIDTH)
        row = Table.grid(padding=(0, 1))
        row.add_column(no_wrap=True)
        row.add_column(width=bar_width)
        row.add_column(no_wrap=True, style="bold blue")
        row.add_row(
            Text(f"🚛 {label}", style="italic"),
            ProgressBar(total=max(self.total, 1), completed=self.current, width=bar_width),
            f"{self.current}/{self.total}kb",
        )
        return row


def format_message(label: str, text: str) -> Text:
    """Format a log line: bold cyan label followed by the message markup."""
    line = Text(label, style="bold bright_cyan")
    line.append(" ")
    line.append_text(Text.from_markup(text.strip()))
    return line


def read_stdin_line() -> str:
    """Read one line from standard input, raising EOFError when it is closed."""
    line = sys.stdin.readline()
    if not line:
        raise EOFError("standard input is closed")
    return line.rstrip("\r\n")


class OutputActor:
    """Single consumer of all terminal output."""

    def __init__(
        self,
        console: Console | None = None,
        read_line: Callable[[], str] = read_stdin_line,
    ):
        self.console = console or Console()
        self.read_line = read_line
        self.queue: asyncio.Queue[tuple[str, Message]] = asyncio.Queue(maxsize=1)
        self.messages: deque[Text] = deque(maxlen=MESSAGE_HISTORY)
        self.bars: dict[str, TransferBar] = {}
        self.redraws = 0
        self._task: asyncio.Task | None = None
        self._live = Live(
            console=self.console,
            auto_refresh=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )

    def context(self, prefix: str, name: str) -> "Context":
        """Create a producer handle labeled ``"<prefix> <name>"``."""
        return Context(self, f"{prefix} {name}".strip())

    def start(self) -> asyncio.Task:
        """Start the render loop on the running event loop."""
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name="blindspot-output")
        return self._task

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        """Consume messages until a Quit arrives."""
        self._live.start()
        try:
            while True:
                label, message = await self.queue.get()
                if isinstance(message, Quit):
                    if not message.ack.done():
                        message.ack.set_result(None)
                    return
                await self.handle(label, message)
                self.redraw()
        except Exception:
            logger.critical("Output actor failed", exc_info=True)
            raise
        finally:
            self._live.stop()

    async def handle(self, label: str, message: Message) -> None:
        if isinstance(message, Notify):
            self.messages.append(format_message(label, message.text))
        elif isinstance(message, Progress):
            bar = self.bars.get(message.label)
            if bar is None:
                self.bars[message.label] = TransferBar(
                    message.label, message.current, message.total
                )
            else:
                bar.current = message.current
                bar.total = message.total
        elif isinstance(message, Question):
            await self._answer(label, message)
        else:
            raise TypeError(f"Unknown message: {message!r}")

    async def _answer(self, label: str, question: Question) -> None:
        # The live region would repaint over the prompt, so park it while reading
        self._live.stop()
        try:
            self.console.print(format_message(label, question.prompt))
            try:
                line = await asyncio.to_thread(self.read_line)
            except EOFError as e:
                if not question.answer.done():
                    question.answer.set_exception(OutputClosedError(str(e)))
            else:
                if not question.answer.done():
                    question.answer.set_result(line)
        finally:
            self._live.start()

    def render(self) -> RenderableType:
        """Build the full screen: title, latest messages, then progress bars."""
        width, height = self.console.size
        room = max(height - (len(self.bars) + 2), 0)
        visible = list(self.messages)[-room:] if room else []
        return Group(
            Text(TITLE, style="bold"),
            *visible,
            *(bar.render(width) for bar in self.bars.values()),
        )

    def redraw(self) -> None:
        self.redraws += 1
        self._live.update(self.render(), refresh=True)


class Context:
    """Labeled producer handle into an :class:`OutputActor`."""

    def __init__(self, actor: OutputActor, label: str):
        self.actor = actor
        self.label = label

    def __repr__(self) -> str:
        return f"Context({self.label!r})"

    async def notify(self, text: str) -> None:
        await self._send(Notify(text))

    async def progress(self, current: int, total: int, label: str) -> None:
        await self._send(Progress(current, total, label))

    async def ask(self, prompt: str) -> str:
        """Ask a question and wait for the line typed in reply."""
        answer = asyncio.get_running_loop().create_future()
        await self._send(Question(prompt, answer))
        return await self._guarded(answer)

    async def ask_number(self, minimum: int, maximum: int, prompt: str) -> int:
        """Ask until the reply is an integer in ``[minimum, maximum)``."""
        while True:
            line = (await self.ask(prompt)).strip()
            try:
                number = int(line)
            except ValueError:
                pass
            else:
                if minimum <= number < maximum:
                    return number
            await self.notify(f"Invalid input: {line!r}")

    async def quit(self) -> None:
        """Stop the actor and wait until it acknowledged."""
        ack = asyncio.get_running_loop().create_future()
        await self._send(Quit(ack))
        await self._guarded(ack)

    async def _send(self, message: Message) -> None:
        await self._guarded(self.actor.queue.put((self.label, message)))

    async def _guarded(self, awaitable: Awaitable[T]) -> T:
        """Await *awaitable*, failing instead of hanging if the actor dies."""
        actor_task = self.actor.task
        if actor_task is None or actor_task.done():
            if isinstance(awaitable, asyncio.Future) and awaitable.done():
                return awaitable.result()
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OutputClosedError("Output actor is not running")

        waiter = asyncio.ensure_future(awaitable)
        try:
            await asyncio.wait({waiter, actor_task}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            waiter.cancel()
            raise
        if waiter.done():
            return waiter.result()
        waiter.cancel()
        raise OutputClosedError("Output actor stopped unexpectedly")


@asynccontextmanager
async def output_actor(
    console: Console | None = None,
    read_line: Callable[[], str] = read_stdin_line,
) -> AsyncIterator[OutputActor]:
    """Run an output actor for the duration of the block.

    On exit the actor is asked to quit; a failure of the actor itself is
    re-raised so the command fails as a whole.
    """
    actor = OutputActor(console=console, read_line=read_line)
    task = actor.start()
    try:
        yield actor
    finally:
        if actor.running:
            await actor.context("", "blindspot").quit()
        await task
