"""
Tests for the output actor and its producer contexts.
"""

import asyncio
import threading

import pytest

from blindspot.core.ui import OutputActor, OutputClosedError, output_actor
from conftest import ScriptedInput, quiet_console


def run_actor(body, *answers, console=None, read_line=None):
    """Run ``body(actor)`` while an output actor is running."""

    async def main():
        async with output_actor(
            console or quiet_console(),
            read_line or ScriptedInput(*answers),
        ) as actor:
            result = await body(actor)
        return actor, result

    return asyncio.run(main())


class TestRendering:
    def test_notifications_are_logged_with_their_label(self):
        async def body(actor: OutputActor):
            ctx = actor.context("📦", "fzf")
            await ctx.notify("Fetching")
            await ctx.notify("Done")

        actor, _ = run_actor(body)

        assert [m.plain for m in actor.messages] == ["📦 fzf Fetching", "📦 fzf Done"]
        assert not actor.running

    def test_one_bar_per_label(self):
        async def body(actor: OutputActor):
            ctx = actor.context("📦", "fzf")
            await ctx.progress(0, 10, "https://example.com/a")
            await ctx.progress(5, 10, "https://example.com/a")
            await ctx.progress(1, 3, "https://example.com/b")

        actor, _ = run_actor(body)

        assert list(actor.bars) == ["https://example.com/a", "https://example.com/b"]
        assert actor.bars["https://example.com/a"].current == 5

    def test_one_redraw_per_message(self):
        async def body(actor: OutputActor):
            ctx = actor.context("📦", "fzf")
            for i in range(5):
                await ctx.notify(f"line {i}")
            await ctx.progress(1, 2, "bar")

        actor, _ = run_actor(body)

        assert actor.redraws == 6

    def test_only_the_latest_messages_fit(self):
        async def body(actor: OutputActor):
            ctx = actor.context("📦", "fzf")
            for i in range(10):
                await ctx.notify(f"line {i}")
            await ctx.progress(1, 2, "bar")

        # Height 6: title + one bar leaves room for three messages
        actor, _ = run_actor(body, console=quiet_console(height=6))
        screen = actor.render()

        assert len(screen.renderables) == 1 + 3 + 1
        assert [t.plain for t in screen.renderables[1:4]] == [
            "📦 fzf line 7",
            "📦 fzf line 8",
            "📦 fzf line 9",
        ]


class TestQuestions:
    def test_ask_returns_the_typed_line(self):
        async def body(actor: OutputActor):
            return await actor.context("❌", "fzf").ask("Enter `y` to force installation")

        _, answer = run_actor(body, "y")

        assert answer == "y"

    def test_ask_number_reprompts_until_valid(self):
        async def body(actor: OutputActor):
            return await actor.context("🪐", "fzf").ask_number(0, 3, "Choose one:")

        actor, pick = run_actor(body, "x", "3", " 2 ")

        assert pick == 2
        invalid = [m.plain for m in actor.messages if "Invalid input" in m.plain]
        assert invalid == ["🪐 fzf Invalid input: 'x'", "🪐 fzf Invalid input: '3'"]

    def test_answers_reach_the_context_that_asked(self):
        console = quiet_console()

        def echo_prompt() -> str:
            # Reply with the prompt line that is currently on screen
            return console.file.getvalue().rstrip("\n").splitlines()[-1]

        async def body(actor: OutputActor):
            first = actor.context("📦", "first")
            second = actor.context("📦", "second")
            return await asyncio.gather(first.ask("which?"), second.ask("which?"))

        _, answers = run_actor(body, console=console, read_line=echo_prompt)

        assert answers == ["📦 first which?", "📦 second which?"]

    def test_closed_stdin_fails_the_question(self):
        async def body(actor: OutputActor):
            await actor.context("🪐", "fzf").ask_number(0, 2, "Choose one:")

        with pytest.raises(OutputClosedError, match="no more scripted answers"):
            run_actor(body)


class TestFailure:
    def test_actor_failure_reaches_waiting_producers(self):
        async def body(actor: OutputActor):
            async def explode(label, message):
                raise ValueError("terminal gone")

            actor.handle = explode
            ctx = actor.context("📦", "fzf")
            await ctx.notify("first")
            with pytest.raises(OutputClosedError):
                for _ in range(3):
                    await ctx.notify("never shown")

        with pytest.raises(ValueError, match="terminal gone"):
            run_actor(body)

    def test_quit_stops_the_loop(self):
        async def body(actor: OutputActor):
            await actor.context("", "blindspot").quit()
            return actor.running

        actor, running = run_actor(body)

        assert running is False
        assert actor.task.done()


class TestBackpressure:
    def test_senders_wait_while_the_actor_is_busy(self):
        reading = threading.Event()
        release = threading.Event()

        def blocking_read() -> str:
            reading.set()
            release.wait(5)
            return "0"

        async def body(actor: OutputActor):
            asker = actor.context("🪐", "first")
            sender = actor.context("📦", "second")

            question = asyncio.create_task(asker.ask("which?"))
            await asyncio.to_thread(reading.wait, 5)

            # The actor holds the question, so the single slot is free
            await asyncio.wait_for(sender.notify("one"), 1)
            blocked = asyncio.create_task(sender.notify("two"))
            await asyncio.sleep(0.05)
            waiting = not blocked.done()

            release.set()
            answer = await question
            await blocked
            return waiting, answer

        actor, (waiting, answer) = run_actor(body, read_line=blocking_read)

        assert waiting
        assert answer == "0"
        assert [m.plain for m in actor.messages] == ["📦 second one", "📦 second two"]

    def test_queue_holds_a_single_message(self):
        async def body(actor: OutputActor):
            return actor.queue.maxsize

        _, size = run_actor(body)

        assert size == 1
