"""Parallel update of installed packages."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from rich.markup import escape

from blindspot.core.config import DEFAULT_JOBS
from blindspot.core.packages import update_package
from blindspot.core.registry import Registry
from blindspot.core.session import Session
from blindspot.core.ui import OutputClosedError
from blindspot.models.package import Package

logger = logging.getLogger(__name__)


class UpdateState(str, Enum):
    SKIPPED = "skipped"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class UpdateOutcome:
    """Where one package ended up during a bulk update."""

    name: str
    state: UpdateState
    package: Package | None = None
    error: str | None = None


@dataclass
class UpdateReport:
    outcomes: dict[str, UpdateOutcome] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)

    def _names(self, state: UpdateState) -> list[str]:
        return [name for name, o in self.outcomes.items() if o.state is state]

    @property
    def succeeded(self) -> list[str]:
        return self._names(UpdateState.SUCCEEDED)

    @property
    def failed(self) -> list[str]:
        return self._names(UpdateState.FAILED)

    @property
    def skipped(self) -> list[str]:
        return self._names(UpdateState.SKIPPED)


async def _update_worker(
    package: Package,
    outcome: UpdateOutcome,
    session: Session,
    slots: asyncio.Semaphore,
) -> None:
    async with slots:
        try:
            outcome.package = await update_package(package, session)
        except OutputClosedError:
            # Without a terminal the whole command fails
            raise
        except Exception as e:
            outcome.state = UpdateState.FAILED
            outcome.error = str(e)
            logger.warning("Update of %s failed: %s", package.name, e, exc_info=True)
            message = escape(f"Update failed: {e}").replace("\n", ". ")
            await session.context("❌", package.name).notify(message)
        else:
            outcome.state = UpdateState.SUCCEEDED
            logger.info("Update of %s finished: %s", package.name, outcome.package)


async def update_packages(
    registry: Registry,
    requested: Iterable[str],
    session: Session,
    jobs: int = DEFAULT_JOBS,
) -> UpdateReport:
    """Update the requested packages (all when none are requested) in parallel.

    Each package is updated by its own worker; a failing worker only marks
    its own package as failed. Successful updates are merged into the
    registry once every worker has finished. Saving is left to the caller.
    """
    report = UpdateReport()
    if not len(registry):
        await session.context("🏜", "blindspot").notify("This is no mans land")
        return report

    wanted = set(requested)
    report.missing = sorted(name for name in wanted if not registry.has(name))
    for name in report.missing:
        await session.context("❓", name).notify("This package is not installed")

    workers = []
    slots = asyncio.Semaphore(max(jobs, 1))
    for package in registry:
        if wanted and package.name not in wanted:
            report.outcomes[package.name] = UpdateOutcome(package.name, UpdateState.SKIPPED)
            continue
        outcome = UpdateOutcome(package.name, UpdateState.RUNNING)
        report.outcomes[package.name] = outcome
        workers.append(_update_worker(package, outcome, session, slots))

    await asyncio.gather(*workers)

    registry.merge(
        outcome.package
        for outcome in report.outcomes.values()
        if outcome.state is UpdateState.SUCCEEDED
    )
    return report
