"""Update command implementation."""

import click
from rich.markup import escape

from blindspot.commands.common import console, run
from blindspot.core.orchestrator import UpdateReport, update_packages
from blindspot.core.registry import Registry
from blindspot.core.session import open_session


async def _update(names: tuple[str, ...], jobs: int | None) -> UpdateReport:
    async with open_session() as session:
        registry = Registry.load(session.config.registry_path)
        report = await update_packages(
            registry, names, session, jobs=jobs or session.config.jobs
        )
        if report.outcomes:
            registry.save()
    return report


@click.command()
@click.argument("packages", nargs=-1)
@click.option("--jobs", "-j", type=click.IntRange(min=1), help="Packages updated at the same time")
def update(packages: tuple[str, ...], jobs: int | None):
    """Update installed packages.

    PACKAGES limits the update to the named packages; all packages are
    updated when none are given. A failing package does not stop the others.
    """
    report = run(_update(packages, jobs))

    if report.succeeded:
        console.print(f"\n[green]✓[/green] {len(report.succeeded)} package(s) up to date")
    if report.failed:
        console.print(f"[red]✗[/red] Update failed for: {', '.join(report.failed)}")
        for name in report.failed:
            console.print(f"  [bold]{escape(name)}[/bold]: {escape(report.outcomes[name].error or '')}")
