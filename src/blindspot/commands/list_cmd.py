"""List command implementation."""

import click
from rich.markup import escape
from rich.table import Table

from blindspot.commands.common import console
from blindspot.core.config import get_config
from blindspot.core.errors import BlindspotError
from blindspot.core.registry import Registry


@click.command("list")
@click.option("--debug", "-d", is_flag=True, help="Show the complete stored state")
def list_packages(debug: bool):
    """List currently installed packages."""
    try:
        registry = Registry.load(get_config().registry_path)
    except BlindspotError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    packages = registry.list_packages()
    if not packages:
        console.print("No packages installed")
        console.print("\nInstall packages with: blindspot install <name> <url|owner/repo>")
        raise SystemExit(0)

    if debug:
        for pkg in packages:
            console.print(pkg)
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Package")
    table.add_column("Source")
    table.add_column("Release")
    table.add_column("Last update")
    table.add_column("Backup")

    for pkg in sorted(packages, key=lambda p: p.name):
        table.add_row(
            pkg.name,
            pkg.origin or pkg.installer.url,
            str(pkg.release) if pkg.release else "-",
            pkg.last_update.strftime("%Y-%m-%d %H:%M") if pkg.last_update else "-",
            "⏪" if pkg.installer.backup else "",
        )

    console.print(table)
