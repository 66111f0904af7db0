"""Completion command implementation."""

import click
from click.shell_completion import get_completion_class


@click.command()
@click.option(
    "--shell",
    "-s",
    type=click.Choice(["bash", "zsh", "fish"]),
    default="bash",
    show_default=True,
)
@click.pass_context
def completion(ctx: click.Context, shell: str):
    """Generate a shell completion script.

    Add the output to your shell configuration, e.g. for bash:

        blindspot completion >> ~/.bashrc
    """
    root = ctx.find_root()
    prog_name = root.info_name or "blindspot"
    complete_var = f"_{prog_name.replace('-', '_').upper()}_COMPLETE"
    completion_class = get_completion_class(shell)
    script = completion_class(root.command, {}, prog_name, complete_var).source()
    click.echo(script)
