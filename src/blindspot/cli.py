"""CLI entry point for blindspot."""

import click

from blindspot import __version__
from blindspot.commands import completion, init, install, list_cmd, revert, uninstall, update
from blindspot.core.config import get_config
from blindspot.core.log import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="blindspot")
@click.option("--verbose", "-v", is_flag=True, help="Write debug output to the log file")
def main(verbose: bool):
    """blindspot - a package manager for single binary applications.

    Install binaries from static download URLs or GitHub releases, update
    them all at once and revert a bad update.

    Examples:

        blindspot install fzf junegunn/fzf

        blindspot install tool https://example.com/tool-linux.tar.gz

        blindspot update

        blindspot revert fzf
    """
    setup_logging(get_config().log_path, verbose)


# Register commands
main.add_command(init.init)
main.add_command(install.install)
main.add_command(uninstall.remove)
main.add_command(uninstall.remove, name="uninstall")
main.add_command(uninstall.remove, name="delete")
main.add_command(revert.revert)
main.add_command(update.update)
main.add_command(list_cmd.list_packages)
main.add_command(completion.completion)


if __name__ == "__main__":
    main()
