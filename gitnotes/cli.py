#!/usr/bin/env python3

import click

from gitnotes.config import configure_logging, load_config
from gitnotes.commands.auth import login_cmd, logout_cmd, whoami_cmd
from gitnotes.commands.config import config_cmd
from gitnotes.commands.note import note_cmd
from gitnotes.commands.tag import tag_cmd


@click.group()
@click.version_option(package_name='gitnotes')
@click.option('-v', '--verbose', is_flag=True, help='Log remote calls to stderr')
@click.pass_context
def cli(ctx, verbose):
    """gitnotes - Markdown notes stored in a GitHub repository.

    Notes live under notes/, tags are folders, and the .gitnotes index
    at the repository root ties them together.
    """
    obj = ctx.ensure_object(dict)
    config = obj.get('config')
    if config is None:
        config = load_config()
        obj['config'] = config
    configure_logging(config, verbose=verbose)


# Session
cli.add_command(login_cmd)
cli.add_command(logout_cmd)
cli.add_command(whoami_cmd)

# Command groups
cli.add_command(note_cmd)
cli.add_command(tag_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
