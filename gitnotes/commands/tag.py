"""
Tag commands for gitnotes.
"""

import click

from ..cli_utils import add_common_options, handle_errors
from ..domain.tag import TAG_COLORS
from ..output import emit
from . import get_api
from .note import resolve_tag_id

TAG_COLUMNS = ['id', 'name', 'color']


@click.group('tag')
def tag_cmd():
    """Manage tags (folders of notes)."""
    pass


@tag_cmd.command('list')
@add_common_options('pretty')
@click.pass_context
@handle_errors
def list_tags(ctx, pretty):
    """List tags."""
    emit(get_api(ctx).tags(), pretty=pretty, columns=TAG_COLUMNS)


@tag_cmd.command('add')
@click.argument('name')
@click.option('--color', type=click.Choice(TAG_COLORS), help='Display colour')
@click.pass_context
@handle_errors
def add_tag(ctx, name, color):
    """Create a tag."""
    emit([get_api(ctx).add_tag(name, color=color)])


@tag_cmd.command('rename')
@click.argument('tag')
@click.argument('name')
@click.option('--color', type=click.Choice(TAG_COLORS), help='New display colour')
@click.pass_context
@handle_errors
def rename_tag(ctx, tag, name, color):
    """Rename a tag, moving all of its notes.

    TAG is the tag id or current name.
    """
    api = get_api(ctx)
    emit([api.rename_tag(resolve_tag_id(api, tag), name, color=color)])


@tag_cmd.command('rm')
@click.argument('tag')
@click.pass_context
@handle_errors
def remove_tag(ctx, tag):
    """Delete a tag; its notes move back to the notes root.

    Prints the detached notes.
    """
    api = get_api(ctx)
    emit(api.remove_tag(resolve_tag_id(api, tag)))
