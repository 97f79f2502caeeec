"""
Note commands for gitnotes.

Notes are addressed by id; tags by id or by name.
"""

import click

from ..cli_utils import add_common_options, handle_errors, read_content
from ..errors import TagNotFoundError
from ..output import emit, emit_success
from . import get_api

NOTE_COLUMNS = ['id', 'title', 'tag', 'createdAt', 'updatedAt']


def resolve_tag_id(api, ref):
    """Tag id for a tag id or tag name."""
    if ref is None:
        return None
    index = api.core.index
    tag = index.find_tag(ref) or index.find_tag_by_name(ref)
    if tag is None:
        raise TagNotFoundError(ref)
    return tag.id


@click.group('note')
def note_cmd():
    """Create, read, edit and delete notes."""
    pass


@note_cmd.command('list')
@click.option('--tag', '-t', 'tag', help='Only notes under this tag (id or name)')
@add_common_options('pretty')
@click.pass_context
@handle_errors
def list_notes(ctx, tag, pretty):
    """List notes."""
    api = get_api(ctx)
    emit(api.notes(tag_id=resolve_tag_id(api, tag)), pretty=pretty, columns=NOTE_COLUMNS)


@note_cmd.command('show')
@click.argument('note_id')
@click.option('--raw', is_flag=True, help='Print only the note content')
@click.pass_context
@handle_errors
def show_note(ctx, note_id, raw):
    """Show a note with its content."""
    api = get_api(ctx)
    note = api.note(note_id)
    content = api.read(note_id)
    if raw:
        click.echo(content, nl=False)
        return
    data = note.to_dict()
    data['content'] = content
    emit([data])


@note_cmd.command('add')
@click.argument('title')
@click.option('--tag', '-t', 'tag', help='Tag (id or name)')
@click.option('--content', '-c', help='Note content')
@click.option('--file', '-f', 'file', type=click.File('r'), help="Read content from a file ('-' for stdin)")
@click.pass_context
@handle_errors
def add_note(ctx, title, tag, content, file):
    """Create a note."""
    body = read_content(content, file)
    api = get_api(ctx)
    note = api.add_note(title, body or '', tag_id=resolve_tag_id(api, tag))
    emit([note])


@note_cmd.command('edit')
@click.argument('note_id')
@click.option('--title', help='New title')
@click.option('--tag', '-t', 'tag', help='Move under this tag (id or name)')
@click.option('--untag', is_flag=True, help='Move out of its tag')
@click.option('--content', '-c', help='New content')
@click.option('--file', '-f', 'file', type=click.File('r'), help="Read new content from a file ('-' for stdin)")
@click.pass_context
@handle_errors
def edit_note(ctx, note_id, title, tag, untag, content, file):
    """Rename, retag or rewrite a note."""
    if tag is not None and untag:
        raise click.UsageError("Use either --tag or --untag, not both")
    body = read_content(content, file)
    api = get_api(ctx)
    note = api.edit_note(
        note_id,
        title=title,
        content=body,
        tag_id=resolve_tag_id(api, tag),
        detach_tag=untag,
    )
    emit([note])


@note_cmd.command('rm')
@click.argument('note_id')
@click.pass_context
@handle_errors
def remove_note(ctx, note_id):
    """Delete a note."""
    get_api(ctx).remove_note(note_id)
    emit_success(f"Deleted note {note_id}", data={'id': note_id})
