"""
Session commands for gitnotes: login, logout, whoami.
"""

import click

from ..cli_utils import handle_errors
from ..output import emit, emit_success
from . import get_api

PROFILE_COLUMNS = ['login', 'name', 'owner', 'repository', 'branch']


def _profile(record):
    """Session record without the token."""
    data = record.to_dict()
    data.pop('token', None)
    return data


@click.command('login')
@click.option('--token', envvar='GITHUB_TOKEN', required=True,
              help='Personal access token (or GITHUB_TOKEN)')
@click.option('--repository', '-r', required=True, help='Repository that stores the notes')
@click.option('--owner', help='Repository owner (default: the token\'s user)')
@click.option('--branch', '-b', help='Branch to write to (default: repository default branch)')
@click.option('--create', is_flag=True, help='Create the repository if it does not exist')
@click.option('--remember/--no-remember', default=True, help='Cache the session locally')
@click.pass_context
@handle_errors
def login_cmd(ctx, token, repository, owner, branch, create, remember):
    """Sign in and bind a notes repository."""
    api = get_api(ctx, resume=False)
    record = api.login(
        token=token,
        repository=repository,
        owner=owner,
        branch=branch,
        create=create,
        remember=remember,
    )
    emit([_profile(record)])


@click.command('logout')
@click.option('--all', 'all_sessions', is_flag=True, help='Forget every cached session')
@click.pass_context
@handle_errors
def logout_cmd(ctx, all_sessions):
    """Forget the cached session."""
    get_api(ctx, resume=False).logout(all_sessions=all_sessions)
    emit_success("Logged out")


@click.command('whoami')
@click.option('--refresh', is_flag=True, help='Re-read the profile from GitHub')
@click.option('--pretty', is_flag=True, help='Display as formatted table')
@click.pass_context
@handle_errors
def whoami_cmd(ctx, refresh, pretty):
    """Show the cached session.

    With --refresh the profile is fetched again and the remaining API
    quota is included.
    """
    api = get_api(ctx, resume=False)
    if not refresh:
        emit([_profile(api.whoami())], pretty=pretty, columns=PROFILE_COLUMNS)
        return

    profile = _profile(api.refresh_profile())
    columns = list(PROFILE_COLUMNS)
    status = api.rate_limit()
    if status is not None:
        profile['rate_limit_remaining'] = status.remaining
        profile['rate_limit_reset'] = status.reset_datetime.isoformat()
        columns.append('rate_limit_remaining')
    emit([profile], pretty=pretty, columns=columns)
