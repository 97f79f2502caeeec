"""
CLI commands for gitnotes.
"""

import click

from ..api import GitNotes


def get_api(ctx: click.Context, resume: bool = True) -> GitNotes:
    """
    GitNotes instance for a command, built once per invocation.

    Args:
        ctx: Click context (its obj may carry a pre-built 'api')
        resume: Restore the cached session before returning
    """
    obj = ctx.ensure_object(dict)
    api = obj.get('api')
    if api is None:
        api = GitNotes(config=obj.get('config'))
        obj['api'] = api
    if resume:
        api.resume()
    return api
