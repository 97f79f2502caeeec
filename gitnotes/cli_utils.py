"""
Common CLI utilities and decorators for consistent command behavior.
"""

import sys
import click
from functools import wraps

from .errors import GitNotesError, RemoteError
from .exit_codes import INTERRUPTED, get_exit_code_for_exception
from .output import emit_error


def handle_errors(func):
    """
    Decorator that turns exceptions into a JSON error on stderr and an exit code.

    Click's own usage errors pass through untouched.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            emit_error("Interrupted by user", type="KeyboardInterrupt")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except GitNotesError as e:
            context = dict(e.details)
            if isinstance(e, RemoteError) and e.status is not None:
                context['status'] = e.status
            emit_error(str(e), type=type(e).__name__, context=context or None)
            sys.exit(get_exit_code_for_exception(e))
        except ValueError as e:
            emit_error(str(e), type=type(e).__name__)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def read_content(content, file):
    """
    Resolve note content from --content or --file ('-' reads stdin).

    Returns:
        The content, or None when neither option was given
    """
    if content is not None and file is not None:
        raise click.UsageError("Use either --content or --file, not both")
    if file is not None:
        return file.read()
    return content


# Standard options that many commands share
common_options = {
    'pretty': click.option('--pretty', is_flag=True,
                           help='Display as formatted table'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('pretty')
        def my_command(pretty):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
