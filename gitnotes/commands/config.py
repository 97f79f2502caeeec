"""
Configuration commands for gitnotes.
"""

import copy
import json

import click

from ..cli_utils import handle_errors
from ..config import get_config_path, set_config_value
from ..output import emit_success


@click.group('config')
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command('show')
@click.option('--pretty', is_flag=True, help='Display as formatted JSON instead of single-line JSONL')
@click.option('--path', is_flag=True, help='Show the config file path being used')
@click.pass_context
def show_config(ctx, pretty, path):
    """Show the current configuration with all merges applied.

    The GitHub token is masked.
    """
    if path:
        print(json.dumps({'config_path': str(get_config_path())}))
        return

    config = copy.deepcopy(ctx.obj['config'])
    if config.get('github', {}).get('token'):
        config['github']['token'] = '***'

    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))


@config_cmd.command('set')
@click.argument('key')
@click.argument('value')
@handle_errors
def set_config(key, value):
    """Set KEY (section.name, e.g. store.default_tag_color) to VALUE."""
    path = set_config_value(key, value)
    emit_success(f"Set {key}", data={'config_path': str(path)})
