"""
Tests for gitnotes.config.
"""

import json
import logging
import os

import pytest
import toml
import yaml

from gitnotes.config import (
    apply_env_overrides,
    configure_logging,
    get_config_path,
    get_default_config,
    load_config,
    merge_configs,
    parse_value,
    read_config_file,
    save_config,
    set_config_value,
)


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv('HOME', str(tmp_path))
    for key in list(os.environ):
        if key.startswith('GITNOTES_'):
            monkeypatch.delenv(key)
    return tmp_path


class TestConfigPath:

    def test_env_override(self, home, monkeypatch):
        monkeypatch.setenv('GITNOTES_CONFIG', str(home / 'custom.yaml'))
        assert get_config_path() == home / 'custom.yaml'

    def test_default_location(self, home):
        assert get_config_path() == home / '.gitnotes' / 'config.json'

    def test_finds_existing_file(self, home):
        (home / '.gitnotes').mkdir()
        (home / '.gitnotes' / 'config.toml').write_text('[github]\nbranch = "dev"\n')
        assert get_config_path() == home / '.gitnotes' / 'config.toml'


class TestLoadConfig:

    def test_defaults(self, home):
        config = load_config()
        assert config == get_default_config()

    def test_json(self, home):
        (home / '.gitnotes').mkdir()
        (home / '.gitnotes' / 'config.json').write_text(json.dumps({'github': {'repository': 'notes'}}))

        config = load_config()

        assert config['github']['repository'] == 'notes'
        assert config['github']['branch'] == 'main'

    def test_toml(self, home):
        (home / '.gitnotes').mkdir()
        (home / '.gitnotes' / 'config.toml').write_text('[github]\nbranch = "dev"\n')
        assert load_config()['github']['branch'] == 'dev'

    def test_yaml(self, home):
        (home / '.gitnotes').mkdir()
        (home / '.gitnotes' / 'config.yaml').write_text('store:\n  default_tag_color: red\n')
        assert load_config()['store']['default_tag_color'] == 'red'

    def test_invalid_file_falls_back_to_defaults(self, home):
        (home / '.gitnotes').mkdir()
        (home / '.gitnotes' / 'config.json').write_text('{broken')
        assert load_config() == get_default_config()

    def test_env_overrides(self, home, monkeypatch):
        monkeypatch.setenv('GITNOTES_GITHUB_TIMEOUT_SECONDS', '60')
        monkeypatch.setenv('GITNOTES_STORE_DEFAULT_TAG_COLOR', 'green')
        config = load_config()
        assert config['github']['timeout_seconds'] == 60
        assert config['store']['default_tag_color'] == 'green'


class TestSaveConfig:

    def test_json_round_trip(self, home):
        config = get_default_config()
        config['github']['repository'] = 'notes'

        path = save_config(config)

        assert path == home / '.gitnotes' / 'config.json'
        assert json.loads(path.read_text())['github']['repository'] == 'notes'
        assert (path.stat().st_mode & 0o777) == 0o600

    def test_toml(self, home, monkeypatch):
        monkeypatch.setenv('GITNOTES_CONFIG', str(home / 'config.toml'))
        save_config({'github': {'branch': 'dev'}})
        assert toml.loads((home / 'config.toml').read_text()) == {'github': {'branch': 'dev'}}

    def test_yaml(self, home, monkeypatch):
        monkeypatch.setenv('GITNOTES_CONFIG', str(home / 'config.yml'))
        save_config({'github': {'branch': 'dev'}})
        assert yaml.safe_load((home / 'config.yml').read_text()) == {'github': {'branch': 'dev'}}


class TestSetConfigValue:

    def test_keeps_other_settings(self, home):
        (home / '.gitnotes').mkdir()
        (home / '.gitnotes' / 'config.yaml').write_text('github:\n  repository: notes\n')

        path = set_config_value('store.default_tag_color', 'red')

        assert path == home / '.gitnotes' / 'config.yaml'
        assert yaml.safe_load(path.read_text()) == {
            'github': {'repository': 'notes'},
            'store': {'default_tag_color': 'red'},
        }

    def test_typed_values(self, home):
        set_config_value('github.timeout_seconds', '45')
        assert read_config_file()['github']['timeout_seconds'] == 45

    @pytest.mark.parametrize('key', ['store', 'store.theme', 'nope.token'])
    def test_unknown_key(self, home, key):
        with pytest.raises(ValueError):
            set_config_value(key, 'x')
        assert not (home / '.gitnotes').exists()

    def test_missing_file_reads_empty(self, home):
        assert read_config_file() == {}

    @pytest.mark.parametrize('raw,expected', [
        ('on', True), ('False', False), ('30', 30), ('main', 'main'), ('-1', '-1'),
    ])
    def test_parse_value(self, raw, expected):
        assert parse_value(raw) == expected


class TestMergeAndOverrides:

    def test_merge_nested(self):
        merged = merge_configs({'a': {'b': 1, 'c': 2}, 'd': 3}, {'a': {'c': 4}, 'e': 5})
        assert merged == {'a': {'b': 1, 'c': 4}, 'd': 3, 'e': 5}

    def test_underscored_keys(self, monkeypatch):
        monkeypatch.setenv('GITNOTES_GITHUB_REPOSITORY_DESCRIPTION', 'Mine')
        config = apply_env_overrides(get_default_config())
        assert config['github']['repository_description'] == 'Mine'

    def test_booleans(self, monkeypatch):
        monkeypatch.setenv('GITNOTES_FLAGS_ENABLED', 'true')
        config = apply_env_overrides({'flags': {'enabled': False}})
        assert config['flags']['enabled'] is True

    def test_unknown_keys_ignored(self, monkeypatch):
        monkeypatch.setenv('GITNOTES_DB', '/tmp/x.db')
        monkeypatch.setenv('GITNOTES_GITHUB_NOPE', 'x')
        assert apply_env_overrides(get_default_config()) == get_default_config()

    def test_section_not_replaced_by_scalar(self, monkeypatch):
        monkeypatch.setenv('GITNOTES_GITHUB', 'oops')
        assert isinstance(apply_env_overrides(get_default_config())['github'], dict)


class TestConfigureLogging:

    def test_level_from_config(self):
        config = get_default_config()
        config['logging']['level'] = 'INFO'
        configure_logging(config)
        assert logging.getLogger('gitnotes').level == logging.INFO

    def test_verbose_forces_debug(self):
        configure_logging(get_default_config(), verbose=True)
        assert logging.getLogger('gitnotes').level == logging.DEBUG
