"""
CLI tests for gitnotes commands.

Commands run through click's CliRunner against an in-memory repository;
the pre-built GitNotes instance is handed over via the context object.
"""

import json

import pytest
from click.testing import CliRunner

from gitnotes.api import GitNotes
from gitnotes.cli import cli
from gitnotes.config import get_default_config
from gitnotes.exit_codes import ALREADY_EXISTS, DATA_ERROR, NOT_FOUND, NOT_READY, USAGE_ERROR
from gitnotes.infra import RateLimitStatus


def parse_jsonl(output):
    return [json.loads(line) for line in output.splitlines() if line.strip()]


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def make_api(fake, config, tmp_path):
    def factory():
        return GitNotes(config=config, client=fake, db_path=tmp_path / 'session.db')
    return factory


@pytest.fixture
def run(config):
    runner = CliRunner()

    def invoke(api, *args, **kwargs):
        return runner.invoke(cli, list(args), obj={'config': config, 'api': api}, **kwargs)
    return invoke


@pytest.fixture
def api(make_api):
    api = make_api()
    api.login(token='ghp_valid', repository='notes')
    return api


class TestSessionCommands:

    def test_login(self, run, make_api, fake):
        result = run(make_api(), 'login', '--token', 'ghp_valid', '--repository', 'notes')

        assert result.exit_code == 0, result.output
        profile = parse_jsonl(result.output)[0]
        assert profile['login'] == 'octocat'
        assert profile['repository'] == 'notes'
        assert 'token' not in profile
        assert '.gitnotes' in fake.files()

    def test_login_token_from_env(self, run, make_api):
        result = run(make_api(), 'login', '-r', 'notes', env={'GITHUB_TOKEN': 'ghp_valid'})
        assert result.exit_code == 0, result.output

    def test_login_bad_token(self, run, make_api):
        result = run(make_api(), 'login', '--token', 'nope', '--repository', 'notes')

        assert result.exit_code == 69
        assert 'AuthenticationError' in result.output

    def test_whoami_pretty(self, run, api, make_api):
        result = run(make_api(), 'whoami', '--pretty')

        assert result.exit_code == 0, result.output
        assert 'octocat' in result.output
        assert 'notes' in result.output

    def test_logout(self, run, api, make_api):
        result = run(api, 'logout')

        assert result.exit_code == 0
        assert parse_jsonl(result.output)[0]['success'] is True
        assert run(make_api(), 'note', 'list').exit_code == NOT_READY

    def test_whoami_refresh_reports_quota(self, run, api, make_api, fake):
        fake.rate_limit = RateLimitStatus(remaining=4200, limit=5000, reset_time=0, used=800)

        result = run(make_api(), 'whoami', '--refresh')

        assert result.exit_code == 0, result.output
        profile = parse_jsonl(result.output)[0]
        assert profile['name'] == 'The Octocat'
        assert profile['rate_limit_remaining'] == 4200

    def test_logout_all(self, run, api, make_api):
        result = run(api, 'logout', '--all')

        assert result.exit_code == 0
        assert run(make_api(), 'whoami').exit_code == NOT_READY

    def test_not_logged_in(self, run, make_api):
        result = run(make_api(), 'tag', 'list')

        assert result.exit_code == NOT_READY
        assert 'NotReadyError' in result.output


class TestNoteCommands:

    def test_add_and_show(self, run, api, fake):
        added = run(api, 'note', 'add', 'Groceries', '--content', '- milk')
        assert added.exit_code == 0, added.output
        note = parse_jsonl(added.output)[0]
        assert note['tag'] is None
        assert fake.files()['notes/Groceries.md'] == '- milk'

        shown = run(api, 'note', 'show', note['id'])
        data = parse_jsonl(shown.output)[0]
        assert data['title'] == 'Groceries'
        assert data['content'] == '- milk'

        raw = run(api, 'note', 'show', note['id'], '--raw')
        assert raw.output == '- milk'

    def test_add_from_stdin(self, run, api, fake):
        result = run(api, 'note', 'add', 'Journal', '--file', '-', input='dear diary\n')

        assert result.exit_code == 0, result.output
        assert fake.files()['notes/Journal.md'] == 'dear diary\n'

    def test_add_with_tag_name(self, run, api, fake):
        tag = parse_jsonl(run(api, 'tag', 'add', 'todo').output)[0]

        result = run(api, 'note', 'add', 'Groceries', '-t', 'todo', '-c', '- milk')

        assert parse_jsonl(result.output)[0]['tag'] == tag['id']
        assert 'notes/todo/Groceries.md' in fake.files()

    def test_add_unknown_tag(self, run, api):
        result = run(api, 'note', 'add', 'Groceries', '--tag', 'nope')
        assert result.exit_code == NOT_FOUND
        assert 'TagNotFoundError' in result.output

    def test_add_duplicate_path(self, run, api):
        run(api, 'note', 'add', 'Groceries')
        result = run(api, 'note', 'add', 'Groceries')
        assert result.exit_code == ALREADY_EXISTS

    def test_list_filtered(self, run, api):
        run(api, 'tag', 'add', 'todo')
        run(api, 'note', 'add', 'Groceries', '--tag', 'todo')
        run(api, 'note', 'add', 'Loose')

        everything = parse_jsonl(run(api, 'note', 'list').output)
        tagged = parse_jsonl(run(api, 'note', 'list', '--tag', 'todo').output)

        assert sorted(n['title'] for n in everything) == ['Groceries', 'Loose']
        assert [n['title'] for n in tagged] == ['Groceries']

    def test_list_pretty_empty(self, run, api):
        result = run(api, 'note', 'list', '--pretty')
        assert 'No results found' in result.output

    def test_edit_retag_and_rewrite(self, run, api, fake):
        run(api, 'tag', 'add', 'work')
        note = parse_jsonl(run(api, 'note', 'add', 'Standup', '-c', 'old').output)[0]

        result = run(api, 'note', 'edit', note['id'], '--title', 'Daily', '--tag', 'work', '-c', 'new')

        assert result.exit_code == 0, result.output
        edited = parse_jsonl(result.output)[0]
        assert edited['title'] == 'Daily'
        assert edited['updatedAt'] is not None
        assert fake.files()['notes/work/Daily.md'] == 'new'
        assert 'notes/Standup.md' not in fake.files()

    def test_edit_untag(self, run, api, fake):
        run(api, 'tag', 'add', 'work')
        note = parse_jsonl(run(api, 'note', 'add', 'Standup', '-t', 'work').output)[0]

        result = run(api, 'note', 'edit', note['id'], '--untag')

        assert parse_jsonl(result.output)[0]['tag'] is None
        assert 'notes/Standup.md' in fake.files()

    def test_edit_tag_and_untag_conflict(self, run, api):
        result = run(api, 'note', 'edit', 'n1', '--tag', 'work', '--untag')
        assert result.exit_code == USAGE_ERROR

    def test_content_and_file_conflict(self, run, api):
        result = run(api, 'note', 'add', 'X', '-c', 'a', '-f', '-', input='b')
        assert result.exit_code == USAGE_ERROR

    def test_rm(self, run, api, fake):
        note = parse_jsonl(run(api, 'note', 'add', 'Groceries').output)[0]

        result = run(api, 'note', 'rm', note['id'])

        assert parse_jsonl(result.output)[0]['data'] == {'id': note['id']}
        assert 'notes/Groceries.md' not in fake.files()
        assert parse_jsonl(run(api, 'note', 'list').output) == []

    def test_unknown_note(self, run, api):
        result = run(api, 'note', 'show', 'missing')

        assert result.exit_code == NOT_FOUND
        assert 'NoteNotFoundError' in result.output


class TestTagCommands:

    def test_add_and_list(self, run, api):
        added = parse_jsonl(run(api, 'tag', 'add', 'todo', '--color', 'red').output)[0]
        assert (added['name'], added['color']) == ('todo', 'red')

        listed = parse_jsonl(run(api, 'tag', 'list').output)
        assert [t['id'] for t in listed] == [added['id']]

    def test_add_default_colour(self, run, api):
        added = parse_jsonl(run(api, 'tag', 'add', 'todo').output)[0]
        assert added['color'] == 'blue'

    def test_bad_colour(self, run, api):
        assert run(api, 'tag', 'add', 'todo', '--color', 'mauve').exit_code == USAGE_ERROR

    def test_list_pretty(self, run, api):
        run(api, 'tag', 'add', 'todo')
        result = run(api, 'tag', 'list', '--pretty')
        assert 'todo' in result.output

    def test_rename_moves_notes(self, run, api, fake):
        run(api, 'tag', 'add', 'todo')
        run(api, 'note', 'add', 'Groceries', '-t', 'todo', '-c', '- milk')

        result = run(api, 'tag', 'rename', 'todo', 'errands', '--color', 'green')

        assert result.exit_code == 0, result.output
        renamed = parse_jsonl(result.output)[0]
        assert (renamed['name'], renamed['color']) == ('errands', 'green')
        files = fake.files()
        assert files['notes/errands/Groceries.md'] == '- milk'
        assert not any(path.startswith('notes/todo/') for path in files)

    def test_rename_unknown(self, run, api):
        assert run(api, 'tag', 'rename', 'nope', 'x').exit_code == NOT_FOUND

    def test_rm_detaches_notes(self, run, api, fake):
        run(api, 'tag', 'add', 'todo')
        note = parse_jsonl(run(api, 'note', 'add', 'Groceries', '-t', 'todo').output)[0]

        result = run(api, 'tag', 'rm', 'todo')

        assert result.exit_code == 0, result.output
        detached = parse_jsonl(result.output)
        assert [n['id'] for n in detached] == [note['id']]
        assert detached[0]['tag'] is None
        assert 'notes/Groceries.md' in fake.files()
        assert parse_jsonl(run(api, 'tag', 'list').output) == []


class TestGroup:

    def test_help(self):
        result = CliRunner().invoke(cli, ['--help'], obj={'config': get_default_config()})
        assert result.exit_code == 0
        for command in ('login', 'logout', 'whoami', 'note', 'tag'):
            assert command in result.output


class TestConfigCommands:

    @pytest.fixture
    def config_file(self, tmp_path, monkeypatch):
        path = tmp_path / 'config.json'
        monkeypatch.setenv('GITNOTES_CONFIG', str(path))
        return path

    def test_show_masks_token(self, run, make_api, config):
        config['github']['token'] = 'ghp_secret'

        result = run(make_api(), 'config', 'show')

        shown = json.loads(result.output)
        assert shown['github']['token'] == '***'
        assert config['github']['token'] == 'ghp_secret'

    def test_show_path(self, run, make_api, config_file):
        result = run(make_api(), 'config', 'show', '--path')
        assert json.loads(result.output) == {'config_path': str(config_file)}

    def test_set(self, run, make_api, config_file):
        config_file.write_text(json.dumps({'github': {'repository': 'notes'}}))

        result = run(make_api(), 'config', 'set', 'github.timeout_seconds', '60')

        assert result.exit_code == 0, result.output
        assert json.loads(config_file.read_text()) == {
            'github': {'repository': 'notes', 'timeout_seconds': 60},
        }

    def test_set_unknown_key(self, run, make_api, config_file):
        result = run(make_api(), 'config', 'set', 'store.theme', 'dark')

        assert result.exit_code == DATA_ERROR
        assert not config_file.exists()
