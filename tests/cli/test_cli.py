#!/usr/bin/env python3
# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
CLI tests using click's CliRunner.

The GitHub side is the in-memory FakeGitHub; build_tep_client is patched in
the command modules so no real requests are made.
"""

import json
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from tepbot.cli.main import cli
from tepbot.cli.tep_commands.notify import parse_params
from tests.conftest import DEFAULT_README, ISSUES_PATH, README_PATH, make_issue

COMMENTS_PATH = '/repos/tektoncd/pipeline/issues/7/comments'


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.delenv('GITHUB_TOKEN', raising=False)
    return CliRunner()


@pytest.fixture
def repo(github):
    github.file(README_PATH, DEFAULT_README)
    github.route('GET', ISSUES_PATH, [make_issue('5678', 3, status='implementable')])
    github.route('POST', ISSUES_PATH, {'number': 40})
    github.route('GET', COMMENTS_PATH, [])
    github.route('POST', COMMENTS_PATH, {'id': 1})
    for path in ('1234-something-or-other.md', '4321-third-one.md'):
        github.file(
            f'/repos/tektoncd/community/contents/teps/{path}',
            "---\nstatus: proposed\nauthors:\n- '@someone'\n---\n# A TEP\n",
        )
    return github


# ============================================================================
# issues-from-repo / sync-issues
# ============================================================================


class TestIssueCommands:
    def test_requires_token(self, runner):
        result = runner.invoke(cli, ['issues-from-repo'])

        assert result.exit_code == 1
        assert 'GitHub token is required' in result.output

    def test_token_from_environment(self, runner, tep_client, repo):
        with patch('tepbot.cli.tep_commands.issues.build_tep_client', return_value=tep_client) as mock_build:
            result = runner.invoke(cli, ['issues-from-repo', '--dry-run'], env={'GITHUB_TOKEN': 'env_token'})

        assert result.exit_code == 0, result.output
        assert mock_build.call_args.args[0] == 'env_token'

    def test_dry_run_writes_nothing(self, runner, tep_client, repo):
        with patch('tepbot.cli.tep_commands.issues.build_tep_client', return_value=tep_client):
            result = runner.invoke(cli, ['issues-from-repo', '--github-token', 't', '--dry-run'])

        assert result.exit_code == 0, result.output
        assert repo.writes == []
        assert 'dry run' in result.output

    def test_creates_issues(self, runner, tep_client, repo):
        with patch('tepbot.cli.tep_commands.issues.build_tep_client', return_value=tep_client):
            result = runner.invoke(cli, ['issues-from-repo', '--github-token', 't'])

        assert result.exit_code == 0, result.output
        assert len(repo.calls_to('POST', ISSUES_PATH)) == 2
        assert '2 tracking issue(s) created, 0 updated' in result.output

    def test_repo_overrides_are_passed(self, runner, tep_client, repo):
        with patch('tepbot.cli.tep_commands.issues.build_tep_client', return_value=tep_client) as mock_build:
            runner.invoke(
                cli, ['sync-issues', '--github-token', 't', '--dry-run', '--teps-owner', 'me', '--teps-repo', 'teps']
            )

        assert mock_build.call_args.kwargs['overrides'] == {'teps_owner': 'me', 'teps_repo': 'teps'}

    def test_failure_exits_non_zero(self, runner, tep_client, repo):
        del repo.routes[('GET', README_PATH)]

        with patch('tepbot.cli.tep_commands.issues.build_tep_client', return_value=tep_client):
            result = runner.invoke(cli, ['sync-issues', '--github-token', 't'])

        assert result.exit_code == 1
        assert repo.writes == []

    def test_readme_directory_listing_exits_non_zero(self, runner, tep_client, repo):
        repo.route('GET', README_PATH, [{'name': 'README.md', 'type': 'file'}])

        with patch('tepbot.cli.tep_commands.issues.build_tep_client', return_value=tep_client):
            result = runner.invoke(cli, ['issues-from-repo', '--github-token', 't'])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert 'is not a file' in result.output
        assert repo.writes == []


# ============================================================================
# pr-notify
# ============================================================================


class TestPrNotify:
    def test_needs_exactly_one_input(self, runner, tmp_path):
        event_file = tmp_path / 'event.json'
        event_file.write_text('{}')

        neither = runner.invoke(cli, ['pr-notify', '--github-token', 't'])
        both = runner.invoke(
            cli, ['pr-notify', '--github-token', 't', '--event-file', str(event_file), '--param', 'action=opened']
        )

        assert neither.exit_code == 2
        assert both.exit_code == 2

    def test_invalid_params(self, runner):
        result = runner.invoke(cli, ['pr-notify', '--github-token', 't', '--param', 'action=opened'])

        assert result.exit_code == 1
        assert 'Invalid event' in result.output

    def test_params_comment_on_pr(self, runner, tep_client, repo):
        args = [
            'pr-notify',
            '--github-token', 't',
            '--param', 'action=opened',
            '--param', 'pr-number=7',
            '--param', 'package=pipeline',
            '--param', 'pr-title=Implement TEP-1234',
        ]  # fmt: skip

        with patch('tepbot.cli.tep_commands.notify.build_tep_client', return_value=tep_client):
            result = runner.invoke(cli, args)

        assert result.exit_code == 0, result.output
        assert len(repo.calls_to('POST', COMMENTS_PATH)) == 1
        assert 'CommentAdded' in result.output

    def test_event_file(self, runner, tep_client, repo, tmp_path):
        event_file = tmp_path / 'event.json'
        event_file.write_text(
            json.dumps(
                {
                    'action': 'opened',
                    'pull_request': {'number': 7, 'title': 'Nothing to see', 'body': None, 'merged': False},
                    'repository': {'name': 'pipeline'},
                }
            )
        )

        with patch('tepbot.cli.tep_commands.notify.build_tep_client', return_value=tep_client):
            result = runner.invoke(cli, ['pr-notify', '--github-token', 't', '--event-file', str(event_file)])

        assert result.exit_code == 0, result.output
        assert repo.calls_to('GET', COMMENTS_PATH) == []
        assert repo.writes == []
        assert 'NoProposalsReferenced' in result.output

    def test_warning_exits_non_zero(self, runner, tep_client, repo):
        del repo.routes[('GET', README_PATH)]
        args = ['pr-notify', '--github-token', 't', '--param', 'action=opened', '--param', 'pr-number=7']
        args += ['--param', 'package=pipeline', '--param', 'pr-title=TEP-1234']

        with patch('tepbot.cli.tep_commands.notify.build_tep_client', return_value=tep_client):
            result = runner.invoke(cli, args)

        assert result.exit_code == 1
        assert 'LoadingPRTEPs' in result.output


class TestParseParams:
    def test_values_may_contain_equals(self):
        assert parse_params(('pr-body=a=b', 'action=opened')) == {'pr-body': 'a=b', 'action': 'opened'}

    def test_missing_equals(self):
        with pytest.raises(click.BadParameter):
            parse_params(('action',))


# ============================================================================
# config
# ============================================================================


class TestConfigCommand:
    @pytest.fixture
    def config_file(self, tmp_path):
        config_dir = tmp_path / '.tepbot'
        config_file = config_dir / 'config.json'
        with patch('tepbot.cli.main.TEPBOT_DIR', config_dir), patch('tepbot.cli.main.CONFIG_FILE', config_file):
            with patch('tepbot.config.CONFIG_FILE', config_file):
                yield config_file

    def test_set_writes_file(self, runner, config_file):
        result = runner.invoke(cli, ['config', 'set', 'bot_user', 'my-bot'])

        assert result.exit_code == 0, result.output
        assert json.loads(config_file.read_text()) == {'bot_user': 'my-bot'}

    def test_set_unknown_key(self, runner, config_file):
        result = runner.invoke(cli, ['config', 'set', 'colour', 'blue'])

        assert result.exit_code == 2
        assert not config_file.exists()

    def test_show(self, runner, config_file, monkeypatch):
        monkeypatch.delenv('TEPBOT_BOT_USER', raising=False)
        runner.invoke(cli, ['config', 'set', 'bot_user', 'my-bot'])

        result = runner.invoke(cli, ['config'])

        assert result.exit_code == 0, result.output
        assert 'my-bot' in result.output
        assert 'config file' in result.output
