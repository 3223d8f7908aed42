# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Tracking issue commands

Commands:
    tepbot issues-from-repo
    tepbot sync-issues
"""

import click

from tepbot.exceptions import TEPBotError
from tepbot.tracking.reconciler import ActionKind, create_issues, sync_issues

from .helpers import build_tep_client, console, fail, print_actions_table, print_success, require_token


def _repo_options(f):
    f = click.option('--events-dir', default=None, help='Directory to write events.log to')(f)
    f = click.option('--teps-repo', default=None, help='Repository holding the TEPs (default: community)')(f)
    f = click.option('--teps-owner', default=None, help='Owner of the TEP repository (default: tektoncd)')(f)
    f = click.option('--dry-run', is_flag=True, default=False, help='Only show what would change')(f)
    f = click.option('--github-token', default=None, help='GitHub token to use for issue creation')(f)
    return f


def _run(reconcile_fn, github_token, dry_run, teps_owner, teps_repo, events_dir):
    token = require_token(github_token)
    tep_client = build_tep_client(
        token, events_dir=events_dir, overrides={'teps_owner': teps_owner, 'teps_repo': teps_repo}
    )
    config = tep_client.config

    console.print(f'[dim]TEPs: {config.teps_owner}/{config.teps_repo}/{config.readme_path}[/dim]\n')
    try:
        actions = reconcile_fn(tep_client, dry_run=dry_run)
    except TEPBotError as e:
        fail(str(e))

    print_actions_table(actions, dry_run)

    if not dry_run:
        created = sum(1 for a in actions if a.kind == ActionKind.CREATE)
        updated = sum(1 for a in actions if a.kind == ActionKind.UPDATE_STATUS)
        print_success(f'{created} tracking issue(s) created, {updated} updated')


@click.command('issues-from-repo')
@_repo_options
def issues_from_repo(github_token, dry_run, teps_owner, teps_repo, events_dir):
    """
    Create tracking issues for existing TEPs.

    Every TEP in the README that isn't implemented, withdrawn or replaced
    and has no open tracking issue gets one, assigned to the TEP's authors.
    Existing tracking issues are left alone.

    \b
    Examples:
        tepbot issues-from-repo --github-token $GITHUB_TOKEN
        tepbot issues-from-repo --github-token $GITHUB_TOKEN --dry-run
    """
    _run(create_issues, github_token, dry_run, teps_owner, teps_repo, events_dir)


@click.command('sync-issues')
@_repo_options
def sync_issues_command(github_token, dry_run, teps_owner, teps_repo, events_dir):
    """
    Create missing tracking issues and sync status labels.

    Like issues-from-repo, but existing tracking issues whose status label
    no longer matches the README are updated. Recorded PRs are preserved.

    \b
    Examples:
        tepbot sync-issues --github-token $GITHUB_TOKEN --dry-run
    """
    _run(sync_issues, github_token, dry_run, teps_owner, teps_repo, events_dir)
