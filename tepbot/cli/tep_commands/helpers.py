# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared helper functions for TEP commands
"""

import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from tepbot.config import BotConfig, resolve_github_token
from tepbot.tracking.reconciler import ActionKind, ReconcileAction
from tepbot.tracking.tep_client import TEPClient
from tepbot.utils.github_api_tools import GitHubClient
from tepbot.utils.logging import setup_events_logger

# Action display colors
ACTION_COLORS: Dict[ActionKind, str] = {
    ActionKind.CREATE: 'green',
    ActionKind.UPDATE_STATUS: 'yellow',
    ActionKind.NOOP: 'dim',
}

console = Console()


def print_success(message: str) -> None:
    """Print a standardized success message."""
    console.print(f'\n  [green]✓[/green] {message}\n')


def print_error(message: str) -> None:
    """Print a standardized error message."""
    console.print(f'\n  [red]✗[/red] {message}\n')


def fail(message: str) -> None:
    """Print the error and exit with status 1."""
    print_error(message)
    sys.exit(1)


def require_token(github_token: Optional[str]) -> str:
    """--github-token, falling back to GITHUB_TOKEN. Exits with status 1 if neither is set."""
    token = resolve_github_token(github_token)
    if not token:
        fail('A GitHub token is required (pass --github-token or set GITHUB_TOKEN)')
    return token


def build_tep_client(
    github_token: str,
    events_dir: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> TEPClient:
    """Wire config, GitHub client and (optionally) the events log together."""
    if events_dir:
        setup_events_logger(events_dir)
    config = BotConfig.load(overrides)
    return TEPClient(GitHubClient(token=github_token), config)


def print_actions_table(actions: List[ReconcileAction], dry_run: bool) -> None:
    """Render reconciliation actions as a table, hiding no-ops."""
    changes = [a for a in actions if a.kind != ActionKind.NOOP]
    if not changes:
        console.print('[dim]All tracking issues are up to date.[/dim]')
        return

    title = 'Planned changes (dry run)' if dry_run else 'Applied changes'
    table = Table(title=title, show_header=True)
    table.add_column('TEP', style='cyan')
    table.add_column('Title')
    table.add_column('Action')
    table.add_column('Issue', justify='right')
    table.add_column('Status')

    for action in changes:
        color = ACTION_COLORS[action.kind]
        issue_number = f'#{action.issue.issue_number}' if action.issue and action.issue.issue_number else '-'
        if action.previous_status and action.previous_status != action.proposal.status:
            status = f'{action.previous_status} → {action.proposal.status}'
        else:
            status = str(action.proposal.status)
        table.add_row(
            f'TEP-{action.proposal.id}',
            action.proposal.title,
            f'[{color}]{action.kind.value}[/{color}]',
            issue_number,
            status,
        )

    console.print(table)
