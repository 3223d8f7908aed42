# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
CLI commands for TEP tracking issues and PR notifications

Command structure:
    tepbot issues-from-repo      Create tracking issues for open TEPs
    tepbot sync-issues           Create missing issues and sync status labels
    tepbot pr-notify             Comment on a PR referencing TEPs
"""

from .helpers import console
from .issues import issues_from_repo, sync_issues_command
from .notify import pr_notify


def register_commands(cli):
    """Register all TEP commands with the root CLI group."""
    cli.add_command(issues_from_repo)
    cli.add_command(sync_issues_command)
    cli.add_command(pr_notify)


__all__ = [
    'register_commands',
    'issues_from_repo',
    'sync_issues_command',
    'pr_notify',
    'console',
]
