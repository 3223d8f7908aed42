# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
PR notification command

Commands:
    tepbot pr-notify
"""

import json
from typing import Dict, Tuple

import click
from rich.panel import Panel

from tepbot.performers.pr_notifier import PRNotifier, PROptions
from tepbot.utils.logging import log_event

from .helpers import build_tep_client, console, fail, print_success, require_token


def parse_params(raw_params: Tuple[str, ...]) -> Dict[str, str]:
    """Turn repeated ``--param key=value`` options into a dict."""
    params = {}
    for raw in raw_params:
        key, sep, value = raw.partition('=')
        if not sep or not key.strip():
            raise click.BadParameter(f'expected key=value, got {raw!r}', param_hint='--param')
        params[key.strip()] = value
    return params


@click.command('pr-notify')
@click.option('--github-token', default=None, help='GitHub token used to read TEPs and write comments')
@click.option(
    '--event-file',
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help='GitHub pull_request webhook payload (JSON)',
)
@click.option(
    '--param',
    'raw_params',
    multiple=True,
    help='Run parameter as key=value (action, pr-title, pr-body, pr-number, package, pr-is-merged)',
)
@click.option('--events-dir', default=None, help='Directory to write events.log to')
def pr_notify(github_token, event_file, raw_params, events_dir):
    """
    Comment on a PR that references TEPs.

    On an opened PR referencing proposed/implementable TEPs, or a merged PR
    referencing implementing TEPs, adds (or updates) a comment listing them and
    records the PR on each TEP's tracking issue.

    \b
    Examples:
        tepbot pr-notify --event-file event.json
        tepbot pr-notify --param action=opened --param pr-number=42 \\
            --param package=pipeline --param "pr-title=Implement TEP-0090"
    """
    if bool(event_file) == bool(raw_params):
        raise click.UsageError('Pass exactly one of --event-file or --param')

    try:
        if event_file:
            with open(event_file, 'r') as f:
                opts = PROptions.from_webhook(json.load(f))
        else:
            opts = PROptions.from_params(parse_params(raw_params))
    except ValueError as e:
        fail(f'Invalid event: {e}')

    token = require_token(github_token)
    notifier = PRNotifier(build_tep_client(token, events_dir=events_dir))
    result = notifier.perform(opts)
    log_event(result.event, subject=str(opts))

    if result.event is None:
        print_success(f'{opts}: {result.state.value}, nothing to do')
        return

    color = 'red' if result.event.is_warning else 'green'
    console.print(
        Panel(
            f'[cyan]PR:[/cyan] {opts}\n'
            f'[cyan]State:[/cyan] {result.state.value}\n'
            f'[cyan]Reason:[/cyan] {result.event.reason}\n'
            f'[cyan]Message:[/cyan] {result.event.message}',
            title=result.event.event_type,
            border_style=color,
        )
    )
    if not result.ok:
        fail(result.event.message)
