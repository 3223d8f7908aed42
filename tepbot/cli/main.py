# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
tepbot CLI - Main entry point

Usage:
    tepbot config              - Show/set CLI configuration
    tepbot issues-from-repo    - Create tracking issues for open TEPs
    tepbot sync-issues         - Create missing issues and sync status labels
    tepbot pr-notify           - Comment on a PR referencing TEPs
"""

import json
from dataclasses import fields

import click
from rich.table import Table

from tepbot import __version__
from tepbot.cli.tep_commands import console, issues_from_repo, register_commands
from tepbot.config import CONFIG_FILE, TEPBOT_DIR, BotConfig, load_config


@click.group()
@click.version_option(version=__version__, prog_name='tepbot')
def cli():
    """tepbot - Keep TEP tracking issues and PR comments in sync"""
    pass


@click.group(name='config', invoke_without_command=True)
@click.pass_context
def config_group(ctx):
    """CLI configuration management.

    Show the effective configuration (default) or set config values.

    \b
    Subcommands:
        set <key> <value>    Set a config value
    """
    if ctx.invoked_subcommand is None:
        show_config()


def show_config():
    """Show the effective configuration and where each value comes from"""
    console.print('\n[bold]tepbot Configuration[/bold]\n')

    file_values = load_config()
    effective = BotConfig.load()

    table = Table(show_header=True)
    table.add_column('Setting', style='cyan')
    table.add_column('Value', style='green')
    table.add_column('Source', style='dim')

    for f in fields(BotConfig):
        if f.name == 'status_labels':
            continue
        value = getattr(effective, f.name)
        if value != f.default:
            source = 'config file' if file_values.get(f.name) == value else 'environment'
        else:
            source = 'default'
        table.add_row(f.name, str(value), source)

    console.print(table)
    if CONFIG_FILE.exists():
        console.print(f'\n[dim]Config file: {CONFIG_FILE}[/dim]\n')
    else:
        console.print(f'\n[dim]No config file at {CONFIG_FILE}[/dim]\n')


@config_group.command('set')
@click.argument('key', type=str)
@click.argument('value', type=str)
def config_set(key: str, value: str):
    """Set a configuration value.

    \b
    Keys:
        teps_owner           Owner of the TEP repository
        teps_repo            Repository holding the TEPs
        teps_branch          Branch the README is read from
        pr_owner             Owner of repositories whose PRs get comments
        bot_user             Login the bot comments as
        tracking_label       Label carried by every tracking issue
        status_label_prefix  Prefix of the status labels

    \b
    Examples:
        tepbot config set bot_user my-bot
        tepbot config set teps_repo community-fork
    """
    known = {f.name for f in fields(BotConfig) if f.name != 'status_labels'}
    if key not in known:
        raise click.BadParameter(f"Unknown key {key!r}. Known keys: {', '.join(sorted(known))}", param_hint='KEY')

    TEPBOT_DIR.mkdir(parents=True, exist_ok=True)

    config = {}
    if CONFIG_FILE.exists():
        try:
            config = json.loads(CONFIG_FILE.read_text())
        except json.JSONDecodeError:
            console.print('[yellow]Warning: Existing config was invalid, starting fresh[/yellow]')

    old_value = config.get(key)
    config[key] = value
    CONFIG_FILE.write_text(json.dumps(config, indent=2))

    if old_value is not None:
        console.print(f'[green]Updated {key}:[/green] {old_value} → {value}')
    else:
        console.print(f'[green]Set {key}:[/green] {value}')


cli.add_command(config_group)
register_commands(cli)


def main():
    """Main entry point for the CLI"""
    cli()


def issues_from_repo_main():
    """Entry point for the standalone tep-issues-from-repo command"""
    issues_from_repo(prog_name='tep-issues-from-repo')


if __name__ == '__main__':
    main()
