# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
tepbot CLI

Usage:
    tepbot issues-from-repo --github-token TOKEN
    tepbot sync-issues --github-token TOKEN
    tepbot pr-notify --event-file event.json
    tepbot config [set <key> <value>]
"""

from .main import cli, main

__all__ = ['cli', 'main']
