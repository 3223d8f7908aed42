# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Bot configuration.

Priority (highest first):
    1. CLI arguments (handled by callers through ``overrides``)
    2. TEPBOT_* environment variables
    3. ~/.tepbot/config.json (managed via ``tepbot config set``)
    4. Defaults from tepbot.constants
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import bittensor as bt

from tepbot.classes import Status
from tepbot.constants import (
    BOT_USER,
    GITHUB_DOMAIN,
    PR_OWNER,
    STATUS_LABEL_PREFIX,
    TEPS_BRANCH,
    TEPS_DIRECTORY,
    TEPS_OWNER,
    TEPS_README,
    TEPS_REPO,
    TRACKING_ISSUE_LABEL,
)

TEPBOT_DIR = Path.home() / '.tepbot'
CONFIG_FILE = TEPBOT_DIR / 'config.json'
ENV_PREFIX = 'TEPBOT_'


@dataclass
class BotConfig:
    """Process-wide settings passed explicitly to every component."""

    teps_owner: str = TEPS_OWNER
    teps_repo: str = TEPS_REPO
    teps_branch: str = TEPS_BRANCH
    teps_directory: str = TEPS_DIRECTORY
    readme_name: str = TEPS_README
    pr_owner: str = PR_OWNER
    bot_user: str = BOT_USER
    tracking_label: str = TRACKING_ISSUE_LABEL
    status_label_prefix: str = STATUS_LABEL_PREFIX
    status_labels: Dict[Status, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.status_labels:
            self.status_labels = {status: f'{self.status_label_prefix}{status.value}' for status in Status}
        self._label_to_status = {label: status for status, label in self.status_labels.items()}

    @property
    def readme_path(self) -> str:
        return f'{self.teps_directory}/{self.readme_name}'

    def proposal_path(self, filename: str) -> str:
        return f'{self.teps_directory}/{filename}'

    def proposal_url(self, filename: str) -> str:
        """Browser URL of a TEP file."""
        return f'{GITHUB_DOMAIN}/{self.teps_owner}/{self.teps_repo}/blob/{self.teps_branch}/{self.proposal_path(filename)}'

    def status_label(self, status: Status) -> str:
        return self.status_labels[status]

    def status_for_label(self, label: str) -> Optional[Status]:
        return self._label_to_status.get(label)

    @classmethod
    def load(cls, overrides: Optional[Dict[str, Any]] = None) -> 'BotConfig':
        """Build a config from the config file, environment and explicit overrides."""
        known = {f.name for f in fields(cls) if f.name != 'status_labels'}
        values: Dict[str, Any] = {}

        for key, value in load_config().items():
            if key in known:
                values[key] = value
            else:
                bt.logging.debug(f'Ignoring unknown config key {key!r} in {CONFIG_FILE}')

        for key in known:
            env_val = os.environ.get(f'{ENV_PREFIX}{key.upper()}')
            if env_val:
                values[key] = env_val

        for key, value in (overrides or {}).items():
            if value is not None and key in known:
                values[key] = value

        return cls(**values)


def load_config() -> Dict[str, Any]:
    """
    Load configuration from ~/.tepbot/config.json.

    Config file format:
        {
            "teps_owner": "tektoncd",
            "teps_repo": "community",
            "bot_user": "tekton-robot"
        }

    Returns:
        Dict with all config keys, empty if the file is missing or invalid
    """
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            bt.logging.warning(f'Could not read {CONFIG_FILE}: {e}')
    return {}


def resolve_github_token(cli_value: Optional[str] = None) -> str:
    """GitHub token. CLI arg > GITHUB_TOKEN env var."""
    if cli_value:
        return cli_value
    return os.environ.get('GITHUB_TOKEN', '')
