# The MIT License (MIT)
# Copyright © 2025 Entrius

"""TEP-aware wrapper around GitHubClient: README, TEP files and tracking issues."""

from typing import Dict

import bittensor as bt

from tepbot.classes import ProposalFileInfo, ProposalInfo, TrackingIssue
from tepbot.config import BotConfig
from tepbot.tracking.codec import decode_issue, encode_issue_body, issue_labels
from tepbot.utils.github_api_tools import GitHubClient
from tepbot.utils.markdown import parse_proposal_file, parse_readme


class TEPClient:
    def __init__(self, client: GitHubClient, config: BotConfig):
        self.client = client
        self.config = config

    def get_proposals_from_readme(self) -> Dict[str, ProposalInfo]:
        """Fetch and parse the TEP README."""
        text = self.client.get_file_contents(
            self.config.teps_owner, self.config.teps_repo, self.config.readme_path, ref=self.config.teps_branch
        )
        proposals = parse_readme(text)
        bt.logging.debug(f'Parsed {len(proposals)} TEPs from {self.config.readme_path}')
        return proposals

    def get_proposal_file(self, proposal_id: str, filename: str) -> ProposalFileInfo:
        text = self.client.get_file_contents(
            self.config.teps_owner,
            self.config.teps_repo,
            self.config.proposal_path(filename),
            ref=self.config.teps_branch,
        )
        return parse_proposal_file(proposal_id, filename, text)

    def get_tracking_issues(self) -> Dict[str, TrackingIssue]:
        """Decode every open issue carrying the tracking label, keyed by TEP ID.

        Raises:
            EncodingMismatch: if an issue can't be decoded.
        """
        tracking: Dict[str, TrackingIssue] = {}
        raw_issues = self.client.list_issues(
            self.config.teps_owner, self.config.teps_repo, labels=[self.config.tracking_label]
        )
        for raw in raw_issues:
            issue = decode_issue(raw, self.config)
            existing = tracking.get(issue.proposal_id)
            if existing is not None:
                bt.logging.warning(
                    f"TEP-{issue.proposal_id} has more than one tracking issue "
                    f"(#{existing.issue_number} and #{issue.issue_number}), keeping #{existing.issue_number}"
                )
                continue
            tracking[issue.proposal_id] = issue
        return tracking

    def create_tracking_issue(self, issue: TrackingIssue, filename: str) -> int:
        """Create the issue on GitHub and return its number."""
        created = self.client.create_issue(
            self.config.teps_owner,
            self.config.teps_repo,
            title=issue.title,
            body=encode_issue_body(issue, filename, self.config),
            labels=issue_labels(issue, self.config),
            assignees=issue.assignees,
        )
        issue.issue_number = created.get('number', 0)
        return issue.issue_number

    def update_tracking_issue(self, issue: TrackingIssue, filename: str) -> None:
        if not issue.issue_number:
            raise ValueError(f'TEP-{issue.proposal_id} tracking issue has no issue number yet')
        self.client.update_issue(
            self.config.teps_owner,
            self.config.teps_repo,
            issue.issue_number,
            body=encode_issue_body(issue, filename, self.config),
            labels=issue_labels(issue, self.config),
        )
