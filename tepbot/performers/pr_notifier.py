# The MIT License (MIT)
# Copyright © 2025 Entrius

"""PR notifier: comments on PRs that reference TEPs and records merged ones on the tracking issues.

Runs once per pull_request event. Failures never raise: they come back as
Warning events.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

import bittensor as bt

from tepbot.classes import ProposalInfo, Status
from tepbot.exceptions import TEPBotError
from tepbot.tracking.codec import compose_comment, find_bot_comment
from tepbot.tracking.tep_client import TEPClient
from tepbot.utils.markdown import extract_proposal_ids

# Run parameter names
ACTION_PARAM = 'action'
PR_TITLE_PARAM = 'pr-title'
PR_BODY_PARAM = 'pr-body'
PR_NUMBER_PARAM = 'pr-number'
PR_REPO_PARAM = 'package'
PR_IS_MERGED_PARAM = 'pr-is-merged'

OPENED_ACTION = 'opened'
CLOSED_ACTION = 'closed'

EVENT_TYPE_NORMAL = 'Normal'
EVENT_TYPE_WARNING = 'Warning'

TO_IMPLEMENTING_COMMENT_HEADER = (
    "This PR references the following TEPs, which are not yet marked as being implemented. "
    "If this PR starts the implementation of any of them, please update the TEP status to `implementing`.\n\n"
)
TO_IMPLEMENTED_COMMENT_HEADER = (
    "This merged PR references the following TEPs, which are currently being implemented. "
    "If this PR completes the implementation of any of them, please update the TEP status to `implemented`.\n\n"
)

OPENED_PR_STATUSES = frozenset({Status.PROPOSED, Status.IMPLEMENTABLE})
MERGED_PR_STATUSES = frozenset({Status.IMPLEMENTING})


class PerformState(Enum):
    IGNORED = "Ignored"
    README_FETCH_FAILED = "ReadmeFetchFailed"
    NO_PROPOSALS_REFERENCED = "NoProposalsReferenced"
    WRONG_PR_STATE = "WrongPRState"
    COMMENT_UNCHANGED = "CommentChecked-NoOp"
    COMMENT_CREATED = "CommentCreated"
    COMMENT_UPDATED = "CommentUpdated"
    FAILED = "Failed"


@dataclass
class ReconcilerEvent:
    """Outcome reported to the host, with a machine-readable reason"""

    event_type: str
    reason: str
    message: str

    @property
    def is_warning(self) -> bool:
        return self.event_type == EVENT_TYPE_WARNING


@dataclass
class PerformResult:
    state: PerformState
    event: Optional[ReconcilerEvent] = None

    @property
    def ok(self) -> bool:
        return self.event is None or not self.event.is_warning


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes')


@dataclass
class PROptions:
    """The fields of a pull_request event the notifier looks at"""

    action: str
    pr_number: int
    repo: str
    pr_title: str = ''
    pr_body: str = ''
    is_merged: bool = False

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> 'PROptions':
        """Build options from run parameters (``action``, ``pr-title``, ...).

        Raises:
            ValueError: if a required parameter is missing or the PR number isn't an integer.
        """
        missing = [name for name in (ACTION_PARAM, PR_NUMBER_PARAM, PR_REPO_PARAM) if not params.get(name)]
        if missing:
            raise ValueError(f"missing required parameter(s): {', '.join(missing)}")

        try:
            pr_number = int(params[PR_NUMBER_PARAM])
        except (TypeError, ValueError):
            raise ValueError(f"{PR_NUMBER_PARAM} must be an integer, got {params[PR_NUMBER_PARAM]!r}") from None

        return cls(
            action=str(params[ACTION_PARAM]),
            pr_number=pr_number,
            repo=str(params[PR_REPO_PARAM]),
            pr_title=params.get(PR_TITLE_PARAM) or '',
            pr_body=params.get(PR_BODY_PARAM) or '',
            is_merged=_parse_bool(params.get(PR_IS_MERGED_PARAM, False)),
        )

    @classmethod
    def from_webhook(cls, payload: Dict[str, Any]) -> 'PROptions':
        """Build options from a GitHub ``pull_request`` webhook payload."""
        try:
            pull_request = payload['pull_request']
            return cls(
                action=payload['action'],
                pr_number=int(pull_request['number']),
                repo=payload['repository']['name'],
                pr_title=pull_request.get('title') or '',
                pr_body=pull_request.get('body') or '',
                is_merged=bool(pull_request.get('merged')),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"not a pull_request event payload: missing {e}") from e

    @property
    def is_opened(self) -> bool:
        return self.action == OPENED_ACTION

    @property
    def is_merged_close(self) -> bool:
        return self.action == CLOSED_ACTION and self.is_merged

    def __str__(self) -> str:
        return f"{self.repo}#{self.pr_number} ({self.action}{', merged' if self.is_merged else ''})"


class PRNotifier:
    """Comments on opened / merged PRs referencing TEPs. Merged PRs are also recorded as implementation PRs."""

    def __init__(self, tep_client: TEPClient):
        self.tep_client = tep_client
        self.config = tep_client.config

    def _warning(self, state: PerformState, reason: str, message: str) -> PerformResult:
        return PerformResult(state, ReconcilerEvent(EVENT_TYPE_WARNING, reason, message))

    def perform(self, opts: PROptions) -> PerformResult:
        if opts.is_opened:
            header, expected_statuses = TO_IMPLEMENTING_COMMENT_HEADER, OPENED_PR_STATUSES
        elif opts.is_merged_close:
            header, expected_statuses = TO_IMPLEMENTED_COMMENT_HEADER, MERGED_PR_STATUSES
        else:
            bt.logging.debug(f"Ignoring {opts}")
            return PerformResult(PerformState.IGNORED)

        try:
            all_proposals = self.tep_client.get_proposals_from_readme()
        except TEPBotError as e:
            return self._warning(
                PerformState.README_FETCH_FAILED, 'LoadingPRTEPs', f"Error loading TEPs referenced by {opts}: {e}"
            )

        referenced_ids = extract_proposal_ids(opts.pr_title, opts.pr_body)
        referenced = [all_proposals[proposal_id] for proposal_id in referenced_ids if proposal_id in all_proposals]
        if not referenced:
            bt.logging.debug(f"{opts} does not reference any known TEP")
            return PerformResult(PerformState.NO_PROPOSALS_REFERENCED)

        proposals = [p for p in referenced if p.status in expected_statuses]
        if not proposals:
            bt.logging.debug(f"No TEP referenced by {opts} is in an expected state for this action")
            return PerformResult(PerformState.WRONG_PR_STATE)

        result = self._sync_comment(opts, header, proposals)
        if not result.ok or not opts.is_merged_close:
            return result

        tracking_failure = self._record_implementation_pr(opts, proposals)
        return tracking_failure or result

    def _sync_comment(self, opts: PROptions, header: str, proposals: List[ProposalInfo]) -> PerformResult:
        owner = self.config.pr_owner
        try:
            comments = self.tep_client.client.list_comments(owner, opts.repo, opts.pr_number)
        except TEPBotError as e:
            return self._warning(
                PerformState.FAILED, 'CheckingPRComments', f"Error checking existing comments on {opts}: {e}"
            )

        body = compose_comment(header, proposals, self.config)
        existing = find_bot_comment(comments, header, self.config)

        if existing is None:
            try:
                self.tep_client.client.create_comment(owner, opts.repo, opts.pr_number, body)
            except TEPBotError as e:
                return self._warning(PerformState.FAILED, 'AddingPRComment', f"Error commenting on {opts}: {e}")
            return PerformResult(
                PerformState.COMMENT_CREATED,
                ReconcilerEvent(EVENT_TYPE_NORMAL, 'CommentAdded', f"Added TEP comment to {opts}"),
            )

        if existing.body == body:
            return PerformResult(PerformState.COMMENT_UNCHANGED)

        try:
            self.tep_client.client.edit_comment(owner, opts.repo, existing.id, body)
        except TEPBotError as e:
            return self._warning(
                PerformState.FAILED, 'UpdatingPRComment', f"Error updating comment {existing.id} on {opts}: {e}"
            )
        return PerformResult(
            PerformState.COMMENT_UPDATED,
            ReconcilerEvent(EVENT_TYPE_NORMAL, 'CommentUpdated', f"Updated TEP comment {existing.id} on {opts}"),
        )

    def _record_implementation_pr(self, opts: PROptions, proposals: List[ProposalInfo]) -> Optional[PerformResult]:
        """Append this PR to each referenced TEP's tracking issue. Returns a result only on failure."""
        try:
            tracking_issues = self.tep_client.get_tracking_issues()
        except TEPBotError as e:
            return self._warning(PerformState.FAILED, 'LoadingTrackingIssues', f"Error loading tracking issues: {e}")

        for proposal in proposals:
            issue = tracking_issues.get(proposal.id)
            if issue is None:
                bt.logging.debug(f"TEP-{proposal.id} has no tracking issue, not recording {opts}")
                continue
            if not issue.add_implementation_pr(opts.repo, opts.pr_number):
                continue

            bt.logging.info(f"Recording {opts.repo}#{opts.pr_number} on tracking issue #{issue.issue_number}")
            try:
                self.tep_client.update_tracking_issue(issue, proposal.filename)
            except TEPBotError as e:
                return self._warning(
                    PerformState.FAILED,
                    'UpdatingTrackingIssue',
                    f"Error updating tracking issue #{issue.issue_number} for TEP-{proposal.id}: {e}",
                )
        return None

