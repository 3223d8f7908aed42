# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Reconciliation of the TEP README against existing tracking issues.

create_issues() only creates missing issues. sync_issues() also moves the
status label of existing issues to match the README. Both abort on the first
error; issues already created by then stay created.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import bittensor as bt

from tepbot.classes import ProposalInfo, Status, TrackingIssue
from tepbot.exceptions import TEPBotError, with_context
from tepbot.tracking.tep_client import TEPClient


class ActionKind(Enum):
    CREATE = "create"
    UPDATE_STATUS = "update-status"
    NOOP = "no-op"


@dataclass
class ReconcileAction:
    """What reconciliation would do for one TEP"""

    kind: ActionKind
    proposal: ProposalInfo
    issue: Optional[TrackingIssue] = None
    previous_status: Optional[Status] = None  # status label before the run


def plan_reconciliation(
    proposals: Dict[str, ProposalInfo],
    tracking_issues: Dict[str, TrackingIssue],
    update_existing: bool = False,
) -> List[ReconcileAction]:
    """Decide create / update-status / no-op for every TEP in the README.

    Terminal TEPs never get a new issue. With update_existing, an existing issue
    whose status label disagrees with the README is updated, terminal or not.
    """
    actions = []
    for proposal_id in sorted(proposals):
        proposal = proposals[proposal_id]
        issue = tracking_issues.get(proposal_id)

        if issue is None:
            kind = ActionKind.NOOP if proposal.status.is_terminal else ActionKind.CREATE
        elif update_existing and issue.status != proposal.status:
            kind = ActionKind.UPDATE_STATUS
        else:
            kind = ActionKind.NOOP

        previous_status = issue.status if issue else None
        actions.append(ReconcileAction(kind=kind, proposal=proposal, issue=issue, previous_status=previous_status))
    return actions


def _create_issue(tep_client: TEPClient, proposal: ProposalInfo) -> TrackingIssue:
    bt.logging.info(f'Creating tracking issue for TEP-{proposal.id}')
    try:
        parsed = tep_client.get_proposal_file(proposal.id, proposal.filename)
    except TEPBotError as e:
        raise with_context(e, f'loading TEP-{proposal.id} info from Markdown file {proposal.filename} in repository') from e

    # No PR references yet: they can't be known from the TEP file alone
    issue = TrackingIssue(proposal_id=parsed.id, status=parsed.status, assignees=list(parsed.authors))
    try:
        tep_client.create_tracking_issue(issue, parsed.filename)
    except TEPBotError as e:
        raise with_context(e, f'creating tracking issue for TEP-{proposal.id}') from e

    bt.logging.info(f'Created tracking issue #{issue.issue_number} for TEP-{proposal.id}')
    return issue


def _update_status(tep_client: TEPClient, proposal: ProposalInfo, issue: TrackingIssue) -> TrackingIssue:
    bt.logging.info(
        f'Updating tracking issue #{issue.issue_number} for TEP-{proposal.id}: {issue.status} -> {proposal.status}'
    )
    issue.status = proposal.status
    try:
        tep_client.update_tracking_issue(issue, proposal.filename)
    except TEPBotError as e:
        raise with_context(e, f'updating tracking issue #{issue.issue_number} for TEP-{proposal.id}') from e
    return issue


def reconcile(tep_client: TEPClient, update_existing: bool = False, dry_run: bool = False) -> List[ReconcileAction]:
    """Load current state, plan, and (unless dry_run) apply the plan."""
    proposals = tep_client.get_proposals_from_readme()
    tracking_issues = tep_client.get_tracking_issues()
    actions = plan_reconciliation(proposals, tracking_issues, update_existing=update_existing)

    if dry_run:
        return actions

    for action in actions:
        if action.kind == ActionKind.CREATE:
            action.issue = _create_issue(tep_client, action.proposal)
        elif action.kind == ActionKind.UPDATE_STATUS:
            _update_status(tep_client, action.proposal, action.issue)

    return actions


def create_issues(tep_client: TEPClient, dry_run: bool = False) -> List[ReconcileAction]:
    """Create tracking issues for all open TEPs in the README which don't already have one."""
    return reconcile(tep_client, update_existing=False, dry_run=dry_run)


def sync_issues(tep_client: TEPClient, dry_run: bool = False) -> List[ReconcileAction]:
    """Create missing tracking issues and bring existing status labels in line with the README."""
    return reconcile(tep_client, update_existing=True, dry_run=dry_run)
