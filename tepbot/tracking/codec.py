# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Hidden-marker encoding of tracking issues and PR comments.

Tracking issue bodies start with one marker per proposal PR, then one per
implementation PR:

    <!-- TEP PR: 55 -->
    <!-- Implementation PR: repo: pipeline number: 77 -->

PR comments end with one marker per referenced TEP:

    <!-- TEP update: TEP-1234 status: proposed -->

All marker parsing lives here.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from tepbot.classes import IssueComment, ProposalFileInfo, ProposalInfo, Status, TrackingIssue
from tepbot.config import BotConfig
from tepbot.exceptions import EncodingMismatch

TITLE_ID_PATTERN = re.compile(r'\bTEP-(\d+)\b')
PROPOSAL_PR_MARKER = re.compile(r'<!--\s*TEP PR:\s*(\d+)\s*-->')
IMPLEMENTATION_PR_MARKER = re.compile(r'<!--\s*Implementation PR:\s*repo:\s*(\S+)\s+number:\s*(\d+)\s*-->')
STATUS_MARKER = re.compile(r'<!--\s*TEP update:\s*TEP-(\d+)\s+status:\s*([A-Za-z-]+)\s*-->')

ISSUE_INSTRUCTIONS = (
    "This issue tracks [TEP-{id}]({url}).\n"
    "\n"
    "It is maintained by the TEP automation: the status label is kept in sync with the TEP README, and "
    "PRs referencing TEP-{id} are recorded in hidden markers in this description. Please don't edit those markers by hand.\n"
)

ProposalRecord = Union[ProposalInfo, ProposalFileInfo]


def proposal_pr_marker(number: int) -> str:
    return f"<!-- TEP PR: {number} -->"


def implementation_pr_marker(repo: str, number: int) -> str:
    return f"<!-- Implementation PR: repo: {repo} number: {number} -->"


def status_marker(proposal_id: str, status: Status) -> str:
    return f"<!-- TEP update: TEP-{proposal_id} status: {status.value} -->"


# =============================================================================
# Tracking issues
# =============================================================================


def parse_body_markers(body: str) -> Tuple[List[int], List[Tuple[str, int]]]:
    """Scan an issue body for PR markers, first-seen order, deduplicated.

    Returns:
        Tuple of (proposal PR numbers, (repo, number) implementation PRs)
    """
    proposal_prs: List[int] = []
    for match in PROPOSAL_PR_MARKER.finditer(body or ''):
        number = int(match.group(1))
        if number not in proposal_prs:
            proposal_prs.append(number)

    implementation_prs: List[Tuple[str, int]] = []
    for match in IMPLEMENTATION_PR_MARKER.finditer(body or ''):
        pr = (match.group(1), int(match.group(2)))
        if pr not in implementation_prs:
            implementation_prs.append(pr)

    return proposal_prs, implementation_prs


def decode_issue(issue: Dict[str, Any], config: BotConfig) -> TrackingIssue:
    """Decode a GitHub issue JSON object into a TrackingIssue.

    Raises:
        EncodingMismatch: if the title has no TEP ID or no status label is present.
    """
    number = issue.get('number', 0)
    title = issue.get('title') or ''

    id_match = TITLE_ID_PATTERN.search(title)
    if not id_match:
        raise EncodingMismatch(f"tracking issue #{number} title {title!r} does not reference a TEP")

    status: Optional[Status] = None
    for label in issue.get('labels') or []:
        name = label.get('name') if isinstance(label, dict) else label
        status = config.status_for_label(name)
        if status is not None:
            break
    if status is None:
        raise EncodingMismatch(f"tracking issue #{number} for TEP-{id_match.group(1)} has no status label")

    tracking = TrackingIssue(
        proposal_id=id_match.group(1),
        status=status,
        issue_number=number,
        assignees=[a['login'] for a in issue.get('assignees') or [] if a.get('login')],
    )

    proposal_prs, implementation_prs = parse_body_markers(issue.get('body') or '')
    for pr_number in proposal_prs:
        tracking.add_proposal_pr(pr_number)
    for repo, pr_number in implementation_prs:
        tracking.add_implementation_pr(repo, pr_number)

    return tracking


def encode_issue_body(issue: TrackingIssue, filename: str, config: BotConfig) -> str:
    """Render the issue body: proposal PR markers, implementation PR markers, instructions."""
    lines = [proposal_pr_marker(n) for n in issue.proposal_prs]
    lines.extend(implementation_pr_marker(pr.repo, pr.number) for pr in issue.implementation_prs)

    instructions = ISSUE_INSTRUCTIONS.format(id=issue.proposal_id, url=config.proposal_url(filename))
    if not lines:
        return instructions
    return '\n'.join(lines) + '\n\n' + instructions


def issue_labels(issue: TrackingIssue, config: BotConfig) -> List[str]:
    return [config.tracking_label, config.status_label(issue.status)]


# =============================================================================
# PR comments
# =============================================================================


def compose_comment(header: str, proposals: Iterable[ProposalRecord], config: BotConfig) -> str:
    """Comment body: header, one bullet per TEP, blank line, one status marker per TEP."""
    proposals = list(proposals)
    body = header
    for proposal in proposals:
        body += (
            f" * [TEP-{proposal.id} ({proposal.title})]({config.proposal_url(proposal.filename)}), "
            f"current status: `{proposal.status.value}`\n"
        )
    body += "\n"
    for proposal in proposals:
        body += status_marker(proposal.id, proposal.status) + "\n"
    return body


def comment_markers(body: str) -> List[Tuple[str, str]]:
    """(TEP ID, status) pairs recorded in a comment, in order."""
    return [(m.group(1), m.group(2)) for m in STATUS_MARKER.finditer(body or '')]


def find_bot_comment(comments: Iterable[IssueComment], header: str, config: BotConfig) -> Optional[IssueComment]:
    """First comment written by the bot with the given header and at least one status marker."""
    for comment in comments:
        if comment.user != config.bot_user:
            continue
        if comment.body.startswith(header) and comment_markers(comment.body):
            return comment
    return None
