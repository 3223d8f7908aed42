from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from tepbot.constants import TRACKING_ISSUE_TITLE_SUFFIX
from tepbot.exceptions import ParseError


class Status(Enum):
    """Lifecycle status of a TEP"""

    PROPOSED = "proposed"
    IMPLEMENTABLE = "implementable"
    IMPLEMENTING = "implementing"
    IMPLEMENTED = "implemented"
    WITHDRAWN = "withdrawn"
    REPLACED = "replaced"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @classmethod
    def parse(cls, value: str) -> 'Status':
        """Case-insensitive lookup, raising ParseError for unknown values."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ParseError(f"unknown TEP status {value!r}") from None

    def __str__(self) -> str:
        return self.value


TERMINAL_STATUSES = frozenset({Status.IMPLEMENTED, Status.WITHDRAWN, Status.REPLACED})


@dataclass
class ProposalInfo:
    """One row of the TEP README table"""

    id: str
    title: str
    status: Status
    filename: str
    last_modified: date


@dataclass
class ProposalFileInfo:
    """Metadata parsed from an individual TEP Markdown file"""

    id: str
    title: str
    status: Status
    filename: str
    authors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ImplementationPR:
    """A PR in some repository implementing a TEP. Identity is (repo, number)."""

    repo: str
    number: int

    def __str__(self) -> str:
        return f"{self.repo}#{self.number}"


@dataclass
class TrackingIssue:
    """Structured view of a TEP tracking issue"""

    proposal_id: str
    status: Status
    issue_number: int = 0  # 0 until the issue exists on GitHub
    proposal_prs: List[int] = field(default_factory=list)
    assignees: List[str] = field(default_factory=list)
    implementation_prs: List[ImplementationPR] = field(default_factory=list)

    @property
    def title(self) -> str:
        return f"TEP-{self.proposal_id} {TRACKING_ISSUE_TITLE_SUFFIX}"

    def add_proposal_pr(self, number: int) -> bool:
        if number in self.proposal_prs:
            return False
        self.proposal_prs.append(number)
        return True

    def add_implementation_pr(self, repo: str, number: int) -> bool:
        """Append an implementation PR unless it is already recorded.

        Returns:
            bool: True if the list changed.
        """
        pr = ImplementationPR(repo=repo, number=number)
        if pr in self.implementation_prs:
            return False
        self.implementation_prs.append(pr)
        return True


@dataclass
class IssueComment:
    """Comment on an issue or PR, as returned by the GitHub REST API"""

    id: int
    body: str
    user: Optional[str] = None

    @classmethod
    def from_github_response(cls, comment: Dict[str, Any]) -> 'IssueComment':
        user = comment.get('user') or {}
        return cls(id=comment['id'], body=comment.get('body') or '', user=user.get('login'))
