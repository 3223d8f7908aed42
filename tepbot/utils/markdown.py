# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Parsing of the TEP README table and of individual TEP files.

README rows look like:

    |[TEP-0001](0001-tekton-enhancement-proposal-process.md) | Tekton Enhancement Proposal Process | implemented | 2020-06-11 |

TEP files start with a front-matter block:

    ---
    status: implementable
    title: Tekton Bundles
    authors:
    - '@someone'
    - '@bob'
    ---

    # TEP-0005: Tekton Bundles
"""

import re
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import bittensor as bt

from tepbot.classes import ProposalFileInfo, ProposalInfo, Status
from tepbot.exceptions import ParseError

README_ROW_PATTERN = re.compile(
    r'^\s*\|\s*\[TEP-(?P<id>\d+)\]\((?P<filename>[^)\s]+)\)\s*'
    r'\|\s*(?P<title>[^|]*?)\s*'
    r'\|\s*(?P<status>[A-Za-z-]+)\s*'
    r'\|\s*(?P<date>\d{4}-\d{2}-\d{2})\s*\|'
)
PROPOSAL_REF_PATTERN = re.compile(r'\bTEP-(\d+)\b')
HEADING_PATTERN = re.compile(r'^#{1,6}\s+(.+?)\s*#*\s*$')
HEADING_ID_PREFIX = re.compile(r'^TEP-\d+\s*[:\-]\s*')
METADATA_FIELD = re.compile(r'^(?P<key>[A-Za-z][\w-]*)\s*:\s*(?P<value>.*)$')
LIST_ITEM = re.compile(r'^\s*-\s+(?P<value>.+)$')


def parse_readme(text: str) -> Dict[str, ProposalInfo]:
    """Extract every well-formed TEP row from the README table.

    Rows that do not match the table format, carry an unknown status, or have
    an invalid date are skipped.

    Returns:
        Dict[str, ProposalInfo]: Proposals keyed by numeric ID string (e.g. "0005").
    """
    proposals: Dict[str, ProposalInfo] = {}

    for line in text.splitlines():
        match = README_ROW_PATTERN.match(line)
        if not match:
            continue

        try:
            status = Status.parse(match['status'])
            last_modified = datetime.strptime(match['date'], '%Y-%m-%d').date()
        except (ParseError, ValueError) as e:
            bt.logging.debug(f"Skipping README row for TEP-{match['id']}: {e}")
            continue

        proposals[match['id']] = ProposalInfo(
            id=match['id'],
            title=match['title'],
            status=status,
            filename=match['filename'],
            last_modified=last_modified,
        )

    return proposals


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1].strip()
    return value


def _split_front_matter(text: str) -> Tuple[List[str], List[str]]:
    """Split a TEP file into (metadata lines, body lines)."""
    lines = text.splitlines()
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1

    if start < len(lines) and lines[start].strip() == '---':
        for end in range(start + 1, len(lines)):
            if lines[end].strip() == '---':
                return lines[start + 1 : end], lines[end + 1 :]

    return [], lines


def parse_metadata(lines: List[str]) -> Dict[str, List[str]]:
    """Parse ``key: value`` lines, collecting ``- item`` lines under the preceding key."""
    metadata: Dict[str, List[str]] = {}
    current: Optional[str] = None

    for line in lines:
        if not line.strip() or line.lstrip().startswith('#'):
            continue

        item = LIST_ITEM.match(line)
        if item and current is not None:
            metadata[current].append(item['value'].strip())
            continue

        field_match = METADATA_FIELD.match(line)
        if field_match:
            current = field_match['key'].lower()
            value = field_match['value'].strip()
            metadata[current] = [value] if value else []
            continue

        current = None

    return metadata


def _parse_authors(values: List[str]) -> List[str]:
    authors = []
    for value in values:
        for author in value.strip('[]').split(','):
            author = _unquote(author).lstrip('@').strip()
            if author and author not in authors:
                authors.append(author)
    return authors


def _first_heading(lines: List[str]) -> Optional[str]:
    for line in lines:
        match = HEADING_PATTERN.match(line)
        if match:
            return HEADING_ID_PREFIX.sub('', match.group(1)).strip()
    return None


def parse_proposal_file(proposal_id: str, filename: str, text: str) -> ProposalFileInfo:
    """Extract title, status and authors from a TEP Markdown file.

    Raises:
        ParseError: if status, authors or title is missing, or the status is unknown.
    """
    metadata_lines, body_lines = _split_front_matter(text)
    metadata = parse_metadata(metadata_lines)

    status_values = [_unquote(v) for v in metadata.get('status', [])]
    if not status_values or not status_values[0]:
        raise ParseError(f"TEP-{proposal_id} ({filename}) has no status field")
    try:
        status = Status.parse(status_values[0])
    except ParseError as e:
        raise ParseError(f"TEP-{proposal_id} ({filename}): {e}") from e

    authors = _parse_authors(metadata.get('authors', []))
    if not authors:
        raise ParseError(f"TEP-{proposal_id} ({filename}) has no authors field")

    title = _first_heading(body_lines)
    if not title and metadata.get('title'):
        title = _unquote(metadata['title'][0])
    if not title:
        raise ParseError(f"TEP-{proposal_id} ({filename}) has no title")

    return ProposalFileInfo(id=proposal_id, title=title, status=status, filename=filename, authors=authors)


def extract_proposal_ids(*texts: Optional[str]) -> List[str]:
    """Every TEP-<id> referenced in the given texts, in first-seen order."""
    ids: List[str] = []
    for text in texts:
        for proposal_id in PROPOSAL_REF_PATTERN.findall(text or ''):
            if proposal_id not in ids:
                ids.append(proposal_id)
    return ids
