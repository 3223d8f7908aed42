#!/usr/bin/env python3
# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Unit tests for the tracking issue / PR comment codec.
"""

from datetime import date

import pytest

from tepbot.classes import ImplementationPR, IssueComment, ProposalInfo, Status, TrackingIssue
from tepbot.exceptions import EncodingMismatch
from tepbot.tracking.codec import (
    comment_markers,
    compose_comment,
    decode_issue,
    encode_issue_body,
    find_bot_comment,
    issue_labels,
    parse_body_markers,
)
from tests.conftest import make_issue

HEADER = 'Some header.\n\n'


def _proposal(proposal_id='1234', title='Some TEP Title', status=Status.PROPOSED, filename='1234-something-or-other.md'):
    return ProposalInfo(id=proposal_id, title=title, status=status, filename=filename, last_modified=date(2021, 12, 20))


# ============================================================================
# Tracking issues
# ============================================================================


class TestDecodeIssue:
    def test_decodes_id_status_assignees_and_markers(self, config):
        body = (
            '<!-- TEP PR: 55 -->\n'
            '<!-- TEP PR: 55 -->\n'
            '<!-- Implementation PR: repo: pipeline number: 77 -->\n'
            '<!-- Implementation PR: repo: triggers number: 3 -->\n'
            '\nsome text'
        )
        raw = make_issue('1234', 10, status='implementing', assignees=['alice', 'bob'], body=body)

        issue = decode_issue(raw, config)

        assert issue.proposal_id == '1234'
        assert issue.issue_number == 10
        assert issue.status == Status.IMPLEMENTING
        assert issue.assignees == ['alice', 'bob']
        assert issue.proposal_prs == [55]
        assert issue.implementation_prs == [ImplementationPR('pipeline', 77), ImplementationPR('triggers', 3)]

    def test_title_without_id(self, config):
        raw = make_issue('1234', 10)
        raw['title'] = 'Something else entirely'

        with pytest.raises(EncodingMismatch, match='#10'):
            decode_issue(raw, config)

    def test_missing_status_label(self, config):
        raw = make_issue('1234', 10)
        raw['labels'] = [{'name': 'tep-tracking'}, {'name': 'kind/feature'}]

        with pytest.raises(EncodingMismatch, match='status label'):
            decode_issue(raw, config)

    def test_empty_body(self, config):
        raw = make_issue('1234', 10, body=None)

        issue = decode_issue(raw, config)

        assert issue.proposal_prs == []
        assert issue.implementation_prs == []


class TestEncodeIssueBody:
    def test_markers_come_first_in_order(self, config):
        issue = TrackingIssue(proposal_id='1234', status=Status.PROPOSED, proposal_prs=[55, 60])
        issue.add_implementation_pr('pipeline', 77)

        body = encode_issue_body(issue, '1234-something-or-other.md', config)

        assert body.startswith(
            '<!-- TEP PR: 55 -->\n'
            '<!-- TEP PR: 60 -->\n'
            '<!-- Implementation PR: repo: pipeline number: 77 -->\n'
            '\n'
        )
        assert 'https://github.com/tektoncd/community/blob/main/teps/1234-something-or-other.md' in body

    def test_no_markers(self, config):
        issue = TrackingIssue(proposal_id='1234', status=Status.PROPOSED)

        body = encode_issue_body(issue, '1234-x.md', config)

        assert parse_body_markers(body) == ([], [])
        assert body.startswith('This issue tracks [TEP-1234]')

    def test_encoded_body_decodes_to_same_prs(self, config):
        issue = TrackingIssue(proposal_id='1234', status=Status.IMPLEMENTING, issue_number=3, proposal_prs=[1])
        issue.add_implementation_pr('pipeline', 2)
        raw = make_issue('1234', 3, status='implementing', body=encode_issue_body(issue, '1234-x.md', config))

        decoded = decode_issue(raw, config)

        assert decoded.proposal_prs == issue.proposal_prs
        assert decoded.implementation_prs == issue.implementation_prs

    def test_labels(self, config):
        issue = TrackingIssue(proposal_id='1234', status=Status.IMPLEMENTABLE)

        assert issue_labels(issue, config) == ['tep-tracking', 'tep-status/implementable']


# ============================================================================
# PR comments
# ============================================================================


class TestComposeComment:
    def test_exact_format(self, config):
        body = compose_comment(HEADER, [_proposal()], config)

        assert body == (
            'Some header.\n\n'
            ' * [TEP-1234 (Some TEP Title)](https://github.com/tektoncd/community/blob/main/teps/1234-something-or-other.md)'
            ', current status: `proposed`\n'
            '\n'
            '<!-- TEP update: TEP-1234 status: proposed -->\n'
        )

    def test_multiple_proposals_keep_order(self, config):
        proposals = [
            _proposal(),
            _proposal('5678', 'Some Other TEP Title', Status.IMPLEMENTABLE, '5678-second-one.md'),
        ]

        body = compose_comment(HEADER, proposals, config)

        assert comment_markers(body) == [('1234', 'proposed'), ('5678', 'implementable')]
        assert body.index('TEP-1234 (') < body.index('TEP-5678 (')


class TestFindBotComment:
    def test_finds_bot_comment_with_header(self, config):
        bot_body = compose_comment(HEADER, [_proposal()], config)
        comments = [
            IssueComment(id=1, body='LGTM', user='someone'),
            IssueComment(id=2, body=bot_body, user='tekton-robot'),
        ]

        assert find_bot_comment(comments, HEADER, config).id == 2

    def test_ignores_other_users(self, config):
        bot_body = compose_comment(HEADER, [_proposal()], config)
        comments = [IssueComment(id=1, body=bot_body, user='someone')]

        assert find_bot_comment(comments, HEADER, config) is None

    def test_ignores_other_header(self, config):
        bot_body = compose_comment('Different header.\n\n', [_proposal()], config)
        comments = [IssueComment(id=1, body=bot_body, user='tekton-robot')]

        assert find_bot_comment(comments, HEADER, config) is None

    def test_ignores_comment_without_markers(self, config):
        comments = [IssueComment(id=1, body=HEADER + 'no markers here', user='tekton-robot')]

        assert find_bot_comment(comments, HEADER, config) is None
