"""
Unit tests for the GitHub client.

HTTP calls go through a mocked requests session.
"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from cutrelease.errors import HostingError
from cutrelease.hosting.github import ERROR_BODY_LIMIT, GitHubClient, error_message, make_headers


def pr_payload(number, title="Change", merged_at="2024-01-02T10:00:00Z", base="main", body="Body"):
    return {
        'number': number,
        'id': 1000 + number,
        'title': title,
        'user': {'login': 'alice'},
        'created_at': '2024-01-01T09:00:00Z',
        'updated_at': '2024-01-02T11:00:00Z',
        'merged_at': merged_at,
        'body': body,
        'html_url': f'https://github.com/acme/widgets/pull/{number}',
        'base': {'ref': base},
    }


def response(payload, status=200, next_url=None):
    resp = Mock()
    resp.ok = status < 400
    resp.status_code = status
    resp.json.return_value = payload
    resp.text = str(payload)
    resp.links = {'next': {'url': next_url}} if next_url else {}
    return resp


@pytest.fixture
def session():
    return Mock(spec=requests.Session, headers={})


@pytest.fixture
def client(session):
    return GitHubClient("ghp_test", session=session)


class TestHeaders:

    def test_make_headers(self):
        assert make_headers("abc") == {
            "Authorization": "token abc",
            "Accept": "application/vnd.github.v3+json",
        }

    def test_session_carries_auth(self, client, session):
        assert session.headers["Authorization"] == "token ghp_test"


class TestIterClosedPages:

    def test_follows_next_links(self, client, session):
        session.request.side_effect = [
            response([pr_payload(3), pr_payload(2)], next_url="https://api.github.com/next?page=2"),
            response([pr_payload(1, merged_at=None)]),
        ]

        pages = list(client.iter_closed_pages("acme", "widgets"))

        assert [[c.number for c in page] for page in pages] == [[3, 2], [1]]
        first, second = session.request.call_args_list
        assert first.args == ("GET", "https://api.github.com/repos/acme/widgets/pulls")
        assert first.kwargs['params'] == {
            'state': 'closed', 'sort': 'updated', 'direction': 'desc', 'per_page': 100,
        }
        assert second.args == ("GET", "https://api.github.com/next?page=2")
        assert second.kwargs['params'] is None

    def test_maps_fields(self, client, session):
        session.request.return_value = response([pr_payload(7, title="Add search", body=None)])

        change = next(client.iter_closed_pages("acme", "widgets"))[0]

        assert change.number == 7
        assert change.title == "Add search"
        assert change.author == "alice"
        assert change.author_url == "https://github.com/alice"
        assert change.merged_at == datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)
        assert change.created_at == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        assert change.body == ""
        assert change.base_branch == "main"
        assert change.url == "https://github.com/acme/widgets/pull/7"

    def test_unmerged_has_no_merge_time(self, client, session):
        session.request.return_value = response([pr_payload(7, merged_at=None)])

        change = next(client.iter_closed_pages("acme", "widgets"))[0]

        assert change.merged_at is None
        assert not change.is_merged

    def test_each_call_restarts(self, client, session):
        session.request.side_effect = lambda *a, **kw: response([pr_payload(1)])

        list(client.iter_closed_pages("acme", "widgets"))
        list(client.iter_closed_pages("acme", "widgets"))

        assert session.request.call_count == 2

    def test_http_error_raises(self, client, session):
        session.request.return_value = response({'message': 'Bad credentials'}, status=401)

        with pytest.raises(HostingError, match=r"Bad credentials \(HTTP 401\)"):
            list(client.iter_closed_pages("acme", "widgets"))

    def test_transport_error_raises(self, client, session):
        session.request.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(HostingError, match="connection reset"):
            list(client.iter_closed_pages("acme", "widgets"))


class TestCreatePullRequest:

    def test_posts_draft(self, client, session):
        session.request.return_value = response(pr_payload(42, title="Release: Version 1.0.0", merged_at=None), status=201)

        pr = client.create_pull_request("acme", "widgets", "Release: Version 1.0.0",
                                        "release/1.0.0", "main", "# Release Summary")

        assert pr.number == 42
        assert pr.url == "https://github.com/acme/widgets/pull/42"
        call = session.request.call_args
        assert call.args == ("POST", "https://api.github.com/repos/acme/widgets/pulls")
        assert call.kwargs['json'] == {
            'title': 'Release: Version 1.0.0',
            'head': 'release/1.0.0',
            'base': 'main',
            'body': '# Release Summary',
            'draft': True,
        }

    def test_validation_failure(self, client, session):
        session.request.return_value = response({'message': 'Validation Failed'}, status=422)

        with pytest.raises(HostingError, match="Validation Failed"):
            client.create_pull_request("acme", "widgets", "t", "head", "main", "body")


class TestActivityHelpers:

    def test_list_repositories_skips_archived(self, client, session):
        session.request.return_value = response([
            {'name': 'api', 'archived': False},
            {'name': 'old', 'archived': True},
        ])

        assert client.list_repositories("acme") == ["api"]

    def test_count_merged_since(self, client, session):
        session.request.return_value = response([
            pr_payload(3, merged_at="2024-02-10T00:00:00Z"),
            pr_payload(2, merged_at=None),
            pr_payload(1, merged_at="2023-12-01T00:00:00Z"),
        ])

        since = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert client.count_merged_since("acme", "widgets", since) == 1


class TestErrorMessage:

    def test_non_json_body(self):
        resp = Mock(status_code=502, text="<html>Bad Gateway</html>")
        resp.json.side_effect = ValueError("not json")

        assert error_message(resp) == "HTTP 502: <html>Bad Gateway</html>"


# ============================================================================
# Bodies that are not JSON
# ============================================================================

def html_response(status=200, body=b"<html>proxy login page</html>"):
    resp = requests.Response()
    resp.status_code = status
    resp._content = body
    resp.headers['Content-Type'] = 'text/html'
    resp.url = "https://api.github.com/repos/acme/widgets/pulls"
    return resp


class TestNonJsonBodies:

    def test_listing_raises_hosting_error(self, client, session):
        session.request.return_value = html_response()

        with pytest.raises(HostingError, match="Invalid JSON from GitHub"):
            list(client.iter_closed_pages("acme", "widgets"))

    def test_create_raises_hosting_error(self, client, session):
        session.request.return_value = html_response(status=201)

        with pytest.raises(HostingError, match="Invalid JSON from GitHub"):
            client.create_pull_request("acme", "widgets", "t", "head", "main", "body")

    def test_list_repositories_raises_hosting_error(self, client, session):
        session.request.return_value = html_response()

        with pytest.raises(HostingError, match="Invalid JSON from GitHub"):
            client.list_repositories("acme")

    def test_error_page_is_truncated(self):
        resp = html_response(status=502, body=b"<html>" + b"x" * 500 + b"</html>")

        message = error_message(resp)

        assert message == "HTTP 502: " + ("<html>" + "x" * 500)[:ERROR_BODY_LIMIT]

    def test_json_message_is_kept_whole(self):
        long_message = "Resource not accessible by integration " * 10
        resp = response({'message': long_message}, status=403)

        assert error_message(resp) == f"{long_message} (HTTP 403)"
