import asyncio
import json
import unittest
from unittest.mock import AsyncMock, MagicMock

import aiohttp

from repo_badge.domain.exceptions import UpstreamException
from repo_badge.infrastructure.github_client import GitHubRestClient, LIST_PAGE_SIZE

REPO_PAYLOAD = {
    "stargazers_count": 42,
    "forks_count": 7,
    "open_issues_count": 3,
    "subscribers_count": 5,
}


def _response(status=200, payload=None, json_error=None):
    resp = AsyncMock()
    resp.status = status
    if json_error is not None:
        resp.json = AsyncMock(side_effect=json_error)
    else:
        resp.json = AsyncMock(return_value=payload)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _client(*responses):
    session = MagicMock()
    session.get = MagicMock(side_effect=list(responses))
    return GitHubRestClient(session=session), session


class TestGitHubRestClientHeaders(unittest.TestCase):
    def test_headers_include_user_agent(self) -> None:
        client = GitHubRestClient(session=None)
        self.assertEqual(client.headers["User-Agent"], "Badge-Generator")
        self.assertIn("Accept", client.headers)

    def test_calls_are_anonymous(self) -> None:
        client = GitHubRestClient(session=None, user_agent="custom-agent")
        self.assertNotIn("Authorization", client.headers)
        self.assertEqual(client.headers["User-Agent"], "custom-agent")


class TestGitHubRestClient(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_repo_returns_metadata(self) -> None:
        client, session = _client(_response(payload=REPO_PAYLOAD))

        metadata = await client.fetch_repo("octocat", "Hello-World")

        self.assertEqual(metadata.stargazers_count, 42)
        self.assertEqual(metadata.subscribers_count, 5)
        url = session.get.call_args.args[0]
        self.assertEqual(url, "https://api.github.com/repos/octocat/Hello-World")
        self.assertIn("timeout", session.get.call_args.kwargs)

    async def test_path_segments_are_quoted(self) -> None:
        client, session = _client(_response(payload=REPO_PAYLOAD))

        await client.fetch_repo("octo/../cat", "a b")

        url = session.get.call_args.args[0]
        self.assertEqual(url, "https://api.github.com/repos/octo%2F..%2Fcat/a%20b")

    async def test_non_2xx_raises_upstream_exception(self) -> None:
        client, session = _client(_response(status=404, payload={"message": "Not Found"}))

        with self.assertRaises(UpstreamException) as ctx:
            await client.fetch_repo("octocat", "missing")

        self.assertEqual(ctx.exception.status, 404)
        # No retries
        self.assertEqual(session.get.call_count, 1)

    async def test_network_error_raises_upstream_exception(self) -> None:
        session = MagicMock()
        session.get = MagicMock(side_effect=aiohttp.ClientConnectionError("connection reset"))
        client = GitHubRestClient(session=session)

        with self.assertRaises(UpstreamException):
            await client.fetch_repo("octocat", "Hello-World")

    async def test_timeout_raises_upstream_exception(self) -> None:
        session = MagicMock()
        session.get = MagicMock(side_effect=asyncio.TimeoutError())
        client = GitHubRestClient(session=session)

        with self.assertRaises(UpstreamException):
            await client.fetch_commits("octocat", "Hello-World")

    async def test_malformed_json_raises_upstream_exception(self) -> None:
        client, _ = _client(_response(json_error=json.JSONDecodeError("Expecting value", "<html>", 0)))

        with self.assertRaises(UpstreamException):
            await client.fetch_repo("octocat", "Hello-World")

    async def test_wrongly_shaped_repo_payload_raises_upstream_exception(self) -> None:
        client, _ = _client(_response(payload={"stargazers_count": "many"}))

        with self.assertRaises(UpstreamException):
            await client.fetch_repo("octocat", "Hello-World")

    async def test_fetch_open_pull_requests_counts_open_pulls(self) -> None:
        client, session = _client(_response(payload=[{"number": 1}, {"number": 2}, {"number": 3}]))

        count = await client.fetch_open_pull_requests("octocat", "Hello-World")

        self.assertEqual(count, 3)
        url = session.get.call_args.args[0]
        self.assertEqual(url, "https://api.github.com/repos/octocat/Hello-World/pulls")
        self.assertEqual(session.get.call_args.kwargs["params"], {"state": "open", "per_page": LIST_PAGE_SIZE})

    async def test_fetch_contributors_counts_contributors(self) -> None:
        client, session = _client(_response(payload=[{"login": "a"}, {"login": "b"}]))

        count = await client.fetch_contributors("octocat", "Hello-World")

        self.assertEqual(count, 2)
        self.assertTrue(session.get.call_args.args[0].endswith("/contributors"))

    async def test_list_endpoint_with_no_content_is_empty(self) -> None:
        client, _ = _client(_response(status=204))

        self.assertEqual(await client.fetch_contributors("octocat", "empty"), 0)

    async def test_list_endpoint_returning_object_raises(self) -> None:
        client, _ = _client(_response(payload={"message": "Git Repository is empty."}))

        with self.assertRaises(UpstreamException):
            await client.fetch_commits("octocat", "Hello-World")

    async def test_fetch_commits_returns_list(self) -> None:
        commits = [{"commit": {"author": {"date": "2024-01-02T03:04:05Z"}}}]
        client, _ = _client(_response(payload=commits))

        self.assertEqual(await client.fetch_commits("octocat", "Hello-World"), commits)
