import unittest

from repo_badge.infrastructure.acl import GitHubTranslator


class TestGitHubTranslator(unittest.TestCase):
    def test_to_metadata_parses_counters(self) -> None:
        raw_repo = {
            "stargazers_count": 123,
            "forks_count": 45,
            "open_issues_count": 6,
            "subscribers_count": 7,
            "watchers_count": 123,
        }

        metadata = GitHubTranslator.to_metadata(raw_repo)

        self.assertEqual(metadata.stargazers_count, 123)
        self.assertEqual(metadata.forks_count, 45)
        self.assertEqual(metadata.open_issues_count, 6)
        self.assertEqual(metadata.subscribers_count, 7)

    def test_missing_counter_raises(self) -> None:
        raw_repo = {
            "stargazers_count": 123,
            "forks_count": 45,
            "open_issues_count": 6,
        }

        with self.assertRaises(ValueError):
            GitHubTranslator.to_metadata(raw_repo)

    def test_non_object_payload_raises(self) -> None:
        with self.assertRaises(ValueError):
            GitHubTranslator.to_metadata([{"stargazers_count": 1}])

    def test_last_commit_date_uses_head_of_list(self) -> None:
        commits = [
            {"commit": {"author": {"date": "2024-01-02T03:04:05Z"}}},
            {"commit": {"author": {"date": "2023-12-31T23:00:00Z"}}},
        ]

        self.assertEqual(GitHubTranslator.to_last_commit_date(commits), "2024-01-02")

    def test_last_commit_date_is_converted_to_utc(self) -> None:
        commits = [{"commit": {"author": {"date": "2024-01-02T01:30:00+02:00"}}}]

        self.assertEqual(GitHubTranslator.to_last_commit_date(commits), "2024-01-01")

    def test_empty_commit_list_raises(self) -> None:
        with self.assertRaises(ValueError):
            GitHubTranslator.to_last_commit_date([])

    def test_commit_without_author_date_raises(self) -> None:
        with self.assertRaises(ValueError):
            GitHubTranslator.to_last_commit_date([{"commit": {"author": None}}])
