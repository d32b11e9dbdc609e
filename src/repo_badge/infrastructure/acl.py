from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import ValidationError

from repo_badge.domain.models import RepoMetadata

class GitHubTranslator:
    """
    Anti-corruption layer that translates raw GitHub REST JSON responses into domain values.
    """

    @staticmethod
    def to_metadata(raw_repo: Dict[str, Any]) -> RepoMetadata:
        """
        Transforms a raw `GET /repos/{owner}/{repo}` payload into RepoMetadata.

        Args:
            raw_repo (Dict[str, Any]): The decoded JSON body of the repository resource.

        Returns:
            RepoMetadata: The counters the badges are built from.

        Raises:
            ValueError: If the payload is not an object or lacks one of the counters.
        """
        if not isinstance(raw_repo, dict):
            raise ValueError("Repository payload must be a JSON object.")

        try:
            return RepoMetadata(
                stargazers_count=raw_repo.get('stargazers_count'),
                forks_count=raw_repo.get('forks_count'),
                open_issues_count=raw_repo.get('open_issues_count'),
                subscribers_count=raw_repo.get('subscribers_count'),
            )
        except ValidationError as e:
            raise ValueError(f"Malformed repository payload: {e.error_count()} invalid field(s).") from e

    @staticmethod
    def to_last_commit_date(raw_commits: List[Dict[str, Any]]) -> str:
        """
        Extracts the author date of the most recent commit as a UTC `YYYY-MM-DD` string.

        GitHub lists commits newest first, so only the head of the list is inspected.
        """
        if not raw_commits:
            raise ValueError("Repository has no commits.")

        head = raw_commits[0] if isinstance(raw_commits[0], dict) else {}
        author = (head.get('commit') or {}).get('author') or {}
        raw_date = author.get('date')
        if not raw_date:
            raise ValueError("commit.author.date is required to build a last-commit badge.")

        committed_at = datetime.fromisoformat(raw_date.replace("Z", "+00:00"))
        if committed_at.tzinfo is None:
            committed_at = committed_at.replace(tzinfo=timezone.utc)
        return committed_at.astimezone(timezone.utc).date().isoformat()
