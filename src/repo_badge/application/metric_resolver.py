import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from repo_badge.domain.exceptions import UnsupportedTypeException, UpstreamException
from repo_badge.domain.models import BadgeType, RepoMetadata, RepoMetric
from repo_badge.infrastructure.acl import GitHubTranslator
from repo_badge.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

CUSTOM_FALLBACK = "N/A"


@dataclass(frozen=True)
class MetricPlan:
    """
    How one badge type is resolved.

    `fetch` names the client method for the extra upstream call, if any. `extract`
    receives the repository metadata, the extra call's result and the caller message.
    """
    label: str
    extract: Callable[[Optional[RepoMetadata], Any, Optional[str]], str]
    fetch: Optional[str] = None
    needs_repo: bool = True


METRIC_PLANS: Dict[BadgeType, MetricPlan] = {
    BadgeType.STARS: MetricPlan(
        "Stars", lambda meta, _, __: str(meta.stargazers_count)),
    BadgeType.FORKS: MetricPlan(
        "Forks", lambda meta, _, __: str(meta.forks_count)),
    BadgeType.ISSUES: MetricPlan(
        "Issues", lambda meta, _, __: str(meta.open_issues_count)),
    BadgeType.OPEN_PRS: MetricPlan(
        "Open PRs", lambda _, count, __: str(count), fetch="fetch_open_pull_requests"),
    BadgeType.LAST_COMMIT: MetricPlan(
        "Last Commit", lambda _, commits, __: GitHubTranslator.to_last_commit_date(commits), fetch="fetch_commits"),
    BadgeType.CONTRIBUTORS: MetricPlan(
        "Contributors", lambda _, count, __: str(count), fetch="fetch_contributors"),
    BadgeType.WATCHERS: MetricPlan(
        "Watchers", lambda meta, _, __: str(meta.subscribers_count)),
    BadgeType.CUSTOM: MetricPlan(
        "Custom", lambda _, __, message: message or CUSTOM_FALLBACK, needs_repo=False),
}


class MetricResolver:
    """
    Turns a badge type into display-ready label and value text, calling the GitHub API as needed.
    Every repository-backed type fetches the repository first, which doubles as an existence check.
    """

    def __init__(self, github_client: GitHubRestClient, plans: Dict[BadgeType, MetricPlan] = METRIC_PLANS):
        self.github_client = github_client
        self.plans = plans

    async def resolve(self, owner: str, repo: str, badge_type: BadgeType, message: Optional[str] = None) -> RepoMetric:
        """
        Resolves the metric shown on a badge.

        Raises:
            UpstreamException: If any GitHub API call fails or returns unusable data.
            UnsupportedTypeException: If no plan exists for `badge_type`.
        """
        plan = self.plans.get(badge_type)
        if plan is None:
            raise UnsupportedTypeException()

        metadata = None
        extra = None
        if plan.needs_repo:
            metadata = await self.github_client.fetch_repo(owner, repo)
        if plan.fetch:
            extra = await getattr(self.github_client, plan.fetch)(owner, repo)

        try:
            value = plan.extract(metadata, extra, message)
        except ValueError as e:
            logger.warning(f"Could not build a {badge_type.value} badge for {owner}/{repo}: {e}")
            raise UpstreamException(str(e)) from e

        logger.debug(f"Resolved {owner}/{repo}/{badge_type.value} to {plan.label}: {value}")
        return RepoMetric(label=plan.label, value=value)
