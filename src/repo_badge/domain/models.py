from enum import Enum
from typing import Dict, Mapping, Optional
from pydantic import BaseModel, Field, ConfigDict

from repo_badge.domain.exceptions import ValidationException, UnsupportedTypeException

FALLBACK_COLOR = "#4caf50"
DEFAULT_LABEL_COLOR = "#555"
MISSING_PARAMS_MESSAGE = 'Error: Please provide both "user" and "repo" query parameters.'


class BadgeType(str, Enum):
    """Supported badge kinds. Values are the selectors accepted in the `type` query parameter."""
    STARS = "stars"
    FORKS = "forks"
    ISSUES = "issues"
    OPEN_PRS = "prs"
    LAST_COMMIT = "last-commit"
    CONTRIBUTORS = "contributors"
    WATCHERS = "watchers"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, selector: str) -> "BadgeType":
        try:
            return cls(selector)
        except ValueError:
            raise UnsupportedTypeException() from None


# No type currently overrides the fallback color.
TYPE_COLORS: Dict[BadgeType, str] = {}


class BadgeRequest(BaseModel):
    """
    Immutable description of a single inbound badge request.
    Built fresh from the query string of every request to the badge endpoint.
    """
    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., min_length=1, description="Login of the repository owner")
    repo: str = Field(..., min_length=1, description="Name of the repository")
    badge_type: BadgeType = Field(BadgeType.STARS, description="Which metric to render")
    color: Optional[str] = Field(None, description="Value segment color, per-type default when unset")
    label_color: str = Field(DEFAULT_LABEL_COLOR, description="Label segment color")
    message: Optional[str] = Field(None, description="Caller-supplied text for custom badges")

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "BadgeRequest":
        """
        Builds a BadgeRequest from raw query parameters.

        Args:
            query (Mapping[str, str]): Query parameters (`user`, `repo`, `type`, `color`, `labelColor`, `message`).

        Returns:
            BadgeRequest: The validated request.

        Raises:
            ValidationException: If `user` or `repo` is missing, or `type` is not supported.
        """
        owner = query.get("user")
        repo = query.get("repo")
        if not owner or not repo:
            raise ValidationException(MISSING_PARAMS_MESSAGE)

        badge_type = BadgeType.parse(query.get("type", BadgeType.STARS.value))

        return cls(
            owner=owner,
            repo=repo,
            badge_type=badge_type,
            color=query.get("color") or None,
            label_color=query.get("labelColor") or DEFAULT_LABEL_COLOR,
            message=query.get("message"),
        )


class RepoMetric(BaseModel):
    """Display-ready content of a badge, independent of its colors."""
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class BadgeStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    color: str = FALLBACK_COLOR
    label_color: str = DEFAULT_LABEL_COLOR

    @classmethod
    def for_request(cls, request: BadgeRequest) -> "BadgeStyle":
        color = request.color or TYPE_COLORS.get(request.badge_type, FALLBACK_COLOR)
        return cls(color=color, label_color=request.label_color)


class RepoMetadata(BaseModel):
    """
    The subset of GitHub's repository resource the badges are built from.
    """
    model_config = ConfigDict(frozen=True)

    stargazers_count: int = Field(..., ge=0, description="Total number of stargazers")
    forks_count: int = Field(..., ge=0, description="Total number of forks")
    open_issues_count: int = Field(..., ge=0, description="Open issues, GitHub counts open PRs here too")
    subscribers_count: int = Field(..., ge=0, description="Number of watchers")
