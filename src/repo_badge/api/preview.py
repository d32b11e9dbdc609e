"""
Static HTML page showing every badge type for one repository, for manual visual checks.
"""

from html import escape
from urllib.parse import urlencode

from repo_badge.domain.models import BadgeType

DEMO_OWNER = "octocat"
DEMO_REPO = "Hello-World"

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Badge preview: {title}</title>
  <style>
    body {{ font-family: sans-serif; margin: 2rem; }}
    td {{ padding: 0.4rem 1rem; }}
    code {{ color: #555; }}
  </style>
</head>
<body>
  <h1>Badge preview for {title}</h1>
  <table>
{rows}
  </table>
</body>
</html>
"""

_ROW = '    <tr><td><code>{selector}</code></td><td><img src="{src}" alt="{selector} badge"></td></tr>'


def badge_url(owner: str, repo: str, badge_type: BadgeType) -> str:
    params = {"user": owner, "repo": repo, "type": badge_type.value}
    if badge_type is BadgeType.CUSTOM:
        params["message"] = "Hello World"
    return f"/b?{urlencode(params)}"


def render_preview(owner: str = DEMO_OWNER, repo: str = DEMO_REPO) -> str:
    rows = "\n".join(
        _ROW.format(selector=escape(badge_type.value), src=escape(badge_url(owner, repo, badge_type)))
        for badge_type in BadgeType
    )
    return _PAGE.format(title=escape(f"{owner}/{repo}"), rows=rows)
