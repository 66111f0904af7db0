"""GitHub API client for fetching releases."""

import logging
import re

import httpx
from rich.markup import escape

from blindspot.core.errors import BlindspotError
from blindspot.core.platform import PlatformInfo, find_best_assets
from blindspot.core.ui import Context
from blindspot.models.release import Asset, GitHubRelease

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"


class GitHubError(BlindspotError):
    """Error from GitHub API."""

    pass


def parse_repo_spec(spec: str) -> tuple[str, str]:
    """Parse a repo spec into (owner, repo).

    Accepts:
    - owner/repo
    - https://github.com/owner/repo
    - github.com/owner/repo
    """
    # Handle full URLs
    url_pattern = r"(?:https?://)?github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$"
    match = re.match(url_pattern, spec)
    if match:
        return match.group(1), match.group(2)

    # Handle owner/repo format
    parts = spec.split("/")
    if len(parts) == 2 and all(parts) and ":" not in spec:
        return parts[0], parts[1]

    raise ValueError(f"Invalid repo spec: {spec}. Use 'owner/repo' or GitHub URL.")


def github_slug(url: str) -> str | None:
    """Return ``owner/repo`` if *url* names a GitHub repository, else None."""
    try:
        owner, repo = parse_repo_spec(url)
    except ValueError:
        return None
    return f"{owner}/{repo}"


class GitHubClient:
    """Client for interacting with GitHub API."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.client = httpx.AsyncClient(
            base_url=GITHUB_API_BASE,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=30.0,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.client.aclose()

    async def get_latest_release(self, slug: str) -> GitHubRelease:
        """Get the latest release of ``owner/repo``."""
        path = f"/repos/{slug}/releases/latest"
        url = f"{GITHUB_API_BASE}{path}"
        try:
            response = await self.client.get(path)
        except httpx.HTTPError as e:
            raise GitHubError(f"Failed to reach {url}: {e}") from e

        if response.status_code == 404:
            raise GitHubError(f"Repository {slug} not found or has no releases\nURL: {url}")
        if response.status_code == 403:
            raise GitHubError(f"GitHub API rate limit exceeded\nURL: {url}")
        if response.status_code != 200:
            raise GitHubError(f"Status: {response.status_code}\nURL: {url}")

        try:
            release = GitHubRelease.from_api_response(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise GitHubError(f"Malformed release document ({e})\nURL: {url}") from e

        logger.debug("Latest release of %s is %s", slug, release.tag_name)
        return release


async def choose_asset(
    ctx: Context,
    release: GitHubRelease,
    platform_info: PlatformInfo | None = None,
) -> Asset:
    """Pick the release asset to install, asking when there is a choice."""
    assets = release.assets
    await ctx.notify(f"Release {escape(release.tag_name)} ships {len(assets)} assets...")
    if not assets:
        raise GitHubError(f"Release {release.tag_name} has no assets")
    if len(assets) == 1:
        return assets[0]

    recommended = {a.download_url for a in find_best_assets(assets, platform_info)}
    for i, asset in enumerate(assets):
        hint = " [green](matches this platform)[/green]" if asset.download_url in recommended else ""
        await ctx.notify(
            f"[bold]-> {i}[/bold]\t{asset.size / 1_000_000:.2f}mb\t{escape(asset.name)}{hint}"
        )

    pick = await ctx.ask_number(0, len(assets), "Choose one:")
    logger.info("Chose asset %s of %s", assets[pick].name, release.tag_name)
    return assets[pick]
