"""
GitHub contributors client — contributor lists for registry packages.

Calls GET /repos/{owner}/{repo}/contributors with an authenticated token and
returns (login, contributions) pairs. Uses only Python stdlib
(urllib.request).

Rate limit: 5000 requests/hour authenticated. The client spaces calls by
config.github_min_interval_sec and backs off exponentially on 429 or an
exhausted X-RateLimit-Remaining.

Failure policy:
    401            → GitHubAuthError (the whole run is aborted)
    404, other 403 → WARNING, empty contributor list
    204            → empty repository, empty contributor list
    other errors   → GitHubAPIError (the whole run is aborted)

Reference: https://docs.github.com/en/rest/repos/repos#list-repository-contributors
"""
import json
import logging
import re
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Optional, Protocol

from julia_atlas.config import DEFAULT_CONFIG, AtlasConfig

logger = logging.getLogger(__name__)

USER_AGENT = "julia-atlas/0.1"

_PER_PAGE = 100

# scheme://[user@]host[:port]/path[.git][/]
_REPO_URL_RE = re.compile(
    r"^([a-z][a-z0-9+.-]*)://(?:[^@/]+@)?([^/:]+)(?::\d+)?/(.+?)(?:\.git)?/*$",
    re.IGNORECASE,
)


class GitHubAuthError(RuntimeError):
    """The GitHub token was rejected."""


class GitHubAPIError(RuntimeError):
    """A GitHub request failed in a way that cannot be skipped."""


@dataclass(frozen=True)
class Contributor:
    """One contributor of a repository."""

    login: str
    contributions: int


@dataclass(frozen=True)
class RepoLocation:
    """Parts of a repository URL."""

    scheme: str
    host: str
    path: str          # e.g. "JuliaLang/Example.jl"


class ContributorSource(Protocol):
    def contributors(self, owner_repo: str) -> list[Contributor]: ...


def parse_repo_url(url: Optional[str]) -> Optional[RepoLocation]:
    """Split a repository URL into scheme, host and repository path.

    Handles git://, https:// and ssh:// URLs, .git suffixes and trailing
    slashes. Returns None if the URL does not match scheme://host/path.

    Examples:
        >>> parse_repo_url("git://github.com/JuliaLang/Example.jl.git")
        RepoLocation(scheme='git', host='github.com', path='JuliaLang/Example.jl')
        >>> parse_repo_url("not a url") is None
        True
    """
    if not url:
        return None
    match = _REPO_URL_RE.match(url.strip())
    if not match:
        return None
    scheme, host, path = match.groups()
    return RepoLocation(scheme=scheme.lower(), host=host.lower(), path=path)


def github_owner_repo(location: RepoLocation) -> Optional[str]:
    """'owner/repo' for a GitHub location, None if the path is not exactly that."""
    parts = location.path.split("/")
    if len(parts) != 2 or not all(parts):
        return None
    return location.path


class GitHubContributorSource:
    """Rate-limited ContributorSource for the GitHub REST API.

    Enforces a minimum interval between requests via time.sleep. Pages
    through the contributors endpoint 100 logins at a time up to
    config.github_max_pages.
    """

    def __init__(self, token: str, config: AtlasConfig = DEFAULT_CONFIG) -> None:
        if not token:
            raise GitHubAuthError("A GitHub token is required for contributor lookups.")
        self._token = token
        self.config = config
        self._min_interval = config.github_min_interval_sec
        self._last_call: float = 0.0
        self.requests_made = 0

    def _throttle(self) -> None:
        elapsed = time.monotonic() - self._last_call
        if elapsed < self._min_interval:
            time.sleep(self._min_interval - elapsed)
        self._last_call = time.monotonic()

    def _request(self, path: str) -> Optional[list]:
        """Rate-limited GET against the API base.

        Returns:
            Parsed JSON list, [] for an empty (204) response, or None when
            the repository should be skipped (404 / non-rate-limit 403).
        """
        url = f"{self.config.github_api_base}{path}"
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "Authorization": f"Bearer {self._token}",
            "User-Agent": USER_AGENT,
        }

        backoff = 1.0
        for attempt in range(self.config.github_max_retries + 1):
            self._throttle()
            self.requests_made += 1
            try:
                req = urllib.request.Request(url, headers=headers)
                with urllib.request.urlopen(req, timeout=self.config.github_timeout_sec) as resp:
                    if resp.status == 204:
                        return []
                    body = resp.read()
                    if not body:
                        return []
                    try:
                        return json.loads(body)
                    except ValueError as exc:
                        raise GitHubAPIError(f"Malformed JSON from {path}") from exc
            except urllib.error.HTTPError as exc:
                if exc.code == 401:
                    raise GitHubAuthError(
                        f"GitHub rejected the token (HTTP 401) for {path}"
                    ) from exc
                if exc.code == 404:
                    logger.warning("Repo not found: %s", path)
                    return None
                rate_limited = exc.code == 429 or (
                    exc.code == 403
                    and exc.headers is not None
                    and exc.headers.get("X-RateLimit-Remaining") == "0"
                )
                if rate_limited:
                    if attempt < self.config.github_max_retries:
                        wait = backoff * (2 ** attempt)
                        logger.warning(
                            "Rate limited (HTTP %d) on %s — sleeping %.1fs before retry %d/%d",
                            exc.code, path, wait, attempt + 1, self.config.github_max_retries,
                        )
                        time.sleep(wait)
                        continue
                    raise GitHubAPIError(
                        f"Rate limited on {path}: max retries reached"
                    ) from exc
                if exc.code == 403:
                    logger.warning("Forbidden (HTTP 403): %s", path)
                    return None
                raise GitHubAPIError(
                    f"HTTP {exc.code} error on {path}: {exc.reason}"
                ) from exc
            except urllib.error.URLError as exc:
                raise GitHubAPIError(f"Network error on {path}: {exc.reason}") from exc

        raise GitHubAPIError(f"Request to {path} did not complete")

    def contributors(self, owner_repo: str) -> list[Contributor]:
        """List the contributors of a GitHub repository.

        Args:
            owner_repo: "owner/repo" path.

        Returns:
            Contributor list in API order (most contributions first). Empty
            when the repository is missing, forbidden or empty.
        """
        quoted = urllib.parse.quote(owner_repo, safe="/")
        found: list[Contributor] = []

        for page in range(1, self.config.github_max_pages + 1):
            data = self._request(
                f"/repos/{quoted}/contributors?per_page={_PER_PAGE}&page={page}"
            )
            if data is None:
                return []
            if not isinstance(data, list):
                logger.warning(
                    "Unexpected response type for %s contributors: %s",
                    owner_repo, type(data),
                )
                return found
            for entry in data:
                login = entry.get("login")
                if not login:
                    continue
                found.append(
                    Contributor(login=login, contributions=int(entry.get("contributions", 0)))
                )
            if len(data) < _PER_PAGE:
                break

        logger.debug("GitHub: %d contributors for %s", len(found), owner_repo)
        return found
