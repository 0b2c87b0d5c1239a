"""Paginated retrieval of a repository's release catalog.

Pagination is a small state machine, one transition per page:

    Fetching(n) --non-2xx / empty page / fallback seen / short page--> Done
    Fetching(n) --full page--> Fetching(n + 1)
    Fetching(n) --transport or decode failure--> Failed

Stop rules are checked in that order for every page. Because the already
installed tag ends pagination, the number of requests is bounded by how far
the catalog has moved since that release, not by the catalog's total size.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from patchwatch import __version__
from patchwatch.core.result import Err, Ok, Result
from patchwatch.core.structured import as_obj_list
from patchwatch.releases.errors import FetchError
from patchwatch.releases.model import ReleaseRecord

if TYPE_CHECKING:
    from patchwatch.tools.http import HttpClient

__all__ = [
    "CatalogFetcher",
    "Fetching",
    "Done",
    "Failed",
    "FetchState",
    "DEFAULT_API_URL",
    "GITHUB_PER_PAGE",
    "USER_AGENT",
]

DEFAULT_API_URL = "https://api.github.com"

# GitHub's maximum page size for the list-releases endpoint.
GITHUB_PER_PAGE = 100

USER_AGENT = f"patchwatch/{__version__}"


@dataclass(frozen=True, slots=True)
class Fetching:
    page: int


@dataclass(frozen=True, slots=True)
class Done:
    pass


@dataclass(frozen=True, slots=True)
class Failed:
    error: FetchError


type FetchState = Fetching | Done | Failed


@dataclass(slots=True)
class _Accumulator:
    """Records collected so far, unique by tag name (first occurrence wins)."""

    records: list[ReleaseRecord] = field(default_factory=list)
    seen: set[str] = field(default_factory=set)

    def extend(self, records: list[ReleaseRecord]) -> None:
        for record in records:
            if record.tag_name in self.seen:
                continue
            self.seen.add(record.tag_name)
            self.records.append(record)


class CatalogFetcher:
    """Fetches every release of a repository, page by page.

    Usage:
        fetcher = CatalogFetcher(RealHttpClient())
        result = fetcher.fetch_all("wasmCloud", "wadm", fallback_tag="v0.12.2")
        if isinstance(result, Ok):
            print(len(result.value))

    A fetcher holds no per-call state; one instance may serve concurrent
    ``fetch_all`` calls.
    """

    def __init__(
        self,
        http: HttpClient,
        *,
        api_url: str = DEFAULT_API_URL,
        per_page: int = GITHUB_PER_PAGE,
        user_agent: str = USER_AGENT,
    ) -> None:
        if not 1 <= per_page <= GITHUB_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {GITHUB_PER_PAGE}, got {per_page}")
        self._http = http
        self._api_url = api_url.rstrip("/")
        self._per_page = per_page
        self._headers = {
            "User-Agent": user_agent,
            "Accept": "application/vnd.github+json",
        }

    @property
    def per_page(self) -> int:
        return self._per_page

    def releases_url(self, owner: str, repo: str, page: int) -> str:
        return (
            f"{self._api_url}/repos/{owner}/{repo}/releases"
            f"?page={page}&per_page={self._per_page}"
        )

    def fetch_all(
        self,
        owner: str,
        repo: str,
        fallback_tag: str | None = None,
    ) -> Result[list[ReleaseRecord], FetchError]:
        """Fetch releases, newest first as served, until a stop rule fires.

        Args:
            owner: Repository owner
            repo: Repository name
            fallback_tag: Tag of the installed release; the page holding it is
                the last one requested, and the tag itself is not returned

        Returns:
            Ok with the accumulated records, or Err with FetchError. A failure
            on any page discards records gathered from earlier pages.
        """
        acc = _Accumulator()
        state: FetchState = Fetching(page=0)
        while True:
            match state:
                case Fetching(page=page):
                    state = self._step(owner, repo, page, fallback_tag, acc)
                case Done():
                    return Ok(acc.records)
                case Failed(error=error):
                    return Err(error)

    def _step(
        self,
        owner: str,
        repo: str,
        page: int,
        fallback_tag: str | None,
        acc: _Accumulator,
    ) -> FetchState:
        url = self.releases_url(owner, repo, page)
        page_result = self._fetch_page(url)
        if isinstance(page_result, Err):
            return Failed(page_result.error)

        records = page_result.value
        if not records:
            return Done()

        if fallback_tag is not None and any(r.tag_name == fallback_tag for r in records):
            acc.extend([r for r in records if r.tag_name != fallback_tag])
            return Done()

        acc.extend(records)
        if len(records) < self._per_page:
            return Done()
        return Fetching(page=page + 1)

    def _fetch_page(self, url: str) -> Result[list[ReleaseRecord] | None, FetchError]:
        """Fetch and decode one page.

        Returns Ok(None) for a non-success status, which ends pagination
        without being an error.
        """
        response = self._http.get(url, self._headers)
        if isinstance(response, Err):
            return Err(FetchError(kind="transport", url=url, message=response.error.message))

        if not response.value.ok:
            return Ok(None)

        try:
            data: object = json.loads(response.value.body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(FetchError(kind="decode", url=url, message=f"JSON parse error: {e}"))

        items = as_obj_list(data)
        if items is None:
            return Err(FetchError(kind="decode", url=url, message="Expected JSON array"))

        records: list[ReleaseRecord] = []
        for item in items:
            match ReleaseRecord.from_json(item):
                case Ok(record):
                    records.append(record)
                case Err(message):
                    return Err(FetchError(kind="decode", url=url, message=message))
        return Ok(records)
