"""Update checks: fetch -> normalize -> resolve, once per tracked project.

Projects are checked concurrently. Each pipeline is sequential and owns its
records; the only shared object is the fetcher (and its HTTP client), which
keeps no per-call state. A failed fetch is reported for that project alone.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from patchwatch.core.result import Err, Ok, Result
from patchwatch.releases.catalog import CatalogFetcher
from patchwatch.releases.errors import FetchError
from patchwatch.releases.model import ReleaseRecord, TrackedProject
from patchwatch.releases.normalize import normalize
from patchwatch.releases.resolver import ScanPolicy, resolve_patch

__all__ = [
    "MAX_CHECK_WORKERS",
    "UpdateCheck",
    "UpdateOutcome",
    "check_project",
    "resolve_all",
    "resolve_updates",
]

type UpdateOutcome = Result[ReleaseRecord | None, FetchError]

MAX_CHECK_WORKERS = 8


@dataclass(frozen=True, slots=True)
class UpdateCheck:
    """Outcome of checking one project.

    ``outcome`` is Ok(release) when a newer patch exists, Ok(None) when the
    project is up to date, and Err when its catalog could not be fetched.
    """

    project: TrackedProject
    outcome: UpdateOutcome

    @property
    def update(self) -> ReleaseRecord | None:
        if isinstance(self.outcome, Ok):
            return self.outcome.value
        return None

    @property
    def error(self) -> FetchError | None:
        if isinstance(self.outcome, Err):
            return self.outcome.error
        return None


def check_project(
    fetcher: CatalogFetcher,
    project: TrackedProject,
    *,
    policy: ScanPolicy = ScanPolicy.CONTIGUOUS,
) -> UpdateOutcome:
    fetched = fetcher.fetch_all(project.owner, project.repo, project.fallback_tag)
    if isinstance(fetched, Err):
        return fetched
    releases = normalize(fetched.value)
    return Ok(resolve_patch(project.current, releases, policy))


def resolve_all(
    fetcher: CatalogFetcher,
    projects: Sequence[TrackedProject],
    *,
    policy: ScanPolicy = ScanPolicy.CONTIGUOUS,
) -> list[UpdateCheck]:
    """Check projects concurrently, at most ``MAX_CHECK_WORKERS`` at a time.

    Results follow the input order.
    """
    if not projects:
        return []
    with ThreadPoolExecutor(max_workers=min(MAX_CHECK_WORKERS, len(projects))) as pool:
        futures = [
            pool.submit(check_project, fetcher, project, policy=policy) for project in projects
        ]
        return [
            UpdateCheck(project=project, outcome=future.result())
            for project, future in zip(projects, futures, strict=True)
        ]


def resolve_updates(
    fetcher: CatalogFetcher,
    project_a: TrackedProject,
    project_b: TrackedProject,
    *,
    policy: ScanPolicy = ScanPolicy.CONTIGUOUS,
) -> tuple[UpdateOutcome, UpdateOutcome]:
    """Check two projects side by side (e.g. wadm and wasmCloud)."""
    a, b = resolve_all(fetcher, [project_a, project_b], policy=policy)
    return a.outcome, b.outcome
