"""Tests for per-project update checks."""

from __future__ import annotations

import http.client
import json
import threading
import time
import urllib.request
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta

import pytest

from patchwatch.core.result import Err, Ok, Result
from patchwatch.releases.catalog import CatalogFetcher
from patchwatch.releases.errors import FetchError
from patchwatch.releases.model import TrackedProject
from patchwatch.releases.resolver import ScanPolicy
from patchwatch.releases.semver import SemVer
from patchwatch.releases.service import (
    MAX_CHECK_WORKERS,
    UpdateCheck,
    check_project,
    resolve_all,
    resolve_updates,
)
from patchwatch.tools.http import HttpError, HttpResponse, MockHttpClient, RealHttpClient

T0 = datetime(2024, 6, 1, tzinfo=UTC)

WADM = TrackedProject(
    name="wadm", owner="wasmCloud", repo="wadm", current=SemVer(0, 12, 1), fallback_tag="v0.12.1"
)
WASMCLOUD = TrackedProject(
    name="wasmcloud", owner="wasmCloud", repo="wasmCloud", current=SemVer(1, 0, 3)
)


def _entry(tag: str, hours: int, *, prerelease: bool = False) -> dict[str, object]:
    return {
        "tag_name": tag,
        "name": tag,
        "published_at": (T0 + timedelta(hours=hours)).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "draft": False,
        "prerelease": prerelease,
    }


def _serve(client: MockHttpClient, fetcher: CatalogFetcher, project: TrackedProject, entries: list[dict[str, object]]) -> None:
    client.set_json(fetcher.releases_url(project.owner, project.repo, 0), entries)


@pytest.fixture
def client() -> MockHttpClient:
    return MockHttpClient()


@pytest.fixture
def fetcher(client: MockHttpClient) -> CatalogFetcher:
    return CatalogFetcher(client)


class TestCheckProject:
    def test_finds_patch(self, client: MockHttpClient, fetcher: CatalogFetcher) -> None:
        # Served newest first, as GitHub does.
        _serve(
            client,
            fetcher,
            WASMCLOUD,
            [
                _entry("v1.0.6", 4),
                _entry("v1.1.0-rc.1", 3, prerelease=True),
                _entry("v1.0.5", 2),
                _entry("v1.0.4", 1),
            ],
        )

        result = check_project(fetcher, WASMCLOUD)

        assert isinstance(result, Ok)
        assert result.value is not None
        assert result.value.tag_name == "v1.0.4"

    def test_fallback_release_is_not_a_candidate(
        self, client: MockHttpClient, fetcher: CatalogFetcher
    ) -> None:
        _serve(
            client,
            fetcher,
            WADM,
            [_entry("v0.12.2", 2), _entry("v0.12.1", 1), _entry("v0.12.0", 0)],
        )

        result = check_project(fetcher, WADM)

        # v0.12.0 is oldest and interrupts the run.
        assert result == Ok(None)

    def test_scan_all(self, client: MockHttpClient, fetcher: CatalogFetcher) -> None:
        _serve(
            client,
            fetcher,
            WADM,
            [_entry("v0.12.3", 3), _entry("v0.12.2", 2), _entry("v0.12.1", 1), _entry("v0.12.0", 0)],
        )

        result = check_project(fetcher, WADM, policy=ScanPolicy.SCAN_ALL)

        assert isinstance(result, Ok)
        assert result.value is not None
        assert result.value.tag_name == "v0.12.3"

    def test_fetch_error(self, client: MockHttpClient, fetcher: CatalogFetcher) -> None:
        client.set_error(fetcher.releases_url("wasmCloud", "wadm", 0), "Name or service not known")

        result = check_project(fetcher, WADM)

        assert isinstance(result, Err)
        assert result.error.kind == "transport"


class TestResolveUpdates:
    def test_independent_results(self, client: MockHttpClient, fetcher: CatalogFetcher) -> None:
        _serve(client, fetcher, WADM, [_entry("v0.12.2", 1)])
        _serve(client, fetcher, WASMCLOUD, [_entry("v1.0.3", 0)])

        wadm, wasmcloud = resolve_updates(fetcher, WADM, WASMCLOUD)

        assert isinstance(wadm, Ok)
        assert wadm.value is not None
        assert wadm.value.tag_name == "v0.12.2"
        assert wasmcloud == Ok(None)

    def test_one_failure_does_not_affect_the_other(
        self, client: MockHttpClient, fetcher: CatalogFetcher
    ) -> None:
        client.set_error(fetcher.releases_url("wasmCloud", "wadm", 0), "Connection refused")
        _serve(client, fetcher, WASMCLOUD, [_entry("v1.0.4", 0)])

        wadm, wasmcloud = resolve_updates(fetcher, WADM, WASMCLOUD)

        assert isinstance(wadm, Err)
        assert isinstance(wasmcloud, Ok)
        assert wasmcloud.value is not None
        assert wasmcloud.value.tag_name == "v1.0.4"

    def test_malformed_response_does_not_affect_the_other(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fetcher = CatalogFetcher(RealHttpClient())
        body = json.dumps([_entry("v1.0.4", 0)]).encode()

        def fake_urlopen(req: urllib.request.Request, **_kwargs: object) -> _FakeResponse:
            if "/wadm/" in req.full_url:
                raise http.client.BadStatusLine("garbage-not-http")
            return _FakeResponse(body)

        monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)

        wadm, wasmcloud = resolve_updates(fetcher, WADM, WASMCLOUD)

        assert isinstance(wadm, Err)
        assert wadm.error.kind == "transport"
        assert isinstance(wasmcloud, Ok)
        assert wasmcloud.value is not None
        assert wasmcloud.value.tag_name == "v1.0.4"

    def test_order_independent(self, client: MockHttpClient, fetcher: CatalogFetcher) -> None:
        _serve(client, fetcher, WADM, [_entry("v0.12.3", 2), _entry("v0.12.2", 1)])
        _serve(client, fetcher, WASMCLOUD, [_entry("v1.0.4", 0)])

        a, b = resolve_updates(fetcher, WADM, WASMCLOUD)
        b2, a2 = resolve_updates(fetcher, WASMCLOUD, WADM)

        assert a == a2
        assert b == b2


class _FakeResponse:
    """Stands in for the object ``urlopen`` returns."""

    status = 200

    def __init__(self, body: bytes) -> None:
        self._body = body

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *_exc: object) -> None:
        return None

    def read(self) -> bytes:
        return self._body


class _PeakClient:
    """Records the largest number of requests in flight at once."""

    def __init__(self, inner: MockHttpClient) -> None:
        self._inner = inner
        self._lock = threading.Lock()
        self._active = 0
        self.peak = 0

    def get(
        self, url: str, headers: Mapping[str, str] | None = None
    ) -> Result[HttpResponse, HttpError]:
        with self._lock:
            self._active += 1
            self.peak = max(self.peak, self._active)
        try:
            time.sleep(0.01)
            return self._inner.get(url, headers)
        finally:
            with self._lock:
                self._active -= 1


class _BarrierClient:
    """Blocks each first-page request until both projects have sent one."""

    def __init__(self, inner: MockHttpClient) -> None:
        self._inner = inner
        self._barrier = threading.Barrier(2, timeout=5)

    def get(
        self, url: str, headers: Mapping[str, str] | None = None
    ) -> Result[HttpResponse, HttpError]:
        if "page=0&" in url:
            self._barrier.wait()
        return self._inner.get(url, headers)


class TestResolveAll:
    def test_projects_run_concurrently(self, client: MockHttpClient) -> None:
        fetcher = CatalogFetcher(_BarrierClient(client))
        _serve(client, fetcher, WADM, [_entry("v0.12.2", 1)])
        _serve(client, fetcher, WASMCLOUD, [_entry("v1.0.4", 0)])

        checks = resolve_all(fetcher, [WADM, WASMCLOUD])

        assert [c.project for c in checks] == [WADM, WASMCLOUD]
        assert [c.update.tag_name for c in checks if c.update] == ["v0.12.2", "v1.0.4"]

    def test_worker_count_is_capped(self, client: MockHttpClient) -> None:
        peak = _PeakClient(client)
        fetcher = CatalogFetcher(peak)
        projects = [
            TrackedProject(name=f"p{i}", owner="o", repo=f"r{i}", current=SemVer(1, 0, 0))
            for i in range(3 * MAX_CHECK_WORKERS)
        ]

        checks = resolve_all(fetcher, projects)

        assert [c.project for c in checks] == projects
        assert all(c.outcome == Ok(None) for c in checks)
        assert 1 <= peak.peak <= MAX_CHECK_WORKERS

    def test_empty(self, fetcher: CatalogFetcher) -> None:
        assert resolve_all(fetcher, []) == []


class TestUpdateCheck:
    def test_accessors_on_error(self) -> None:
        error = FetchError(kind="decode", url="u", message="Expected JSON array")
        check = UpdateCheck(project=WADM, outcome=Err(error))

        assert check.update is None
        assert check.error == error

    def test_accessors_up_to_date(self) -> None:
        check = UpdateCheck(project=WADM, outcome=Ok(None))

        assert check.update is None
        assert check.error is None
