"""Selection of a patch upgrade from an ordered release list.

Two scan policies are available:

CONTIGUOUS (default)
    Walk the releases oldest first and stop at the first release that is not
    a patch of the current line, unparseable tags included. The answer is the
    first candidate seen before that point. A newer patch published after an
    unrelated release (another major, another release stream) is never
    reached.

SCAN_ALL
    Skip over non-candidates and return the highest patch in the list.
    Opt-in via ``--scan-all`` or ``policy = "scan-all"``.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from itertools import takewhile

from patchwatch.releases.model import ReleaseRecord
from patchwatch.releases.semver import SemVer

__all__ = ["ScanPolicy", "is_patch_candidate", "resolve_patch"]


class ScanPolicy(Enum):
    CONTIGUOUS = "contiguous"
    SCAN_ALL = "scan-all"

    def __str__(self) -> str:
        return self.value


def is_patch_candidate(current: SemVer, version: SemVer | None) -> bool:
    """True if ``version`` is a newer patch on the same major.minor line.

    Prerelease and build metadata are ignored on both sides.
    """
    if version is None:
        return False
    return version.core[:2] == current.core[:2] and version.patch > current.patch


def resolve_patch(
    current: SemVer,
    releases: Iterable[ReleaseRecord],
    policy: ScanPolicy = ScanPolicy.CONTIGUOUS,
) -> ReleaseRecord | None:
    """Pick the patch release to upgrade to.

    Args:
        current: Installed version
        releases: Releases ordered oldest first (see ``normalize``)
        policy: Scan policy

    Returns:
        The selected release, or None when there is no newer patch
    """
    match policy:
        case ScanPolicy.CONTIGUOUS:
            return _first_of_contiguous_run(current, releases)
        case ScanPolicy.SCAN_ALL:
            return _highest_candidate(current, releases)


def _first_of_contiguous_run(
    current: SemVer, releases: Iterable[ReleaseRecord]
) -> ReleaseRecord | None:
    run = takewhile(lambda r: is_patch_candidate(current, r.version), releases)
    return next(run, None)


def _highest_candidate(
    current: SemVer, releases: Iterable[ReleaseRecord]
) -> ReleaseRecord | None:
    best: ReleaseRecord | None = None
    best_patch = current.patch
    for release in releases:
        version = release.version
        if not is_patch_candidate(current, version):
            continue
        assert version is not None
        if version.patch > best_patch:
            best, best_patch = release, version.patch
    return best
