from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from patchwatch.releases.model import ReleaseRecord


def normalize(records: Iterable[ReleaseRecord]) -> list[ReleaseRecord]:
    """Drop drafts and prereleases, then order oldest first.

    The sort is stable: records published at the same instant keep the order
    in which they were fetched.
    """
    final = [r for r in records if r.is_final]
    return sorted(final, key=_published_at)


def _published_at(record: ReleaseRecord) -> datetime:
    # Only drafts lack a publication time.
    assert record.published_at is not None
    return record.published_at
