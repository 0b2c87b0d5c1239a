from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from patchwatch.core.result import Err, Ok, Result
from patchwatch.core.structured import as_str_dict
from patchwatch.releases.semver import SemVer, parse_tag


# GitHub REST timestamps, always UTC ("2024-07-17T16:15:15Z").
PUBLISHED_AT_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def parse_published_at(value: str) -> datetime | None:
    try:
        return datetime.strptime(value, PUBLISHED_AT_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        return None


def format_published_at(value: datetime) -> str:
    return value.astimezone(UTC).strftime(PUBLISHED_AT_FORMAT)


@dataclass(frozen=True, slots=True)
class ReleaseRecord:
    """One entry of a GitHub release catalog.

    Only the fields needed to decide whether a patch release is available are
    kept (see https://docs.github.com/en/rest/releases/releases#list-releases).
    ``tag_name`` is opaque: it may belong to another release stream sharing the
    repository (``washboard-ui-v0.4.0``) and need not be a version at all.

    ``published_at`` is None only for drafts, which GitHub serves unpublished.
    """

    tag_name: str
    name: str
    published_at: datetime | None
    draft: bool
    prerelease: bool

    @property
    def version(self) -> SemVer | None:
        """Parsed tag, or None when this is not a main release."""
        return parse_tag(self.tag_name)

    @property
    def is_final(self) -> bool:
        return not self.draft and not self.prerelease

    @classmethod
    def from_json(cls, obj: object) -> Result[ReleaseRecord, str]:
        """Build a record from one element of the API response array.

        Unknown fields are ignored. ``name`` may be null on GitHub for releases
        created without a title; it falls back to the tag. ``published_at`` may
        be null on drafts only.
        """
        data = as_str_dict(obj)
        if data is None:
            return Err("release entry is not a JSON object")

        tag_name = data.get("tag_name")
        if not isinstance(tag_name, str):
            return Err("release entry has no string 'tag_name'")

        name = data.get("name")
        if name is None:
            name = tag_name
        if not isinstance(name, str):
            return Err(f"release {tag_name!r}: 'name' is not a string")

        draft = data.get("draft")
        prerelease = data.get("prerelease")
        if not isinstance(draft, bool) or not isinstance(prerelease, bool):
            return Err(f"release {tag_name!r}: 'draft' and 'prerelease' must be booleans")

        raw_published = data.get("published_at")
        published_at: datetime | None = None
        if raw_published is None and not draft:
            return Err(f"release {tag_name!r}: missing 'published_at'")
        if raw_published is not None:
            if not isinstance(raw_published, str):
                return Err(f"release {tag_name!r}: 'published_at' is not a string")
            published_at = parse_published_at(raw_published)
            if published_at is None:
                return Err(f"release {tag_name!r}: invalid 'published_at' {raw_published!r}")

        return Ok(
            cls(
                tag_name=tag_name,
                name=name,
                published_at=published_at,
                draft=draft,
                prerelease=prerelease,
            )
        )

    def to_json(self) -> dict[str, object]:
        return {
            "tag_name": self.tag_name,
            "name": self.name,
            "published_at": (
                None if self.published_at is None else format_published_at(self.published_at)
            ),
            "draft": self.draft,
            "prerelease": self.prerelease,
        }


@dataclass(frozen=True, slots=True)
class TrackedProject:
    """An upstream project and the version currently pinned locally.

    Attributes:
        name: Display name (e.g. "wadm")
        owner: Repository owner on GitHub
        repo: Repository name
        current: Pinned version
        fallback_tag: Already-installed tag; bounds how far the catalog is paged
    """

    name: str
    owner: str
    repo: str
    current: SemVer
    fallback_tag: str | None = None

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"
