from __future__ import annotations

import re
from dataclasses import dataclass


# Semantic Versioning 2.0.0 grammar (https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string)
_NUM = r"0|[1-9][0-9]*"
_PRE_IDENT = r"0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*"
_SEMVER_RE = re.compile(
    rf"(?P<major>{_NUM})\.(?P<minor>{_NUM})\.(?P<patch>{_NUM})"
    rf"(?:-(?P<prerelease>(?:{_PRE_IDENT})(?:\.(?:{_PRE_IDENT}))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?",
    re.ASCII,
)


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @property
    def core(self) -> tuple[int, int, int]:
        """The (major, minor, patch) triple; prerelease and build are ignored."""
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease is not None:
            text += f"-{self.prerelease}"
        if self.build is not None:
            text += f"+{self.build}"
        return text


def parse_version(text: str) -> SemVer | None:
    m = _SEMVER_RE.fullmatch(text)
    if m is None:
        return None
    return SemVer(
        major=int(m.group("major")),
        minor=int(m.group("minor")),
        patch=int(m.group("patch")),
        prerelease=m.group("prerelease"),
        build=m.group("build"),
    )


def parse_tag(tag: str) -> SemVer | None:
    """Parse a release tag such as ``v1.2.3`` into a SemVer.

    Exactly one leading lowercase ``v`` is stripped; any other prefix
    (``washboard-ui-v0.4.0``, ``V1.0.0``, ``vv1.0.0``) makes the tag
    unparseable. Returns None rather than raising: tags from other release
    streams sharing the same catalog are expected.
    """
    return parse_version(tag.removeprefix("v"))
