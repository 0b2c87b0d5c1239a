"""Result type for explicit error handling.

Operations that can fail in an expected way (a catalog that cannot be
fetched, a config file with a bad key) return ``Ok`` or ``Err`` instead of
raising. Callers branch on the variant:

    match fetcher.fetch_all("wasmCloud", "wadm"):
        case Ok(records):
            ...
        case Err(error):
            console.error(str(error))

Expected-but-absent values that are not failures (a tag that is not a
semantic version, no newer patch) are plain ``None``, not ``Err``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
