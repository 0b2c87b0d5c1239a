from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class FetchError:
    """A release catalog could not be retrieved.

    ``transport`` covers connection, DNS, TLS and timeout failures;
    ``decode`` covers bodies that are not a JSON array of release objects.
    A non-success HTTP status is not a FetchError: it ends pagination.
    """

    kind: Literal["transport", "decode"]
    url: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"
