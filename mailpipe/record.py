from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass
class Record:
    """One message flowing through the pipeline."""

    sender: str
    recipient: str
    body: str

    def clone(self, **changes: str) -> "Record":
        return replace(self, **changes)
