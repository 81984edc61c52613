from __future__ import annotations

from mailpipe.record import Record
from mailpipe.stages.base import Stage


class DuplicateStage(Stage):
    """Sends an extra copy of each record to a fixed recipient.

    The original is always forwarded before its copy. Records already
    addressed to the target pass through without a copy.
    """

    name = "duplicate"

    def __init__(self, recipient: str) -> None:
        super().__init__()
        self.recipient = recipient

    def process(self, record: Record) -> None:
        if record.recipient == self.recipient:
            self.forward(record)
            return
        copy = record.clone(recipient=self.recipient)
        self.forward(record)
        self.forward(copy)

    def __repr__(self) -> str:
        return f"DuplicateStage({self.recipient!r})"
