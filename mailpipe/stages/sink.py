from __future__ import annotations

from typing import TextIO

from mailpipe.record import Record
from mailpipe.stages.base import Stage


class SinkStage(Stage):
    """Writes each record to a text feed in three-line framing, then forwards it."""

    name = "sink"

    def __init__(self, feed: TextIO) -> None:
        super().__init__()
        self._feed = feed

    def process(self, record: Record) -> None:
        self._feed.write(f"{record.sender}\n{record.recipient}\n{record.body}\n")
        self.forward(record)
