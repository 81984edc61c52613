from __future__ import annotations

from typing import List, Optional, TextIO

from mailpipe.errors import ContractViolation
from mailpipe.record import Record
from mailpipe.stages.base import Stage
from mailpipe.utils import get_logger

logger = get_logger(__name__)

LINES_PER_RECORD = 3


def _chomp(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line


def read_unit(feed: TextIO) -> Optional[List[str]]:
    """Read one three-line unit; return the lines read so far on short input.

    Returns ``None`` at a clean end of input, a list shorter than three when the
    feed runs out mid-unit, and three stripped lines otherwise.
    """
    lines: List[str] = []
    for _ in range(LINES_PER_RECORD):
        raw = feed.readline()
        if raw == "":
            break
        lines.append(_chomp(raw))
    if not lines:
        return None
    return lines


class SourceStage(Stage):
    """Pulls records from a text feed and injects them into the chain."""

    name = "source"

    def __init__(self, feed: TextIO) -> None:
        super().__init__()
        self._feed = feed

    def process(self, record: Record) -> None:
        raise ContractViolation("SourceStage does not accept records; call drive() instead")

    def drive(self) -> int:
        emitted = 0
        while True:
            lines = read_unit(self._feed)
            if lines is None:
                break
            if len(lines) < LINES_PER_RECORD:
                logger.debug("source: dropped partial unit lines=%d", len(lines))
                break
            sender, recipient, body = lines
            self.forward(Record(sender=sender, recipient=recipient, body=body))
            emitted += 1
        logger.debug("source: emitted=%d", emitted)
        return emitted
