"""Declarative assembly of a stage chain.

    chain = (
        PipelineBuilder(in_feed)
        .filter_by(lambda r: r.sender == "erich@example.com")
        .copy_to("richard@example.com")
        .send(out_feed)
        .build()
    )
    chain.drive()

Declaration order is pipeline order. A builder can be built once.
"""

from __future__ import annotations

from typing import List, TextIO, cast

from mailpipe.errors import BuilderFinalizedError
from mailpipe.stages import DuplicateStage, FilterStage, SinkStage, SourceStage, Stage
from mailpipe.stages.filter import Predicate
from mailpipe.utils import get_logger

logger = get_logger(__name__)


class PipelineBuilder:
    def __init__(self, feed: TextIO) -> None:
        self._stages: List[Stage] = [SourceStage(feed)]
        self._finalized = False

    def _append(self, stage: Stage) -> "PipelineBuilder":
        if self._finalized:
            raise BuilderFinalizedError(f"cannot add {type(stage).__name__}: builder already built")
        self._stages.append(stage)
        return self

    def filter_by(self, predicate: Predicate) -> "PipelineBuilder":
        return self._append(FilterStage(predicate))

    def copy_to(self, recipient: str) -> "PipelineBuilder":
        return self._append(DuplicateStage(recipient))

    def send(self, feed: TextIO) -> "PipelineBuilder":
        return self._append(SinkStage(feed))

    def build(self) -> SourceStage:
        """Link the declared stages and return the source at the head of the chain."""
        if self._finalized:
            raise BuilderFinalizedError("builder already built")

        stages = self._stages
        for i in range(len(stages) - 1, 0, -1):
            stages[i - 1].set_successor(stages[i])

        head = cast(SourceStage, stages[0])
        logger.debug("pipeline built: %s", " -> ".join(s.name for s in stages))
        self._stages = []
        self._finalized = True
        return head

    def __len__(self) -> int:
        return len(self._stages)

    def __repr__(self) -> str:
        if self._finalized:
            return "PipelineBuilder(<built>)"
        return f"PipelineBuilder({' -> '.join(repr(s) for s in self._stages)})"
