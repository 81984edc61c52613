"""Pipeline stages: source, filter, duplicate, sink.

Every stage implements the :class:`~mailpipe.stages.base.Stage` contract and
is linked into a chain by :class:`mailpipe.builder.PipelineBuilder`.
"""

from mailpipe.stages.base import Stage
from mailpipe.stages.duplicate import DuplicateStage
from mailpipe.stages.filter import FilterStage, field_predicate
from mailpipe.stages.sink import SinkStage
from mailpipe.stages.source import SourceStage

__all__ = [
    "Stage",
    "SourceStage",
    "FilterStage",
    "DuplicateStage",
    "SinkStage",
    "field_predicate",
]
