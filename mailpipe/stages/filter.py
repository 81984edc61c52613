from __future__ import annotations

import re
import typing as t

from mailpipe.record import Record
from mailpipe.stages.base import Stage

Predicate = t.Callable[[Record], bool]

# Config-facing field names map onto Record attributes.
FIELDS: t.Dict[str, str] = {
    "from": "sender",
    "to": "recipient",
    "body": "body",
}

OPS: t.Dict[str, t.Callable[[str, str], bool]] = {
    "equals": lambda actual, value: actual == value,
    "not_equals": lambda actual, value: actual != value,
    "contains": lambda actual, value: value in actual,
    "startswith": lambda actual, value: actual.startswith(value),
    "endswith": lambda actual, value: actual.endswith(value),
}


def field_predicate(field: str, op: str, value: str, *, negate: bool = False) -> Predicate:
    """Build a predicate comparing one record field against ``value``.

    ``op`` is one of :data:`OPS` or ``"matches"`` (regex search).
    """
    if field not in FIELDS:
        raise ValueError(f"Unknown record field: {field}")
    attr = FIELDS[field]

    if op == "matches":
        pattern = re.compile(value)
        compare: t.Callable[[str, str], bool] = lambda actual, _v: pattern.search(actual) is not None
    elif op in OPS:
        compare = OPS[op]
    else:
        raise ValueError(f"Unknown filter op: {op}")

    def predicate(record: Record) -> bool:
        result = compare(getattr(record, attr), value)
        return not result if negate else result

    predicate.__name__ = f"{field}_{'not_' if negate else ''}{op}"
    return predicate


class FilterStage(Stage):
    """Forwards a record only when the predicate accepts it."""

    name = "filter"

    def __init__(self, predicate: Predicate) -> None:
        super().__init__()
        self._predicate = predicate

    def process(self, record: Record) -> None:
        if self._predicate(record):
            self.forward(record)

    def __repr__(self) -> str:
        return f"FilterStage({getattr(self._predicate, '__name__', 'predicate')})"
