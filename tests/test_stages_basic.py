import io

import pytest

from mailpipe.errors import ContractViolation
from mailpipe.record import Record
from mailpipe.stages import DuplicateStage, FilterStage, SinkStage, SourceStage, Stage, field_predicate


class Collect(Stage):
    name = "collect"

    def __init__(self):
        super().__init__()
        self.records = []

    def process(self, record):
        self.records.append(record)
        self.forward(record)


def _source(text):
    return SourceStage(io.StringIO(text))


def test_source_reads_three_line_units():
    src = _source("a\nb\nhi\nc\nd\nyo\n")
    out = Collect()
    src.set_successor(out)
    assert src.drive() == 2
    assert out.records == [Record("a", "b", "hi"), Record("c", "d", "yo")]


def test_source_drops_partial_trailing_unit():
    src = _source("a\nb\nhi\nc\nd\n")
    out = Collect()
    src.set_successor(out)
    assert src.drive() == 1
    assert out.records == [Record("a", "b", "hi")]


def test_source_last_line_without_newline_and_empty_body():
    src = _source("a\nb\n\nc\r\nd\r\nlast")
    out = Collect()
    src.set_successor(out)
    src.drive()
    assert out.records == [Record("a", "b", ""), Record("c", "d", "last")]


def test_source_without_successor_drops_everything():
    assert _source("a\nb\nhi\n").drive() == 1


def test_source_rejects_process():
    with pytest.raises(ContractViolation):
        _source("").process(Record("a", "b", "c"))


@pytest.mark.parametrize("stage", [
    FilterStage(lambda r: True),
    DuplicateStage("x@x"),
    SinkStage(io.StringIO()),
])
def test_non_source_stages_cannot_be_driven(stage):
    with pytest.raises(ContractViolation):
        stage.drive()


def test_filter_forwards_only_accepted_records():
    flt = FilterStage(lambda r: r.sender == "a")
    out = Collect()
    flt.set_successor(out)
    keep = Record("a", "b", "1")
    drop = Record("c", "b", "2")
    flt.process(keep)
    flt.process(drop)
    assert out.records == [keep]
    assert out.records[0] is keep
    assert drop == Record("c", "b", "2")


def test_filter_predicate_errors_propagate():
    def boom(record):
        raise KeyError("nope")

    with pytest.raises(KeyError):
        FilterStage(boom).process(Record("a", "b", "c"))


def test_duplicate_places_copy_right_after_original():
    dup = DuplicateStage("b")
    out = Collect()
    dup.set_successor(out)
    dup.process(Record("a", "c", "?"))
    dup.process(Record("a", "b", "hi"))
    assert out.records == [Record("a", "c", "?"), Record("a", "b", "?"), Record("a", "b", "hi")]
    assert out.records[0] is not out.records[1]


def test_sink_writes_and_forwards():
    buf = io.StringIO()
    sink = SinkStage(buf)
    out = Collect()
    sink.set_successor(out)
    sink.process(Record("a", "b", "hi"))
    assert buf.getvalue() == "a\nb\nhi\n"
    assert out.records == [Record("a", "b", "hi")]


def test_set_successor_overwrites():
    flt = FilterStage(lambda r: True)
    first, second = Collect(), Collect()
    flt.set_successor(first)
    flt.set_successor(second)
    flt.process(Record("a", "b", "c"))
    assert first.records == []
    assert len(second.records) == 1
    assert flt.successor is second


@pytest.mark.parametrize("field,op,value,negate,expected", [
    ("from", "equals", "a@x", False, True),
    ("from", "equals", "a@x", True, False),
    ("to", "not_equals", "b@x", False, False),
    ("body", "contains", "ell", False, True),
    ("from", "startswith", "a@", False, True),
    ("to", "endswith", "@y", False, False),
    ("body", "matches", r"^h.l+o$", False, True),
])
def test_field_predicate(field, op, value, negate, expected):
    rec = Record("a@x", "b@x", "hello")
    assert field_predicate(field, op, value, negate=negate)(rec) is expected


def test_field_predicate_rejects_unknown_names():
    with pytest.raises(ValueError):
        field_predicate("cc", "equals", "x")
    with pytest.raises(ValueError):
        field_predicate("from", "like", "x")


def test_source_accepts_lone_carriage_return_lines():
    src = SourceStage(io.StringIO("a\rb\rhi\r", newline=""))
    out = Collect()
    src.set_successor(out)
    assert src.drive() == 1
    assert out.records == [Record("a", "b", "hi")]
