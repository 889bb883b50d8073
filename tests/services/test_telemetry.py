"""Tests for telemetry spans and the @traced decorator."""

from __future__ import annotations

from gqlorm.services.result import ServiceResult
from gqlorm.services.telemetry import Span, enable_telemetry, trace_span, traced


@traced
def _operation() -> ServiceResult:
    with trace_span("resolve") as span:
        if span:
            span.annotate("columns", 3)
        with trace_span("nested"):
            pass
    with trace_span("emit"):
        pass
    return ServiceResult(ok=True, op="generate")


class TestSpan:
    def test_duration_before_end(self) -> None:
        assert Span(name="x").duration_ms == 0.0

    def test_to_dict(self) -> None:
        span = Span(name="root", start_time=1.0)
        span.children.append(Span(name="child", start_time=1.0, end_time=1.5))
        span.annotate("files", 4)
        span.end_time = 2.0
        assert span.to_dict() == {
            "name": "root",
            "duration_ms": 1000.0,
            "annotations": {"files": 4},
            "children": [{"name": "child", "duration_ms": 500.0}],
        }


class TestTraced:
    def test_disabled_leaves_meta_alone(self) -> None:
        result = _operation()
        assert result.meta is None

    def test_trace_span_yields_none_when_disabled(self) -> None:
        with trace_span("stage") as span:
            assert span is None

    def test_enabled_builds_tree(self) -> None:
        enable_telemetry()
        result = _operation()
        assert result.meta is not None
        tree = result.meta["telemetry"]
        assert tree["name"] == "_operation"
        assert [c["name"] for c in tree["children"]] == ["resolve", "emit"]
        resolve = tree["children"][0]
        assert resolve["annotations"] == {"columns": 3}
        assert [c["name"] for c in resolve["children"]] == ["nested"]

    def test_span_outside_traced_call_is_none(self) -> None:
        enable_telemetry()
        with trace_span("orphan") as span:
            assert span is None
