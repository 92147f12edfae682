"""
Telemetry sinks for agent loop observability.

The loop emits one `agent.run` span per run plus counters and a latency
histogram. `NullTelemetrySink` drops everything, `InMemoryTelemetrySink`
keeps records for tests, and `OpenTelemetrySink` forwards to the global
OTel providers when `opentelemetry-api` is installed.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from ..llms.types import JSONValue

Attributes = dict[str, JSONValue]
SpanStatus = Literal["ok", "error"]


@dataclass(frozen=True, slots=True)
class TelemetrySpan:
    """Handle for an open span; `native_span` is the provider object, if any."""

    name: str
    started_at_ms: int
    attributes: Attributes = field(default_factory=dict)
    native_span: Any = None


@dataclass(frozen=True, slots=True)
class TelemetryRecord:
    """One measurement captured by `InMemoryTelemetrySink`."""

    kind: Literal["span", "counter", "histogram"]
    name: str
    value: float
    attributes: Attributes = field(default_factory=dict)
    status: str | None = None
    error: str | None = None
    duration_ms: int | None = None


class TelemetrySink(Protocol):
    """Backend contract. Implementations must never raise into the caller."""

    def start_span(self, name: str, *, attributes: Attributes | None = None) -> TelemetrySpan | None:
        ...

    def end_span(
        self,
        span: TelemetrySpan | None,
        *,
        status: SpanStatus,
        error: str | None = None,
        attributes: Attributes | None = None,
    ) -> None:
        ...

    def increment_counter(self, name: str, value: int = 1, *, attributes: Attributes | None = None) -> None:
        ...

    def record_histogram(self, name: str, value: float, *, attributes: Attributes | None = None) -> None:
        ...


class NullTelemetrySink:
    """Default sink; every call is a no-op."""

    def start_span(self, name: str, *, attributes: Attributes | None = None) -> TelemetrySpan | None:
        return None

    def end_span(self, span, *, status, error=None, attributes=None) -> None:
        return None

    def increment_counter(self, name, value=1, *, attributes=None) -> None:
        return None

    def record_histogram(self, name, value, *, attributes=None) -> None:
        return None


class InMemoryTelemetrySink:
    """Keeps every measurement in emission order."""

    def __init__(self) -> None:
        self.records: list[TelemetryRecord] = []

    def start_span(self, name: str, *, attributes: Attributes | None = None) -> TelemetrySpan:
        return TelemetrySpan(name=name, started_at_ms=now_ms(), attributes=dict(attributes or {}))

    def end_span(
        self,
        span: TelemetrySpan | None,
        *,
        status: SpanStatus,
        error: str | None = None,
        attributes: Attributes | None = None,
    ) -> None:
        if span is None:
            return
        duration = now_ms() - span.started_at_ms
        self.records.append(
            TelemetryRecord(
                kind="span",
                name=span.name,
                value=float(duration),
                attributes={**span.attributes, **(attributes or {})},
                status=status,
                error=error,
                duration_ms=duration,
            )
        )

    def increment_counter(self, name: str, value: int = 1, *, attributes: Attributes | None = None) -> None:
        self.records.append(TelemetryRecord("counter", name, int(value), dict(attributes or {})))

    def record_histogram(self, name: str, value: float, *, attributes: Attributes | None = None) -> None:
        self.records.append(TelemetryRecord("histogram", name, float(value), dict(attributes or {})))

    def _of_kind(self, kind: str) -> list[TelemetryRecord]:
        return [r for r in self.records if r.kind == kind]

    def spans(self) -> list[TelemetryRecord]:
        return self._of_kind("span")

    def counters(self) -> list[TelemetryRecord]:
        return self._of_kind("counter")

    def histograms(self) -> list[TelemetryRecord]:
        return self._of_kind("histogram")

    def counter_total(self, name: str) -> int:
        return int(sum(r.value for r in self.counters() if r.name == name))


class OpenTelemetrySink:
    """
    Forwards to `opentelemetry.trace` / `opentelemetry.metrics` global providers.

    The OTel import happens on first use. When it is missing, or a provider
    call fails, the measurement is dropped.
    """

    def __init__(self, instrumentation_name: str = "aicoder.agents.loop") -> None:
        self.instrumentation_name = instrumentation_name
        self._tracer: Any = None
        self._meter: Any = None
        self._instruments: dict[tuple[str, str], Any] = {}

    def _providers(self) -> tuple[Any, Any]:
        if self._tracer is None or self._meter is None:
            try:
                from opentelemetry import metrics, trace
            except ImportError as e:
                raise RuntimeError("OpenTelemetrySink requires the 'otel' extra (opentelemetry-api)") from e
            self._tracer = trace.get_tracer(self.instrumentation_name)
            self._meter = metrics.get_meter(self.instrumentation_name)
        return self._tracer, self._meter

    def _instrument(self, kind: str, name: str) -> Any:
        key = (kind, name)
        if key not in self._instruments:
            _, meter = self._providers()
            factory = meter.create_counter if kind == "counter" else meter.create_histogram
            self._instruments[key] = factory(name)
        return self._instruments[key]

    def start_span(self, name: str, *, attributes: Attributes | None = None) -> TelemetrySpan | None:
        try:
            tracer, _ = self._providers()
            native = tracer.start_span(name=name, attributes=_otel_attributes(attributes))
        except Exception:
            return None
        return TelemetrySpan(name=name, started_at_ms=now_ms(), attributes=dict(attributes or {}), native_span=native)

    def end_span(
        self,
        span: TelemetrySpan | None,
        *,
        status: SpanStatus,
        error: str | None = None,
        attributes: Attributes | None = None,
    ) -> None:
        if span is None or span.native_span is None:
            return
        try:
            from opentelemetry.trace import Status, StatusCode

            native = span.native_span
            extra = _otel_attributes(attributes)
            if extra:
                native.set_attributes(extra)
            code = StatusCode.OK if status == "ok" else StatusCode.ERROR
            native.set_status(Status(code, None if status == "ok" else (error or status)))
            native.end()
        except Exception:
            return

    def increment_counter(self, name: str, value: int = 1, *, attributes: Attributes | None = None) -> None:
        try:
            self._instrument("counter", name).add(int(value), attributes=_otel_attributes(attributes))
        except Exception:
            return

    def record_histogram(self, name: str, value: float, *, attributes: Attributes | None = None) -> None:
        try:
            self._instrument("histogram", name).record(float(value), attributes=_otel_attributes(attributes))
        except Exception:
            return


def now_ms() -> int:
    return int(time.time() * 1000)


def _otel_attributes(attributes: Attributes | None) -> dict[str, Any]:
    """OTel attributes accept scalars and homogeneous sequences; `None` values are dropped."""
    out: dict[str, Any] = {}
    for key, value in (attributes or {}).items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            out[key] = value
        elif isinstance(value, list):
            out[key] = tuple(str(v) for v in value)
        else:
            out[key] = str(value)
    return out
