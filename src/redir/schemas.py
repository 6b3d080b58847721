"""Trace data model and wire schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .errors import TraceError


class HopRecord(BaseModel):
    """One request/response exchange within a redirect chain.

    ``duration`` is an integer number of nanoseconds so serialized traces
    round-trip exactly.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    status_code: int
    duration: int = Field(ge=0, description="Elapsed time in nanoseconds")

    @property
    def duration_ms(self) -> float:
        return self.duration / 1_000_000

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400


@dataclass
class TraceResult:
    """Ordered hops observed while tracing a single start URL."""

    start_url: str
    hops: list[HopRecord] = field(default_factory=list)
    error: TraceError | None = None

    def append(self, hop: HopRecord) -> None:
        self.hops.append(hop)

    def __iter__(self) -> Iterator[HopRecord]:
        return iter(self.hops)

    def __len__(self) -> int:
        return len(self.hops)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def final(self) -> HopRecord | None:
        return self.hops[-1] if self.hops else None

    @property
    def redirected(self) -> bool:
        return len(self.hops) > 1

    @property
    def truncated(self) -> bool:
        """True when the hop cap was hit while still being redirected."""
        return self.ok and self.final is not None and self.final.is_redirect

    def to_list(self) -> list[dict[str, Any]]:
        return [hop.model_dump() for hop in self.hops]


class TraceErrorPayload(BaseModel):
    """Normalized error payload returned by the trace service."""
    code: str
    message: str
    url: str | None = None
    details: dict[str, Any] | None = None


class TraceMeta(BaseModel):
    trace_id: str
    latency_ms: int | None = None


class TraceResponse(BaseModel):
    """Response wrapper for ``GET /v1/trace``."""
    ok: bool
    url: str
    hops: list[HopRecord]
    truncated: bool = False
    error: TraceErrorPayload | None = None
    meta: TraceMeta
