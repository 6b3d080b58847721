"""Output renderers for trace results."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from email.utils import format_datetime

from .schemas import TraceResult

OUTPUT_FORMATS = ("json", "table")

GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"

ROCKET = "\U0001F680"
ARROW = "➡️"
CHECK = "✅"


def render_json(result: TraceResult) -> str:
    return json.dumps(result.to_list(), ensure_ascii=False, indent=2)


def render_table(result: TraceResult, *, color: bool = True, now: datetime | None = None) -> str:
    def paint(code: str) -> str:
        return code if color else ""

    lines = [f"{paint(YELLOW)} {'#':<3} {'URL':<50} {'Status':<12} {'Duration':<15} {paint(RESET)}"]
    last = len(result.hops) - 1
    for index, hop in enumerate(result.hops):
        marker = CHECK if index == last else ARROW
        status_color = YELLOW if hop.is_redirect else GREEN
        duration = f"{hop.duration // 1_000_000}ms"
        lines.append(
            f"{paint(GREEN)} {index + 1:<3} {paint(RESET)} {hop.url:<50} {marker} {hop.status_code:<12} "
            f"{paint(status_color)} {duration:<15} {paint(RESET)}"
        )

    finished = now or datetime.now(timezone.utc)
    lines.append("")
    lines.append(f"{ROCKET} Finished at {format_datetime(finished, usegmt=finished.tzinfo is timezone.utc)}{paint(RESET)}")
    return "\n".join(lines)


def render(result: TraceResult, fmt: str, *, color: bool = True) -> str:
    if fmt == "json":
        return render_json(result)
    if fmt == "table":
        return render_table(result, color=color)
    raise ValueError(f"Unknown output format {fmt!r}. Use 'json' or 'table'.")
