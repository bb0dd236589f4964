# Area: Shared
"""Plain-text rendering of reports and errors for chat replies."""

from __future__ import annotations
from typing import Dict, List, Mapping

from .._core.dispatcher import DispatchReport
from .._core.matcher import MatchResult, Unique
from ..errors import CrewMuteError
from ..types import StatusEntry

NO_GAME = "There is no game running"
DISPATCH_FAILED = "errors occurred; check log"


def format_status(status: Mapping[int, StatusEntry]) -> str:
    """Render status_report() as a code block, living players first."""
    if not status:
        return "Nobody is being tracked"

    def sort_key(item):
        _, entry = item
        return (entry["spectator"], not entry["alive"], (entry["alias"] or entry["display_name"]).casefold())

    lines = ["```"]
    for pid, entry in sorted(status.items(), key=sort_key):
        name = entry["display_name"]
        if entry["alias"]:
            name = f"{entry['alias']} ({name})"
        if entry["spectator"]:
            state = "spectating"
        else:
            state = "alive" if entry["alive"] else "dead"
        room = (entry["room"] or "?").lower()
        lines.append(f"{name:<32} {state:<10} {room}")
    lines.append("```")
    return "\n".join(lines)


def format_matches(results: Dict[str, MatchResult]) -> str:
    """Render identity checks: matched names first, then problems."""
    matched: List[str] = []
    problems: List[str] = []
    for query, result in results.items():
        if isinstance(result, Unique):
            matched.append(f"{query} → {result.describe()}")
        else:
            problems.append(f"{query}: {result.describe()}")
    lines = matched + problems
    if not problems:
        lines.append("Everyone is matched")
    return "\n".join(lines)


def format_error(error: CrewMuteError) -> str:
    return error.format_report()


def format_dispatch_failures(report: DispatchReport) -> List[str]:
    """One log line per failed or skipped call."""
    lines = [str(failure) for failure in report.failures]
    lines.extend(f"skipped {call}" for call in report.skipped)
    return lines
