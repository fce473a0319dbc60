"""Helpers for building and persisting machine-readable apply summaries."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from modemppp.core.models import NetworkConfiguration


class Outcome(str, Enum):
    """Per-interface result of a reconfiguration."""

    SUCCESS = "success"
    DISABLED = "disabled"
    UNKNOWN_MODEM = "unknown_modem"
    MISSING_CONFIG = "missing_config"
    INVALID_UNIT_NUMBER = "invalid_unit_number"
    IO_FAILURE = "io_failure"
    LINK_UPDATE_FAILURE = "link_update_failure"

    @property
    def acceptable(self) -> bool:
        return self in (Outcome.SUCCESS, Outcome.DISABLED, Outcome.INVALID_UNIT_NUMBER)


@dataclass(slots=True)
class InterfaceResult:
    """Summary of a single modem interface."""

    interface_name: str
    outcome: Outcome
    previous_name: str | None = None
    peer_path: str | None = None
    link_path: str | None = None
    removed_links: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "interface_name": self.interface_name,
            "outcome": self.outcome.value,
            "previous_name": self.previous_name,
            "peer_path": self.peer_path,
            "link_path": self.link_path,
            "removed_links": list(self.removed_links),
            "error": self.error,
        }


@dataclass(slots=True)
class ApplyResult:
    """Aggregate result of one ``apply`` call."""

    configuration: NetworkConfiguration
    results: list[InterfaceResult] = field(default_factory=list)

    def add(self, result: InterfaceResult) -> None:
        self.results.append(result)

    def outcome_for(self, interface_name: str) -> Outcome | None:
        for result in self.results:
            if interface_name in (result.interface_name, result.previous_name):
                return result.outcome
        return None

    @property
    def ok(self) -> bool:
        return all(result.outcome.acceptable for result in self.results)

    def build(self, run_id: str | None = None, timestamp: str | None = None) -> dict[str, object]:
        totals: dict[str, int] = {outcome.value: 0 for outcome in Outcome}
        for result in self.results:
            totals[result.outcome.value] += 1
        return {
            "run_id": run_id,
            "timestamp": timestamp,
            "interfaces_total": len(self.results),
            "totals": totals,
            "interfaces": [result.to_dict() for result in self.results],
        }

    def save(self, summary_dir: Path, run_id: str, timestamp: str, logger) -> Path:
        summary_dir.mkdir(parents=True, exist_ok=True)

        target = summary_dir / f"apply_{run_id}.json"
        target.write_text(
            json.dumps(self.build(run_id, timestamp), indent=2, ensure_ascii=False), encoding="utf-8"
        )

        logger.info("apply_summary_json_saved path=%s", target)
        return target
