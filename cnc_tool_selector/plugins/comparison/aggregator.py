"""Ordered multi-tool comparison with best/worst ranking and savings projection."""
from __future__ import annotations

import itertools
import logging
import threading
from typing import Optional

from cnc_tool_selector.core.errors import ToolNotFoundError
from cnc_tool_selector.core.event_bus import EventBus
from cnc_tool_selector.core.models import SavingsSummary, ToolComparisonEntry, ToolIdentity
from cnc_tool_selector.plugins.milling.calculator import MillingCalculator, build_inputs

logger = logging.getLogger(__name__)

# metric -> True when a lower value is better
METRICS = {
    "total_cost_per_part": True,
    "tool_life_min": False,
    "mrr_mm3_min": False,
}


def display_name(identity: ToolIdentity, position: int) -> str:
    """Descriptive entry name, falling back to a positional ``Tool N`` label."""
    label = "Tool %d" % position
    brand = identity.display_brand
    if identity.name:
        return identity.name
    if identity.name_model:
        return "%s %s" % (brand, identity.name_model) if brand else identity.name_model
    if brand:
        return "%s %s" % (brand, label)
    if identity.part_name:
        return "%s - %s" % (identity.part_name, label)
    if identity.application_type:
        return "%s - %s" % (identity.application_type, label)
    return label


class FormMode:
    """Whether a form submission adds a new entry or edits an existing one."""

    ADDING = "adding"
    EDITING = "editing"

    def __init__(self, kind: str, tool_id: Optional[int] = None):
        if kind == self.EDITING and tool_id is None:
            raise ValueError("Editing mode needs a tool id")
        self.kind = kind
        self.tool_id = tool_id if kind == self.EDITING else None

    @classmethod
    def adding(cls) -> "FormMode":
        return cls(cls.ADDING)

    @classmethod
    def editing(cls, tool_id: int) -> "FormMode":
        return cls(cls.EDITING, tool_id)

    @property
    def is_editing(self) -> bool:
        return self.kind == self.EDITING

    def __eq__(self, other) -> bool:
        return isinstance(other, FormMode) and (self.kind, self.tool_id) == (other.kind, other.tool_id)

    def __repr__(self) -> str:
        if self.is_editing:
            return "FormMode.editing(%r)" % self.tool_id
        return "FormMode.adding()"


class ComparisonAggregator:
    def __init__(self, calculator: MillingCalculator, event_bus: Optional[EventBus] = None,
                 batches_per_year: int = 50):
        self._calculator = calculator
        self._event_bus = event_bus
        self._batches_per_year = batches_per_year
        self._entries: list = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _emit(self, event: str, data: dict) -> None:
        if self._event_bus:
            self._event_bus.emit(event, data)

    def _compute(self, inputs: dict) -> tuple:
        identity, cutting, cost, _ = build_inputs(inputs)
        life, cost_result, mrr = self._calculator.quick_cost(cutting, cost)
        return identity, cutting, cost, life, cost_result, mrr

    def _index_of(self, tool_id: int) -> int:
        for i, entry in enumerate(self._entries):
            if entry.id == tool_id:
                return i
        raise ToolNotFoundError(tool_id)

    def add(self, inputs: dict) -> ToolComparisonEntry:
        identity, cutting, cost, life, cost_result, mrr = self._compute(inputs)
        with self._lock:
            entry = ToolComparisonEntry(
                id=next(self._ids),
                name=display_name(identity, len(self._entries) + 1),
                identity=identity, cutting=cutting, cost_inputs=cost,
                tool_life_min=life, cost=cost_result, mrr_mm3_min=mrr,
            )
            self._entries.append(entry)
        logger.debug("Added comparison entry %d (%s)", entry.id, entry.name)
        self._emit("comparison.added", {"id": entry.id, "name": entry.name,
                                        "total_cost_per_part": entry.total_cost_per_part})
        return entry

    def add_many(self, inputs_list: list) -> list:
        """Add several set-ups at once.

        Every set-up is computed before any is stored, so a rejected one
        leaves the comparison unchanged.
        """
        computed = [self._compute(inputs) for inputs in inputs_list]
        added = []
        with self._lock:
            for identity, cutting, cost, life, cost_result, mrr in computed:
                added.append(ToolComparisonEntry(
                    id=next(self._ids),
                    name=display_name(identity, len(self._entries) + 1),
                    identity=identity, cutting=cutting, cost_inputs=cost,
                    tool_life_min=life, cost=cost_result, mrr_mm3_min=mrr,
                ))
                self._entries.append(added[-1])
        for entry in added:
            self._emit("comparison.added", {"id": entry.id, "name": entry.name,
                                            "total_cost_per_part": entry.total_cost_per_part})
        return added

    def update(self, tool_id: int, inputs: dict) -> ToolComparisonEntry:
        """Recompute an entry in place; id and position are kept."""
        identity, cutting, cost, life, cost_result, mrr = self._compute(inputs)
        with self._lock:
            index = self._index_of(tool_id)
            entry = ToolComparisonEntry(
                id=tool_id,
                name=display_name(identity, index + 1),
                identity=identity, cutting=cutting, cost_inputs=cost,
                tool_life_min=life, cost=cost_result, mrr_mm3_min=mrr,
            )
            self._entries[index] = entry
        self._emit("comparison.updated", {"id": entry.id, "name": entry.name,
                                          "total_cost_per_part": entry.total_cost_per_part})
        return entry

    def delete(self, tool_id: int) -> ToolComparisonEntry:
        with self._lock:
            removed = self._entries.pop(self._index_of(tool_id))
        self._emit("comparison.deleted", {"id": removed.id, "name": removed.name})
        return removed

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries = []
        self._emit("comparison.cleared", {"count": count})
        return count

    def submit(self, mode: FormMode, inputs: dict) -> ToolComparisonEntry:
        if mode.is_editing:
            return self.update(mode.tool_id, inputs)
        return self.add(inputs)

    def get(self, tool_id: int) -> ToolComparisonEntry:
        with self._lock:
            return self._entries[self._index_of(tool_id)]

    def entries(self) -> list:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def is_empty(self) -> bool:
        return len(self) == 0

    def _rank(self, metric: str, best: bool) -> Optional[ToolComparisonEntry]:
        if metric not in METRICS:
            raise ValueError("Unknown comparison metric '%s'" % metric)
        entries = self.entries()
        if not entries:
            return None
        pick_min = METRICS[metric] == best
        chooser = min if pick_min else max
        return chooser(entries, key=lambda e: getattr(e, metric))

    def best_by(self, metric: str = "total_cost_per_part") -> Optional[ToolComparisonEntry]:
        return self._rank(metric, best=True)

    def worst_by(self, metric: str = "total_cost_per_part") -> Optional[ToolComparisonEntry]:
        return self._rank(metric, best=False)

    def savings(self) -> Optional[SavingsSummary]:
        """Cheapest vs most expensive entry; None with fewer than two entries."""
        entries = self.entries()
        if len(entries) < 2:
            return None
        ranked = sorted(entries, key=lambda e: e.total_cost_per_part)
        best, worst = ranked[0], ranked[-1]
        difference = worst.total_cost_per_part - best.total_cost_per_part
        percent = (difference / worst.total_cost_per_part) * 100 if worst.total_cost_per_part else 0.0
        batch = entries[0].cost_inputs.batch_size or 1

        summary = SavingsSummary(
            best=best, worst=worst,
            cost_difference=difference,
            savings_percent=percent,
            batch_size=batch,
            savings_per_batch=difference * batch,
            savings_per_100_parts=difference * 100,
        )
        if batch > 1:
            summary.annual_parts_estimate = batch * self._batches_per_year
            summary.annual_savings = difference * summary.annual_parts_estimate
        return summary

    def efficiency_profile(self) -> list:
        """Tool life, cost and MRR per entry, each scaled 0-100 against the field."""
        entries = self.entries()
        if not entries:
            return []
        max_life = max(e.tool_life_min for e in entries)
        max_cost = max(e.total_cost_per_part for e in entries)
        max_mrr = max(e.mrr_mm3_min for e in entries)
        profile = []
        for e in entries:
            profile.append({
                "id": e.id,
                "name": e.name,
                "tool_life": (e.tool_life_min / max_life) * 100 if max_life else 0.0,
                "cost_efficiency": (1 - e.total_cost_per_part / max_cost) * 100 if max_cost else 0.0,
                "mrr": (e.mrr_mm3_min / max_mrr) * 100 if max_mrr else 0.0,
            })
        return profile
