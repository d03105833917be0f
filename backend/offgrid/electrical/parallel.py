"""Parallel wire groups, derived on demand from the wire list.

Wires sharing the same unordered endpoint pair and the same polarity are
one logical run split across N conductors. Nothing is cached: wires come
and go between calls.
"""

from __future__ import annotations

from collections import defaultdict

from offgrid.schemas.design import Wire, WirePolarity

GroupKey = tuple[frozenset[str], WirePolarity]


def group_key(wire: Wire) -> GroupKey:
    return frozenset((wire.from_component_id, wire.to_component_id)), wire.polarity


def parallel_groups(wires: list[Wire]) -> dict[GroupKey, list[Wire]]:
    groups: dict[GroupKey, list[Wire]] = defaultdict(list)
    for wire in wires:
        groups[group_key(wire)].append(wire)
    return dict(groups)


def parallel_siblings(wire: Wire, wires: list[Wire]) -> list[Wire]:
    """All wires in ``wire``'s group, itself included."""
    key = group_key(wire)
    siblings = [w for w in wires if group_key(w) == key]
    return siblings or [wire]


def parallel_count(wire: Wire, wires: list[Wire]) -> int:
    return len(parallel_siblings(wire, wires))


def per_wire_share(total_current: float, count: int) -> float:
    return total_current / count if count > 0 else total_current
