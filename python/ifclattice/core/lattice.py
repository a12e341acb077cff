# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Lattice store: a finite partial order over security labels.

A Lattice holds a mapping of labels and an ordered sequence of directed
relations. A relation (low, high) states low ≤ high directly; transitivity
is derived on demand by the order oracle (see order.py), never stored.

All updates are pure. add_label and add_relation return a new Lattice and
leave their input untouched, so a previous value can always be kept as a
snapshot:

    >>> lat = add_label(empty_lattice(), make_label("Low"))
    >>> lat = add_label(lat, make_label("High"))
    >>> lat = add_relation(lat, "low", "high")
    >>> lat.edges
    (Relation(low='low', high='high'),)

Invariants:
    - Relations reference only ids present in labels
    - No relation has low == high
    - No (low, high) pair is stored twice

Cycles are tolerated. The oracle stays correct in their presence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .label import Label, LabelId, make_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Relation:
    """A stored covering relation low ≤ high."""

    low: LabelId
    high: LabelId

    def __iter__(self):
        yield self.low
        yield self.high


@dataclass(frozen=True)
class Lattice:
    """Immutable label set plus stored ≤ relations.

    `labels` is a read-only view over a private copy of the mapping given
    at construction, so no two Lattice values share mutable state.

    Attributes:
        labels: Insertion-ordered, read-only mapping from label id to Label
        edges: Stored relations in insertion order
    """

    labels: Mapping[LabelId, Label] = field(default_factory=dict)
    edges: Tuple[Relation, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))
        object.__setattr__(self, "edges", tuple(self.edges))

    def __hash__(self) -> int:
        return hash((frozenset(self.labels.items()), self.edges))

    @property
    def label_ids(self) -> List[LabelId]:
        """Label ids in insertion order."""
        return list(self.labels)

    def has_label(self, label_id: LabelId) -> bool:
        return label_id in self.labels

    def label(self, label_id: LabelId) -> Optional[Label]:
        return self.labels.get(label_id)

    def has_relation(self, low: LabelId, high: LabelId) -> bool:
        """True if (low, high) is stored directly (not derived)."""
        return Relation(low, high) in self.edges

    def is_empty(self) -> bool:
        return not self.labels

    def __repr__(self) -> str:
        rels = ", ".join(f"{e.low}≤{e.high}" for e in self.edges)
        return f"Lattice(labels={self.label_ids}, edges=[{rels}])"


def empty_lattice() -> Lattice:
    """A lattice with no labels and no relations."""
    return Lattice()


def reset() -> Lattice:
    """Discard everything; equivalent to empty_lattice()."""
    return empty_lattice()


def add_label(lattice: Lattice, label: Label) -> Lattice:
    """Insert a label if its id is absent.

    Returns the input unchanged when the id already exists, or when given
    the UNRESOLVED marker.
    """
    if not label.resolved or label.id in lattice.labels:
        return lattice
    return Lattice(labels={**lattice.labels, label.id: label}, edges=lattice.edges)


def add_relation(lattice: Lattice, low: LabelId, high: LabelId) -> Lattice:
    """Record low ≤ high.

    No-op when low == high, when the pair is already stored, or when
    either id is not a label of the lattice. Cycle-introducing relations
    are accepted.
    """
    if low == high:
        return lattice
    if low not in lattice.labels or high not in lattice.labels:
        logger.debug("Ignoring relation %s ≤ %s: unknown label", low, high)
        return lattice
    relation = Relation(low, high)
    if relation in lattice.edges:
        return lattice
    return Lattice(labels=lattice.labels, edges=lattice.edges + (relation,))


def successors(lattice: Lattice) -> Dict[LabelId, List[LabelId]]:
    """Adjacency list of the stored relations (low -> [high, ...])."""
    graph: Dict[LabelId, List[LabelId]] = {label_id: [] for label_id in lattice.labels}
    for edge in lattice.edges:
        if edge.low in graph:
            graph[edge.low].append(edge.high)
    return graph


def predecessors(lattice: Lattice) -> Dict[LabelId, List[LabelId]]:
    """Reverse adjacency list (high -> [low, ...]) in edge order."""
    graph: Dict[LabelId, List[LabelId]] = {label_id: [] for label_id in lattice.labels}
    for edge in lattice.edges:
        if edge.high in graph:
            graph[edge.high].append(edge.low)
    return graph


def build_lattice(
    names: Iterable[str],
    relations: Iterable[Sequence[str]] = (),
) -> Lattice:
    """Build a lattice from label names and (low, high) name pairs.

    Relation endpoints may be given as names or ids.
    """
    lattice = empty_lattice()
    for name in names:
        lattice = add_label(lattice, make_label(name))
    for low, high in relations:
        lattice = add_relation(lattice, make_label(low).id, make_label(high).id)
    return lattice


# =============================================================================
# Presets
# =============================================================================


def _simple() -> Lattice:
    return build_lattice(["Low", "High"], [("Low", "High")])


def _three() -> Lattice:
    return build_lattice(
        ["Public", "Internal", "Secret"],
        [("Public", "Internal"), ("Internal", "Secret")],
    )


PRESETS: Dict[str, Callable[[], Lattice]] = {
    "simple": _simple,
    "three": _three,
}

PRESET_DESCRIPTIONS: Dict[str, str] = {
    "simple": "Low ≤ High",
    "three": "Public ≤ Internal ≤ Secret",
}


def preset_names() -> List[str]:
    return list(PRESETS)


def preset(name: str) -> Lattice:
    """Build a named preset lattice.

    Raises:
        KeyError: If no preset has that name
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise KeyError(
            f"Unknown preset {name!r}; available: {', '.join(preset_names())}"
        ) from None
    return factory()
