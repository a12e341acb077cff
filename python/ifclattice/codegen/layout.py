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
"""Layering of a lattice for type-level encoding.

In the generated code each label becomes a union of principal literals, and
subtyping between unions encodes ≤. To declare the labels we need:

1. A topological order, so every label is declared after its predecessors.
   Kahn's algorithm with a min-heap breaks ties lexicographically. If the
   relations contain a cycle the order falls back to plain lexicographic.

2. Down-sets: for each label, itself plus the down-sets of its direct
   predecessors, listed in topological order.

3. A minimal generator expression per label: start from the predecessor
   with the largest down-set (maximum reuse) and fold in each down-set
   member it does not cover with one binary lub(...) each:

       Secret = lub(lub(Internal, Partner), "secret")

   Labels without predecessors start from their own literal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from heapq import heapify, heappop, heappush
from typing import Dict, List, Optional, Set, Tuple

from ..core.label import LabelId
from ..core.lattice import Lattice, predecessors, successors
from .identifiers import string_literal

logger = logging.getLogger(__name__)


def topological_order(lattice: Lattice) -> Tuple[List[LabelId], bool]:
    """Order labels so that every relation points forward.

    Returns:
        (order, acyclic). When a cycle prevents a complete order, order is
        the lexicographically sorted label ids and acyclic is False.
    """
    succ = successors(lattice)
    indegree: Dict[LabelId, int] = {label_id: 0 for label_id in lattice.labels}
    for targets in succ.values():
        for target in targets:
            indegree[target] += 1

    ready = [label_id for label_id, degree in indegree.items() if degree == 0]
    heapify(ready)
    order: List[LabelId] = []
    while ready:
        current = heappop(ready)
        order.append(current)
        for nxt in succ[current]:
            indegree[nxt] -= 1
            if indegree[nxt] == 0:
                heappush(ready, nxt)

    if len(order) != len(lattice.labels):
        logger.debug(
            "Cycle among labels (%d of %d ordered); using lexicographic order",
            len(order),
            len(lattice.labels),
        )
        return sorted(lattice.labels), False
    return order, True


def down_sets(
    order: List[LabelId],
    preds: Dict[LabelId, List[LabelId]],
) -> Dict[LabelId, List[LabelId]]:
    """Down-set of every label, members listed in topological order.

    Predecessors not yet visited (only possible in the cyclic fallback)
    contribute nothing.
    """
    index = {label_id: i for i, label_id in enumerate(order)}
    result: Dict[LabelId, List[LabelId]] = {}
    for label_id in order:
        members: Set[LabelId] = {label_id}
        for parent in preds.get(label_id, []):
            members.update(result.get(parent, ()))
        result[label_id] = sorted(members, key=lambda m: index.get(m, 0))
    return result


def base_predecessor(
    label_id: LabelId,
    preds: Dict[LabelId, List[LabelId]],
    downs: Dict[LabelId, List[LabelId]],
) -> Optional[LabelId]:
    """Predecessor with the largest down-set; the first one wins ties."""
    base: Optional[LabelId] = None
    base_size = -1
    for parent in preds.get(label_id, []):
        size = len(downs.get(parent, ()))
        if size > base_size:
            base, base_size = parent, size
    return base


def label_expression(
    label_id: LabelId,
    preds: Dict[LabelId, List[LabelId]],
    downs: Dict[LabelId, List[LabelId]],
    identifiers: Dict[LabelId, str],
) -> str:
    """Right-hand side declaring label_id as a left-associated lub chain."""
    base = base_predecessor(label_id, preds, downs)
    covered: Set[LabelId] = set()
    if base is not None:
        expression = identifiers[base]
        covered.update(downs.get(base, ()))
    else:
        expression = f"{string_literal(label_id)} as const"
        covered.add(label_id)

    for member in downs.get(label_id, [label_id]):
        if member in covered:
            continue
        term = string_literal(member) if member == label_id else identifiers[member]
        expression = f"lub({expression}, {term})"
        covered.add(member)

    if label_id not in covered:
        expression = f"lub({expression}, {string_literal(label_id)})"
    return expression


def first_unrelated_pair(
    order: List[LabelId],
    downs: Dict[LabelId, List[LabelId]],
) -> Optional[Tuple[LabelId, LabelId]]:
    """First (low, high) in topological order with low outside high's down-set.

    Returns None when no such pair exists (fewer than two labels).
    """
    for low in order:
        for high in order:
            if low == high:
                continue
            if low not in downs.get(high, ()):
                return low, high
    return None


@dataclass(frozen=True)
class LatticeLayout:
    """Everything the synthesizer needs to declare a lattice.

    Attributes:
        order: Label ids in declaration order
        acyclic: False when the order is the lexicographic fallback
        predecessors: Direct predecessors per label, in relation order
        down_sets: Down-set per label, in declaration order
    """

    order: List[LabelId]
    acyclic: bool
    predecessors: Dict[LabelId, List[LabelId]]
    down_sets: Dict[LabelId, List[LabelId]]

    @classmethod
    def of(cls, lattice: Lattice) -> LatticeLayout:
        order, acyclic = topological_order(lattice)
        preds = predecessors(lattice)
        return cls(
            order=order,
            acyclic=acyclic,
            predecessors=preds,
            down_sets=down_sets(order, preds),
        )

    def expression(self, label_id: LabelId, identifiers: Dict[LabelId, str]) -> str:
        return label_expression(label_id, self.predecessors, self.down_sets, identifiers)

    def unrelated_pair(self) -> Optional[Tuple[LabelId, LabelId]]:
        return first_unrelated_pair(self.order, self.down_sets)
