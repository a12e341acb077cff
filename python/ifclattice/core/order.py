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
"""Order oracle: reachability ordering and least upper bounds.

The stored relations of a Lattice are a covering relation, not a closed
order. This module derives the order from them:

    leq(L, a, b)   a ≤ b   iff  a == b, or b is reachable from a
    join(L, a, b)  a ⊔ b   the unique minimal common upper bound, if any

Required Properties (checked by property-based tests):
    leq(L, a, a)                                        (reflexivity)
    leq(L, a, b) ∧ leq(L, b, c) ⟹ leq(L, a, c)         (transitivity)
    j = join(L, a, b) ⟹ leq(L, a, j) ∧ leq(L, b, j)    (upper bound)
    no common upper bound u has u < join(L, a, b)       (minimality)

join deliberately refuses to pick an arbitrary bound when the poset is not
a lattice at that point: it returns None, and callers surface that as an
unresolved outcome rather than an error.

Queries rebuild the adjacency list each time. Lattices are small (tens of
labels), so each query is O(V + E) with no index to maintain.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Optional, Set

from .label import LabelId
from .lattice import Lattice, successors


def leq(lattice: Lattice, a: LabelId, b: LabelId) -> bool:
    """Check a ≤ b by breadth-first search over stored relations.

    Terminates on cyclic relation sets. Unknown ids are only related to
    themselves.
    """
    if a == b:
        return True
    graph = successors(lattice)
    if a not in graph or b not in graph:
        return False

    queue = deque([a])
    seen: Set[LabelId] = {a}
    while queue:
        current = queue.popleft()
        for nxt in graph[current]:
            if nxt == b:
                return True
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return False


def strictly_below(lattice: Lattice, a: LabelId, b: LabelId) -> bool:
    """a < b: a ≤ b and not b ≤ a."""
    return leq(lattice, a, b) and not leq(lattice, b, a)


def comparable(lattice: Lattice, a: LabelId, b: LabelId) -> bool:
    return leq(lattice, a, b) or leq(lattice, b, a)


def upper_bounds(lattice: Lattice, a: LabelId, b: LabelId) -> List[LabelId]:
    """All labels u with a ≤ u and b ≤ u, in lattice insertion order."""
    return [
        u for u in lattice.labels if leq(lattice, a, u) and leq(lattice, b, u)
    ]


def minimal_elements(lattice: Lattice, candidates: Iterable[LabelId]) -> List[LabelId]:
    """Candidates with no strictly smaller candidate.

    Members of a cycle are mutually ≤ and therefore never strictly smaller
    than each other, so they all survive together.
    """
    pool = list(candidates)
    return [
        u
        for u in pool
        if not any(v != u and strictly_below(lattice, v, u) for v in pool)
    ]


def join(lattice: Lattice, a: LabelId, b: LabelId) -> Optional[LabelId]:
    """Least upper bound of a and b.

    Returns:
        The unique minimal common upper bound, or None when there is no
        common upper bound or more than one minimal one
    """
    minimal = minimal_elements(lattice, upper_bounds(lattice, a, b))
    if len(minimal) == 1:
        return minimal[0]
    return None


def would_create_cycle(lattice: Lattice, low: LabelId, high: LabelId) -> bool:
    """True if storing low ≤ high would close a cycle.

    That is the case when high ≤ low already holds between two distinct,
    known labels.
    """
    if low == high or not lattice.has_label(low) or not lattice.has_label(high):
        return False
    return leq(lattice, high, low)
