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
"""Flow graph construction with per-edge flow verdicts.

Every operation takes the current FlowGraph and returns a pair
(new_graph, trace), where trace is a human-readable account of the
decision. Inputs are never modified.

Labels propagate as follows:
    - map keeps its parent's label
    - combine takes the join of both parent labels, or UNRESOLVED when the
      join is undefined (never one parent's label)
    - a write is allowed iff value label ≤ sink label; an UNRESOLVED value
      label is always denied

Unknown node ids are not errors: the graph comes back unchanged and the
trace says why.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Tuple

from ..core.label import UNRESOLVED, Label
from ..core.lattice import Lattice
from ..core.oracle import CheckedOracle, ExternalOracle
from .graph import EdgeKind, FlowEdge, FlowGraph, FlowNode, NodeKind, Sink, Source, empty_graph

logger = logging.getLogger(__name__)

FlowUpdate = Tuple[FlowGraph, str]


def _fresh_id(base: str, taken: Callable[[str], bool]) -> str:
    candidate = base
    counter = 2
    while taken(candidate):
        candidate = f"{base}#{counter}"
        counter += 1
    return candidate


def _fresh_node_id(graph: FlowGraph, kind: NodeKind) -> str:
    return _fresh_id(f"{kind.value}-{len(graph.nodes) + 1}", graph.has_node)


def _value_node(graph: FlowGraph, node_id: str) -> Optional[FlowNode]:
    """A node that can feed a map, combine or write."""
    node = graph.node(node_id)
    if node is None or node.kind is NodeKind.SINK:
        return None
    return node


def create_source(graph: FlowGraph, source: Source) -> FlowUpdate:
    """Add a source node for a declared source."""
    if graph.has_node(source.id):
        return graph, f"Source {source.id} already exists."
    node = FlowNode(
        id=source.id,
        kind=NodeKind.SOURCE,
        label=source.label,
        title=source.title,
        value=source.value,
    )
    return (
        graph.with_node(node),
        f'Created source with value="{source.value}" and label {source.label.name}.',
    )


def compose_map(
    graph: FlowGraph,
    parent_id: str,
    transform: Optional[Callable[[Any], Any]] = None,
    node_id: Optional[str] = None,
) -> FlowUpdate:
    """Derive a node from one parent, keeping the parent's label.

    Args:
        graph: Current graph
        parent_id: Node to transform
        transform: Applied to the parent's value (identity if None)
        node_id: Id for the new node (generated if None)
    """
    parent = _value_node(graph, parent_id)
    if parent is None:
        return graph, f"Cannot map: no value node {parent_id!r}."

    node_id = node_id or _fresh_node_id(graph, NodeKind.MAP)
    if graph.has_node(node_id):
        return graph, f"Cannot map: node {node_id!r} already exists."

    value = transform(parent.value) if transform is not None else parent.value
    node = FlowNode(
        id=node_id,
        kind=NodeKind.MAP,
        label=parent.label,
        title=f"map ({parent.title})",
        value=value,
    )
    edge = FlowEdge(id=f"{node_id}-0", source=parent.id, target=node_id, kind=EdgeKind.MAP)
    return (
        graph.with_node(node).with_edges(edge),
        f"Mapped {parent.title} → new node label {parent.label.name}.",
    )


def compose_combine(
    graph: FlowGraph,
    lattice: Lattice,
    left_id: str,
    right_id: str,
    node_id: Optional[str] = None,
    oracle: Optional[ExternalOracle] = None,
) -> FlowUpdate:
    """Combine two nodes; the result is labelled with their join.

    When the join is undefined the node is labelled UNRESOLVED and the
    trace reports it.
    """
    left = _value_node(graph, left_id)
    right = _value_node(graph, right_id)
    if left is None or right is None:
        missing = left_id if left is None else right_id
        return graph, f"Cannot combine: no value node {missing!r}."

    node_id = node_id or _fresh_node_id(graph, NodeKind.COMBINE)
    if graph.has_node(node_id):
        return graph, f"Cannot combine: node {node_id!r} already exists."

    label = _join_labels(lattice, left.label, right.label, oracle)
    node = FlowNode(
        id=node_id,
        kind=NodeKind.COMBINE,
        label=label,
        title=f"combine ({left.title}, {right.title})",
        value=f"{left.value} + {right.value}",
    )
    edges = (
        FlowEdge(id=f"{node_id}-0", source=left.id, target=node_id, kind=EdgeKind.COMBINE),
        FlowEdge(id=f"{node_id}-1", source=right.id, target=node_id, kind=EdgeKind.COMBINE),
    )

    pair = f"join({left.label.name}, {right.label.name})"
    if label.resolved:
        trace = f"Combined {left.title} and {right.title} → {pair} = {label.name}."
    else:
        trace = (
            f"Combined {left.title} and {right.title} → {pair} is unresolved: "
            "no unique least upper bound."
        )
    return graph.with_node(node).with_edges(*edges), trace


def _join_labels(
    lattice: Lattice,
    left: Label,
    right: Label,
    external: Optional[ExternalOracle],
) -> Label:
    if not left.resolved or not right.resolved:
        return UNRESOLVED
    joined = CheckedOracle(lattice, external).join(left.id, right.id)
    if joined is None:
        logger.debug("join(%s, %s) undefined", left.id, right.id)
        return UNRESOLVED
    return lattice.label(joined) or UNRESOLVED


def try_write(
    graph: FlowGraph,
    lattice: Lattice,
    sink: Sink,
    node_id: str,
    oracle: Optional[ExternalOracle] = None,
) -> FlowUpdate:
    """Attempt to write a node's value into a sink.

    The verdict is ok = leq(value label, sink label). The sink node is
    materialized on first use and reused afterwards. A write edge with
    violation = not ok is always appended, so denied writes stay visible.
    """
    node = _value_node(graph, node_id)
    if node is None:
        return graph, f"Cannot write to {sink.name}: no value node {node_id!r}."

    if node.label.resolved:
        ok = CheckedOracle(lattice, oracle).leq(node.label.id, sink.label.id)
    else:
        ok = False
    logger.debug("write %s (%s) -> %s (%s): %s",
                 node.id, node.label.id, sink.id, sink.label.id, "ok" if ok else "denied")

    if not graph.has_node(sink.node_id):
        graph = graph.with_node(
            FlowNode(
                id=sink.node_id,
                kind=NodeKind.SINK,
                label=sink.label,
                title=sink.title,
                violation=not ok,
            )
        )

    edge_id = _fresh_id(f"{node.id}->{sink.node_id}", graph.has_edge)
    edge = FlowEdge(
        id=edge_id,
        source=node.id,
        target=sink.node_id,
        kind=EdgeKind.WRITE,
        violation=not ok,
    )

    if ok:
        trace = (
            f"Allowed: value label = {node.label.name} ≤ sink label = "
            f"{sink.label.name}. Flow permitted."
        )
    elif not node.label.resolved:
        trace = (
            f"Rejected: value label is unresolved (no unique least upper bound), "
            f"so it cannot be shown ⊑ {sink.label.name} → flow blocked."
        )
    else:
        trace = f"Rejected: {node.label.name} ⊑ {sink.label.name} is false → flow blocked."
    return graph.with_edges(edge), trace


def remove_sink(graph: FlowGraph, sink_id: str) -> FlowUpdate:
    """Drop a sink's node and every edge touching it."""
    target = f"sink-{sink_id}"
    if not graph.has_node(target):
        return graph, f"Sink {sink_id} has no node in the flow."
    return (
        FlowGraph(
            nodes=tuple(n for n in graph.nodes if n.id != target),
            edges=tuple(e for e in graph.edges if target not in (e.source, e.target)),
        ),
        f"Removed sink node {target}.",
    )


def clear_flow() -> FlowUpdate:
    return empty_graph(), "Cleared the flow graph."
