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
"""Flow graph data model.

A flow graph records how labelled values were produced and where they were
written:

    source ──map──> map node ──combine──> combine node ──write──> sink
    source ─────────────────────combine──┘

Each edge carries the verdict reached when it was created. Verdicts are a
historical record: they are never recomputed, even if the lattice changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional, Tuple

from ..core.label import Label


class NodeKind(Enum):
    """Kind of a flow node.

    Attributes:
        SOURCE: Lattice-labelled leaf value
        MAP: Transformation of exactly one parent
        COMBINE: Combination of exactly two parents
        SINK: Write target, materialized on first write
    """

    SOURCE = "source"
    MAP = "map"
    COMBINE = "combine"
    SINK = "sink"

    def __str__(self) -> str:
        return self.value


class EdgeKind(Enum):
    MAP = "map"
    COMBINE = "combine"
    WRITE = "write"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class FlowNode:
    """A value-producing or value-consuming node.

    Attributes:
        id: Unique node id within the graph
        kind: Node kind
        label: Label of the value (UNRESOLVED when a join was undefined)
        title: Display title
        value: Opaque payload (None for sinks)
        violation: For sink nodes, the verdict of the write that created them
    """

    id: str
    kind: NodeKind
    label: Label
    title: str = ""
    value: Any = None
    violation: bool = False


@dataclass(frozen=True, slots=True)
class FlowEdge:
    """A directed edge between two flow nodes.

    Attributes:
        id: Unique edge id within the graph
        source: Id of the producing node
        target: Id of the consuming node
        kind: Edge kind
        violation: True if the flow was denied when the edge was created
    """

    id: str
    source: str
    target: str
    kind: EdgeKind
    violation: bool = False


@dataclass(frozen=True, slots=True)
class Source:
    """A labelled input value declared by the user."""

    id: str
    value: Any
    label: Label

    @property
    def title(self) -> str:
        return f"source({self.label.name})"


@dataclass(frozen=True, slots=True)
class Sink:
    """A named write target.

    A sink only becomes a graph node the first time a write targets it.
    """

    id: str
    name: str
    label: Label

    @property
    def node_id(self) -> str:
        return f"sink-{self.id}"

    @property
    def title(self) -> str:
        return f"sink({self.name})"


@dataclass(frozen=True)
class FlowGraph:
    """Immutable collection of flow nodes and edges in insertion order."""

    nodes: Tuple[FlowNode, ...] = ()
    edges: Tuple[FlowEdge, ...] = ()

    def node(self, node_id: str) -> Optional[FlowNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.node(node_id) is not None

    def has_edge(self, edge_id: str) -> bool:
        return any(e.id == edge_id for e in self.edges)

    def parents_of(self, node_id: str) -> List[str]:
        """Ids of nodes with an edge into node_id, in edge order."""
        return [e.source for e in self.edges if e.target == node_id]

    def write_edges(self) -> List[FlowEdge]:
        """Edges whose target is a sink node, in insertion order."""
        sink_ids = {n.id for n in self.nodes if n.kind is NodeKind.SINK}
        return [e for e in self.edges if e.target in sink_ids]

    def nodes_of_kind(self, *kinds: NodeKind) -> List[FlowNode]:
        return [n for n in self.nodes if n.kind in kinds]

    def last_value_node(self) -> Optional[FlowNode]:
        """Most recently added node that can be written from."""
        for node in reversed(self.nodes):
            if node.kind is not NodeKind.SINK:
                return node
        return None

    def with_node(self, node: FlowNode) -> FlowGraph:
        return replace(self, nodes=self.nodes + (node,))

    def with_edges(self, *edges: FlowEdge) -> FlowGraph:
        return replace(self, edges=self.edges + tuple(edges))

    def is_empty(self) -> bool:
        return not self.nodes


def empty_graph() -> FlowGraph:
    return FlowGraph()
