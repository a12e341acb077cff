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
"""Editing session: one state container for lattice, sources, sinks and flow.

A Session serializes every update. Each action builds a complete new
SessionState from the previous one and swaps it in whole; the previous
state is pushed onto a bounded history so undo() can restore it.

The history follows the checkpoint pattern: an append-only stack of
immutable snapshots, pruned from the oldest end, with pop-to-restore.

Example:
    >>> session = Session()
    >>> session.load_preset("simple")
    >>> src = session.create_source("high", "salary")
    >>> sink = session.add_sink("Console", "low")
    >>> edge = session.try_write("console", src.id)
    >>> edge.violation
    True
    >>> session.undo()
    True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, List, Optional, Tuple

from ..codegen.synthesizer import synthesize
from ..config import SessionConfig, SynthesisConfig
from ..core import lattice as store
from ..core.label import Label, LabelId, label_id_for, make_label
from ..core.lattice import Lattice, empty_lattice
from ..core.oracle import ExternalOracle
from ..core.order import would_create_cycle
from ..flow import compose
from ..flow.graph import FlowEdge, FlowGraph, Sink, Source, empty_graph
from ..flow.trace import DecisionLog

logger = logging.getLogger(__name__)


class SessionError(LookupError):
    """A session action referenced something that does not exist."""


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of a whole session.

    Attributes:
        lattice: Current lattice
        sources: Declared sources, in creation order
        sinks: Declared sinks, in creation order
        graph: Flow graph with recorded verdicts
        log: Decision traces, most recent first
    """

    lattice: Lattice = field(default_factory=empty_lattice)
    sources: Tuple[Source, ...] = ()
    sinks: Tuple[Sink, ...] = ()
    graph: FlowGraph = field(default_factory=empty_graph)
    log: DecisionLog = field(default_factory=DecisionLog)


class Session:
    """Single-writer container for an editing session.

    Attributes:
        config: Session configuration
        oracle: Optional external oracle, always cross-checked
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        oracle: Optional[ExternalOracle] = None,
    ):
        self.config = config or SessionConfig()
        self.oracle = oracle
        self._state = self._initial_state()
        self._history: List[SessionState] = []

    def _initial_state(self) -> SessionState:
        return SessionState(log=DecisionLog(max_entries=self.config.max_log_entries))

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def lattice(self) -> Lattice:
        return self._state.lattice

    @property
    def sources(self) -> Tuple[Source, ...]:
        return self._state.sources

    @property
    def sinks(self) -> Tuple[Sink, ...]:
        return self._state.sinks

    @property
    def graph(self) -> FlowGraph:
        return self._state.graph

    @property
    def log(self) -> DecisionLog:
        return self._state.log

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    @property
    def history_depth(self) -> int:
        return len(self._history)

    def sink(self, sink_id: str) -> Optional[Sink]:
        for sink in self._state.sinks:
            if sink.id == sink_id:
                return sink
        return None

    def _require_label(self, label_id: LabelId) -> Label:
        label = self._state.lattice.label(label_id)
        if label is None:
            raise SessionError(f"Unknown label {label_id!r}")
        return label

    def _require_sink(self, sink_id: str) -> Sink:
        sink = self.sink(sink_id)
        if sink is None:
            raise SessionError(f"Unknown sink {sink_id!r}")
        return sink

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def _commit(self, state: SessionState, trace: str = "") -> None:
        """Swap in a new state, remembering the current one for undo."""
        self._history.append(self._state)
        while len(self._history) > self.config.max_history:
            self._history.pop(0)
        self._state = replace(state, log=state.log.append(trace))

    def undo(self) -> bool:
        """Restore the state before the last action.

        Returns:
            False if there was nothing to undo
        """
        if not self._history:
            return False
        self._state = self._history.pop()
        return True

    # -------------------------------------------------------------------------
    # Lattice editing
    # -------------------------------------------------------------------------

    def add_label(self, name: str) -> Label:
        """Add a label by name.

        Raises:
            InvalidLabelNameError: If name is blank
        """
        label = make_label(name)
        lattice = store.add_label(self._state.lattice, label)
        if lattice is self._state.lattice:
            trace = f"Label {lattice.labels[label.id].name} already exists."
        else:
            trace = f"Added label {label.name}."
        self._commit(replace(self._state, lattice=lattice), trace)
        return self._state.lattice.labels[label.id]

    def add_relation(self, low: LabelId, high: LabelId) -> bool:
        """Record low ≤ high.

        With reject_cycles enabled a relation closing a cycle is refused.

        Returns:
            True if the relation is stored after the call

        Raises:
            SessionError: If either label is unknown
        """
        low_label = self._require_label(low)
        high_label = self._require_label(high)
        pair = f"{low_label.name} ≤ {high_label.name}"

        if self.config.reject_cycles and would_create_cycle(self._state.lattice, low, high):
            logger.warning(f"Rejected relation {low} ≤ {high}: it would create a cycle")
            self._commit(self._state, f"Rejected relation {pair}: it would create a cycle.")
            return False

        lattice = store.add_relation(self._state.lattice, low, high)
        if lattice is self._state.lattice:
            trace = f"Relation {pair} already holds." if low != high else ""
        else:
            trace = f"Added relation {pair}."
        self._commit(replace(self._state, lattice=lattice), trace)
        return lattice.has_relation(low, high)

    def load_lattice(self, lattice: Lattice, description: str = "custom lattice") -> None:
        """Replace the lattice wholesale; sources, sinks and flow are kept."""
        self._commit(replace(self._state, lattice=lattice), f"Loaded {description}.")

    def load_preset(self, name: str) -> None:
        """Replace the lattice with a named preset.

        Raises:
            SessionError: If no preset has that name
        """
        try:
            lattice = store.preset(name)
        except KeyError as e:
            raise SessionError(str(e)) from None
        description = store.PRESET_DESCRIPTIONS.get(name, name)
        self.load_lattice(lattice, f"preset {description}")

    def reset(self) -> None:
        """Clear lattice, sources, sinks, flow and log."""
        self._commit(self._initial_state())

    # -------------------------------------------------------------------------
    # Flow editing
    # -------------------------------------------------------------------------

    def create_source(self, label_id: LabelId, value: Any, source_id: Optional[str] = None) -> Source:
        """Declare a source and add its node to the flow.

        Raises:
            SessionError: If the label is unknown or the id is taken
        """
        label = self._require_label(label_id)
        taken = {s.id for s in self._state.sources}
        if source_id is None:
            counter = len(self._state.sources) + 1
            source_id = f"source-{counter}"
            while source_id in taken or self._state.graph.has_node(source_id):
                counter += 1
                source_id = f"source-{counter}"
        elif source_id in taken or self._state.graph.has_node(source_id):
            raise SessionError(f"Node id {source_id!r} is already in use")

        source = Source(id=source_id, value=value, label=label)
        graph, trace = compose.create_source(self._state.graph, source)
        self._commit(
            replace(self._state, sources=self._state.sources + (source,), graph=graph),
            trace,
        )
        return source

    def _commit_node(self, graph: FlowGraph, trace: str) -> Optional[str]:
        changed = graph is not self._state.graph
        self._commit(replace(self._state, graph=graph), trace)
        return graph.nodes[-1].id if changed else None

    def map(self, node_id: str, suffix: Optional[str] = None) -> Optional[str]:
        """Transform a node's value; the label is kept.

        Returns:
            Id of the new node, or None if node_id is not a value node
        """
        suffix = self.config.map_suffix if suffix is None else suffix
        graph, trace = compose.compose_map(
            self._state.graph, node_id, transform=lambda v: f"{v}{suffix}"
        )
        return self._commit_node(graph, trace)

    def combine(self, left_id: str, right_id: str) -> Optional[str]:
        """Combine two nodes under the join of their labels.

        Returns:
            Id of the new node, or None if either id is not a value node
        """
        graph, trace = compose.compose_combine(
            self._state.graph, self._state.lattice, left_id, right_id, oracle=self.oracle
        )
        return self._commit_node(graph, trace)

    def add_sink(self, name: str, label_id: LabelId, sink_id: Optional[str] = None) -> Sink:
        """Declare a sink. Its graph node appears on the first write.

        Raises:
            InvalidLabelNameError: If name is blank
            SessionError: If the label is unknown or the sink id is taken
        """
        label = self._require_label(label_id)
        name = make_label(name).name
        taken = {s.id for s in self._state.sinks}
        if sink_id is None:
            base = label_id_for(name)
            sink_id, counter = base, 2
            while sink_id in taken:
                sink_id = f"{base}-{counter}"
                counter += 1
        elif sink_id in taken:
            raise SessionError(f"Sink id {sink_id!r} is already in use")

        sink = Sink(id=sink_id, name=name, label=label)
        self._commit(
            replace(self._state, sinks=self._state.sinks + (sink,)),
            f'Created sink "{name}" with label {label.name}.',
        )
        return sink

    def remove_sink(self, sink_id: str) -> None:
        """Remove a sink and its node and writes from the flow.

        Raises:
            SessionError: If the sink is unknown
        """
        sink = self._require_sink(sink_id)
        graph, _ = compose.remove_sink(self._state.graph, sink_id)
        self._commit(
            replace(
                self._state,
                sinks=tuple(s for s in self._state.sinks if s.id != sink_id),
                graph=graph,
            ),
            f'Removed sink "{sink.name}".',
        )

    def try_write(self, sink_id: str, node_id: Optional[str] = None) -> Optional[FlowEdge]:
        """Attempt a write into a sink.

        Args:
            sink_id: Target sink
            node_id: Node to write from (defaults to the most recent value node)

        Returns:
            The recorded write edge, or None if node_id is not a value node

        Raises:
            SessionError: If the sink is unknown or the flow has no value node
        """
        sink = self._require_sink(sink_id)
        if node_id is None:
            current = self._state.graph.last_value_node()
            if current is None:
                raise SessionError("Nothing to write: the flow has no value node")
            node_id = current.id

        before = len(self._state.graph.edges)
        graph, trace = compose.try_write(
            self._state.graph, self._state.lattice, sink, node_id, oracle=self.oracle
        )
        self._commit(replace(self._state, graph=graph), trace)
        return graph.edges[-1] if len(graph.edges) > before else None

    def clear_flow(self) -> None:
        """Empty the flow graph; declared sources and sinks are kept."""
        graph, trace = compose.clear_flow()
        self._commit(replace(self._state, graph=graph), trace)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def synthesize(
        self,
        config: Optional[SynthesisConfig] = None,
        generated_at: Optional[datetime] = None,
    ) -> str:
        state = self._state
        return synthesize(
            state.lattice,
            state.sources,
            state.graph,
            state.sinks,
            config=config,
            generated_at=generated_at,
        )
