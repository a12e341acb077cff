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
"""Synthesis of statically checked TypeScript from a lattice and a flow.

The output encodes the same lattice with type-level subtyping (ifc-ts
style: labels are unions of principal literals, LEQ<A, B> holds when A is
a subtype of B) and replays the flow graph with LIO combinators:

    banner          generation timestamp (optional, only varying part)
    lattice         one declaration per label, lub(...) chains
    assertions      one accepted LEQ per stored relation, plus one
                    rejected LEQ for the first unrelated pair
    sources         src(...) per source, in input order
    flow            input/bind chains per map and combine node
    sinks           snk(...) per sink, then one output per write edge,
                    annotated from the edge's stored verdict

The code documents the decisions already taken; nothing is re-checked
here. Write annotations come from FlowEdge.violation as recorded, and
combine steps narrate the join rather than recompute it.

Given identical inputs (and timestamp) the output is byte-identical.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..config import SynthesisConfig
from ..core.lattice import Lattice
from ..flow.graph import FlowGraph, NodeKind, Sink, Source
from .identifiers import assign_identifiers, string_literal
from .layout import LatticeLayout

logger = logging.getLogger(__name__)

_RUNTIME_IMPORTS = (
    "src", "snk", "input", "output", "label", "bind", "ret", "lub", "botLevel", "topLevel",
)
_TYPE_IMPORTS = ("LEQ", "Src", "Snk", "LIO", "Labeled", "Top", "Bot")

# Identifiers the generated code declares or imports besides label constants
_DECLARED_NAMES = frozenset(_RUNTIME_IMPORTS + _TYPE_IMPORTS + ("bottom", "top", "notOk"))


def _literal(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return json.dumps(str(value), ensure_ascii=False)


# =============================================================================
# Sections
# =============================================================================


def render_banner(config: SynthesisConfig, generated_at: datetime) -> str:
    runtime = ",\n".join(f"  {name}" for name in _RUNTIME_IMPORTS)
    return (
        "/**\n"
        f" * IFC-Safe Code Generated for {config.library}\n"
        f" * Generated on: {generated_at.isoformat()}\n"
        " *\n"
        " * This code shows how the flows you composed would be written\n"
        f" * with {config.library}, where information flow is checked at\n"
        " * compile time.\n"
        " */\n"
        "\n"
        "import {\n"
        f"{runtime}\n"
        f"}} from '{config.library}'\n"
        f"import type {{ {', '.join(_TYPE_IMPORTS)} }} from '{config.library}'\n"
        "\n"
    )


def render_lattice(lattice: Lattice) -> str:
    """Lattice and assertions sections."""
    if lattice.is_empty():
        return "// No labels defined in lattice\n"

    layout = LatticeLayout.of(lattice)
    identifiers = assign_identifiers(lattice.labels.values(), reserved=_DECLARED_NAMES)
    lines: List[str] = ["// LATTICE CONSTRUCTION___________________________________", ""]

    for label_id in layout.order:
        lines.append(f"const {identifiers[label_id]} = {layout.expression(label_id, identifiers)}")

    lines += [
        "",
        "const bottom = botLevel // never",
        "const top = topLevel   // string",
        "",
        "// Type-level subtyping checks --------------------------------",
        "",
    ]

    for index, edge in enumerate(lattice.edges, start=1):
        if edge.low not in identifiers or edge.high not in identifiers:
            continue
        lines.append(
            f"const ok{index}: LEQ<typeof {identifiers[edge.low]}, "
            f"typeof {identifiers[edge.high]}> = true // ✅ {edge.low} ⊑ {edge.high}"
        )

    pair = layout.unrelated_pair()
    if pair is not None:
        low, high = pair
        lines.append("// @ts-expect-error: forbidden flow detected at compile time")
        lines.append(
            f"const notOk: LEQ<typeof {identifiers[low]}, typeof {identifiers[high]}> = true"
            f" // ❌ {low} ⋢ {high}"
        )
    return "\n".join(lines) + "\n\n"


def render_sources(sources: Sequence[Source]) -> str:
    if not sources:
        return "// No sources created\n"

    chunks = [
        "// Source Definitions\n"
        "// Each source is created using the src() function\n\n"
    ]
    for index, source in enumerate(sources, start=1):
        label_id = string_literal(source.label.id)
        chunks.append(
            f'const source{index}: Src<{label_id}, string> = src(\n'
            f"  {label_id},\n"
            f"  () => {_literal(source.value)}\n"
            ")\n\n"
        )
    return "".join(chunks)


def render_flow(
    graph: FlowGraph,
    sources: Sequence[Source],
    config: SynthesisConfig,
    var_names: Dict[str, str],
) -> str:
    """Flow section; fills var_names with node id -> computation variable."""
    chunks = ["// Flow Computations\n// LIO monad operations: input, bind, ret, label\n\n"]
    counter = 1

    for index, source in enumerate(sources, start=1):
        if not graph.has_node(source.id):
            continue
        var = f"computation{counter}"
        counter += 1
        var_names[source.id] = var
        chunks.append(
            f"// Reading from {source.label.name} source\n"
            f"const {var}: LIO<Top, Bot, Labeled<{string_literal(source.label.id)}, string>> = "
            f"input(source{index})\n\n"
        )

    for node in graph.nodes_of_kind(NodeKind.MAP, NodeKind.COMBINE):
        var = f"computation{counter}"
        counter += 1
        var_names[node.id] = var
        parents = [var_names.get(p) for p in graph.parents_of(node.id)]

        if node.kind is NodeKind.MAP:
            if not parents or parents[0] is None:
                continue
            chunks.append(
                f"// Map transformation: {node.title}\n"
                f"const {var} = bind(\n"
                f"  {parents[0]},\n"
                "  (labeled) => {\n"
                "    const [l, v] = labeled\n"
                f"    const transformed = v + {_literal(config.map_suffix_note)}\n"
                "    return ret(label(l, transformed))\n"
                "  }\n"
                ")\n\n"
            )
            continue

        if len(parents) < 2 or parents[0] is None or parents[1] is None:
            continue
        if node.label.resolved:
            join_note = "      // Join the labels (at compile-time, this is LUB<L1, L2>)\n"
        else:
            join_note = (
                "      // Join the labels (at compile-time, this is LUB<L1, L2>)\n"
                "      // Unresolved: the lattice has no unique least upper bound here\n"
            )
        chunks.append(
            f"// Combine operation: {node.title}\n"
            f"const {var} = bind(\n"
            f"  {parents[0]},\n"
            "  (labeled1) => bind(\n"
            f"    {parents[1]},\n"
            "    (labeled2) => {\n"
            "      const [l1, v1] = labeled1\n"
            "      const [l2, v2] = labeled2\n"
            f"{join_note}"
            "      const joined = lub(l1, l2)\n"
            '      const combined = v1 + " + " + v2\n'
            "      return ret(label(joined, combined))\n"
            "    }\n"
            "  )\n"
            ")\n\n"
        )

    if counter == 1:
        chunks.append("// No flow computations created\n")
    return "".join(chunks)


def render_sinks(
    sinks: Sequence[Sink],
    graph: FlowGraph,
    var_names: Dict[str, str],
) -> str:
    if not sinks:
        return "// No sinks created\n"

    chunks = [
        "// Sink Definitions\n"
        "// Sinks define where data can be written (with label checks)\n\n"
    ]
    for index, sink in enumerate(sinks, start=1):
        label_id = string_literal(sink.label.id)
        chunks.append(
            f'const sink{index}: Snk<{label_id}, string> = snk(\n'
            f"  {label_id},\n"
            f"  (data) => console.log({_literal(f'[{sink.name}]:')}, data)\n"
            ")\n\n"
        )

    chunks.append(
        "// Output Operations\n"
        "// These operations attempt to write data to sinks\n"
        "// Type checking ensures label(data) ⊑ label(sink)\n\n"
    )

    writes = graph.write_edges()
    if not writes:
        chunks.append("// No write operations performed\n")
        return "".join(chunks)

    sink_index = {sink.node_id: i for i, sink in enumerate(sinks, start=1)}
    for index, edge in enumerate(writes, start=1):
        source_var = var_names.get(edge.source)
        target = sink_index.get(edge.target)
        if source_var is None or target is None:
            logger.debug("Skipping write %s: no declaration for its endpoints", edge.id)
            continue

        if edge.violation:
            chunks.append(
                "// ❌ This write would FAIL at compile-time (label mismatch)\n"
                "// The data label does not satisfy: DataLabel ⊑ SinkLabel\n"
                "// TypeScript will reject this at compile-time!\n"
                "// @ts-expect-error - Type error: Labeled<DataLabel, V> is not "
                "assignable to Labeled<SinkLabel, V>\n"
            )
        else:
            chunks.append(
                "// ✅ This write is allowed (label flows correctly)\n"
                "// The data label satisfies: DataLabel ⊑ SinkLabel\n"
            )
        chunks.append(
            f"const write{index} = bind(\n"
            f"  {source_var},\n"
            f"  output(sink{target})\n"
            ")\n\n"
        )
    return "".join(chunks)


# =============================================================================
# Entry point
# =============================================================================


def synthesize(
    lattice: Lattice,
    sources: Sequence[Source],
    graph: FlowGraph,
    sinks: Sequence[Sink],
    config: Optional[SynthesisConfig] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Produce the TypeScript artifact for a session.

    Args:
        lattice: Final lattice
        sources: Sources in declaration order
        graph: Flow graph with recorded verdicts
        sinks: Sinks in declaration order
        config: Output options (defaults to SynthesisConfig())
        generated_at: Banner timestamp (defaults to now, UTC)

    Returns:
        The generated source text
    """
    config = config or SynthesisConfig()
    parts: List[str] = []
    if config.include_banner:
        parts.append(render_banner(config, generated_at or datetime.now(timezone.utc)))

    var_names: Dict[str, str] = {}
    parts.append(render_lattice(lattice) + "\n")
    parts.append(render_sources(sources) + "\n")
    parts.append(render_flow(graph, sources, config, var_names) + "\n")
    parts.append(render_sinks(sinks, graph, var_names) + "\n")
    return "".join(parts)
