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
"""Flow graphs of labelled values and the verdicts on their writes.

Key components:
- FlowGraph, FlowNode, FlowEdge: immutable graph model
- Source, Sink: user-declared inputs and write targets
- create_source / compose_map / compose_combine / try_write: graph updates
- DecisionLog: bounded log of decision traces
"""

from .graph import (
    EdgeKind,
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodeKind,
    Sink,
    Source,
    empty_graph,
)
from .compose import (
    FlowUpdate,
    clear_flow,
    compose_combine,
    compose_map,
    create_source,
    remove_sink,
    try_write,
)
from .trace import DEFAULT_MAX_ENTRIES, DecisionLog


__all__ = [
    # Model
    "EdgeKind",
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "NodeKind",
    "Sink",
    "Source",
    "empty_graph",
    # Operations
    "FlowUpdate",
    "clear_flow",
    "compose_combine",
    "compose_map",
    "create_source",
    "remove_sink",
    "try_write",
    # Log
    "DEFAULT_MAX_ENTRIES",
    "DecisionLog",
]
