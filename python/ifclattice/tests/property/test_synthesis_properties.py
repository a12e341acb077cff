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
"""Property-based tests for code synthesis and write verdicts.

1. Determinism: identical inputs and timestamp give identical text
2. Every label is declared exactly once, after its predecessors
3. One accepted assertion per stored relation
4. A write verdict equals leq(value label, sink label) at write time
"""

from datetime import datetime, timezone

from hypothesis import given, settings, strategies as st

from ifclattice.codegen.identifiers import assign_identifiers
from ifclattice.codegen.synthesizer import render_lattice
from ifclattice.config import SynthesisConfig
from ifclattice.core.lattice import build_lattice
from ifclattice.core.order import leq
from ifclattice.flow.graph import NodeKind
from ifclattice.session import Session

NAMES = ["Public", "Internal", "Secret", "Partner", "Top Secret"]
FIXED_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


# =============================================================================
# Strategy Definitions
# =============================================================================


@st.composite
def dag_lattice_strategy(draw):
    """Generate an acyclic lattice over a prefix of NAMES."""
    size = draw(st.integers(min_value=1, max_value=len(NAMES)))
    names = NAMES[:size]
    index = st.integers(min_value=0, max_value=size - 1)
    pairs = draw(st.lists(st.tuples(index, index), max_size=8))
    relations = [(names[min(i, j)], names[max(i, j)]) for i, j in pairs if i != j]
    return build_lattice(names, relations)


@st.composite
def session_strategy(draw):
    """Replay a random sequence of flow actions on a random lattice."""
    session = Session()
    session.load_lattice(draw(dag_lattice_strategy()))
    label_ids = session.lattice.label_ids
    for _ in range(draw(st.integers(min_value=1, max_value=3))):
        session.create_source(draw(st.sampled_from(label_ids)), draw(st.text(max_size=5)))
    for i in range(draw(st.integers(min_value=0, max_value=2))):
        session.add_sink(f"Sink {i}", draw(st.sampled_from(label_ids)))

    actions = draw(st.lists(st.sampled_from(["map", "combine", "write"]), max_size=6))
    for action in actions:
        value_ids = [n.id for n in session.graph.nodes if n.kind is not NodeKind.SINK]
        if action == "map":
            session.map(draw(st.sampled_from(value_ids)))
        elif action == "combine":
            session.combine(draw(st.sampled_from(value_ids)), draw(st.sampled_from(value_ids)))
        elif session.sinks:
            sink = draw(st.sampled_from(session.sinks))
            session.try_write(sink.id, draw(st.sampled_from(value_ids)))
    return session


class TestSynthesisProperties:
    """Synthesized text is a stable function of the session."""

    @given(session=session_strategy())
    @settings(max_examples=50, deadline=None)
    def test_deterministic(self, session):
        first = session.synthesize(generated_at=FIXED_TIME)
        second = session.synthesize(generated_at=FIXED_TIME)
        assert first == second

    @given(session=session_strategy())
    @settings(max_examples=50, deadline=None)
    def test_banner_is_the_only_difference(self, session):
        with_banner = session.synthesize(generated_at=FIXED_TIME)
        without = session.synthesize(SynthesisConfig(include_banner=False))
        assert with_banner.endswith(without)

    @given(lattice=dag_lattice_strategy())
    def test_labels_declared_once_in_order(self, lattice):
        text = render_lattice(lattice)
        identifiers = assign_identifiers(lattice.labels.values())
        position = {}
        for label_id, ident in identifiers.items():
            declaration = f"const {ident} = "
            assert text.count(declaration) == 1
            position[label_id] = text.index(declaration)
        for edge in lattice.edges:
            assert position[edge.low] < position[edge.high]

    @given(lattice=dag_lattice_strategy())
    def test_one_assertion_per_relation(self, lattice):
        text = render_lattice(lattice)
        assert text.count("= true // ✅") == len(lattice.edges)
        assert text.count("const notOk") == (1 if len(lattice.labels) > 1 else 0)


class TestWriteVerdicts:
    """Recorded verdicts match the order at the time of the write."""

    @given(session=session_strategy())
    @settings(max_examples=50, deadline=None)
    def test_violation_iff_not_leq(self, session):
        graph = session.graph
        for edge in graph.write_edges():
            value = graph.node(edge.source).label
            sink = graph.node(edge.target).label
            expected_ok = value.resolved and leq(session.lattice, value.id, sink.id)
            assert edge.violation == (not expected_ok)
