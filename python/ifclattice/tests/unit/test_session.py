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
"""Unit tests for editing sessions."""

import logging

import pytest

from ifclattice.config import SessionConfig
from ifclattice.core.label import InvalidLabelNameError, make_label
from ifclattice.core.lattice import preset
from ifclattice.core.oracle import ExternalOracle
from ifclattice.flow.graph import NodeKind
from ifclattice.session import Session, SessionError


class TestLatticeEditing:
    """Tests for label and relation editing."""

    def test_starts_empty(self):
        session = Session()
        assert session.lattice.is_empty()
        assert session.graph.is_empty()
        assert not session.can_undo

    def test_add_label_and_relation(self):
        session = Session()
        session.add_label("Low")
        session.add_label("High")
        assert session.add_relation("low", "high")
        assert session.lattice.has_relation("low", "high")
        assert session.log.latest == "Added relation Low ≤ High."

    def test_add_existing_label(self):
        session = Session()
        first = session.add_label("Top Secret")
        second = session.add_label("top   secret")
        assert second is first
        assert session.log.latest == "Label Top Secret already exists."

    def test_blank_label(self):
        with pytest.raises(InvalidLabelNameError):
            Session().add_label("  ")

    def test_relation_with_unknown_label(self, three_session):
        with pytest.raises(SessionError):
            three_session.add_relation("public", "missing")

    def test_cycles_tolerated_by_default(self, three_session):
        assert three_session.add_relation("secret", "public")
        assert three_session.lattice.has_relation("secret", "public")

    def test_reject_cycles(self, caplog):
        session = Session(SessionConfig(reject_cycles=True))
        session.load_preset("three")
        with caplog.at_level(logging.WARNING, logger="ifclattice.session.state"):
            assert not session.add_relation("secret", "public")
        assert not session.lattice.has_relation("secret", "public")
        assert "would create a cycle" in caplog.text
        assert "would create a cycle" in session.log.latest

    def test_load_preset(self, three_session):
        assert three_session.lattice == preset("three")
        assert three_session.log.latest == "Loaded preset Public ≤ Internal ≤ Secret."

    def test_unknown_preset(self):
        with pytest.raises(SessionError):
            Session().load_preset("nonexistent")

    def test_reset(self, three_session):
        three_session.create_source("public", "x")
        three_session.reset()
        assert three_session.lattice.is_empty()
        assert three_session.sources == ()
        assert len(three_session.log) == 0


class TestFlowEditing:
    """Tests for sources, sinks and writes through a session."""

    def test_source_ids(self, three_session):
        first = three_session.create_source("public", "a")
        second = three_session.create_source("secret", "b")
        assert (first.id, second.id) == ("source-1", "source-2")
        assert three_session.graph.node("source-2").label.id == "secret"

    def test_explicit_source_id_taken(self, three_session):
        three_session.create_source("public", "a", source_id="s")
        with pytest.raises(SessionError):
            three_session.create_source("public", "b", source_id="s")

    def test_source_with_unknown_label(self, three_session):
        with pytest.raises(SessionError):
            three_session.create_source("missing", "a")

    def test_map_appends_suffix(self, three_session):
        source = three_session.create_source("internal", "msg")
        node_id = three_session.map(source.id)
        node = three_session.graph.node(node_id)
        assert node.value == "msg!"
        assert node.label.id == "internal"

    def test_map_unknown_node(self, three_session):
        assert three_session.map("missing") is None
        assert three_session.log.latest.startswith("Cannot map")

    def test_combine_takes_join(self, three_session):
        a = three_session.create_source("public", "a")
        b = three_session.create_source("internal", "b")
        node_id = three_session.combine(a.id, b.id)
        assert three_session.graph.node(node_id).label.id == "internal"

    def test_sink_ids_are_unique(self, three_session):
        first = three_session.add_sink("Audit Log", "secret")
        second = three_session.add_sink("Audit Log", "internal")
        assert (first.id, second.id) == ("audit-log", "audit-log-2")
        assert three_session.sink("audit-log-2").label.id == "internal"

    def test_write_defaults_to_latest_node(self, three_session):
        """Without a node id the most recent value node is written."""
        source = three_session.create_source("secret", "x")
        three_session.add_sink("Console", "public")
        mapped = three_session.map(source.id)
        edge = three_session.try_write("console")
        assert edge.source == mapped
        assert edge.violation
        assert three_session.log.latest.startswith("Rejected")

    def test_second_write_reuses_sink_node(self, three_session):
        three_session.create_source("public", "x")
        three_session.add_sink("Console", "public")
        three_session.try_write("console")
        edge = three_session.try_write("console")
        assert not edge.violation
        assert len(three_session.graph.nodes_of_kind(NodeKind.SINK)) == 1

    def test_write_to_unknown_sink(self, three_session):
        three_session.create_source("public", "x")
        with pytest.raises(SessionError):
            three_session.try_write("nowhere")

    def test_write_with_empty_flow(self, three_session):
        three_session.add_sink("Console", "public")
        with pytest.raises(SessionError):
            three_session.try_write("console")

    def test_write_from_unknown_node(self, three_session):
        three_session.add_sink("Console", "public")
        assert three_session.try_write("console", "missing") is None

    def test_remove_sink(self, three_session):
        three_session.create_source("public", "x")
        three_session.add_sink("Console", "public")
        three_session.try_write("console")
        three_session.remove_sink("console")
        assert three_session.sinks == ()
        assert three_session.graph.write_edges() == []
        with pytest.raises(SessionError):
            three_session.remove_sink("console")

    def test_clear_flow_keeps_declarations(self, three_session):
        three_session.create_source("public", "x")
        three_session.add_sink("Console", "public")
        three_session.clear_flow()
        assert three_session.graph.is_empty()
        assert len(three_session.sources) == 1
        assert len(three_session.sinks) == 1


class TestHistory:
    """Tests for undo and bounded state."""

    def test_undo_restores_previous_state(self, three_session):
        before = three_session.state
        three_session.create_source("public", "x")
        assert three_session.undo()
        assert three_session.state is before

    def test_undo_everything(self):
        session = Session()
        session.add_label("Low")
        assert session.undo()
        assert session.lattice.is_empty()
        assert not session.undo()

    def test_history_is_bounded(self):
        session = Session(SessionConfig(max_history=3))
        for name in ["a", "b", "c", "d", "e"]:
            session.add_label(name)
        assert session.history_depth == 3
        while session.undo():
            pass
        assert session.lattice.label_ids == ["a", "b"]

    def test_log_is_bounded(self):
        session = Session(SessionConfig(max_log_entries=2))
        for name in ["a", "b", "c"]:
            session.add_label(name)
        assert list(session.log) == ["Added label c.", "Added label b."]

    def test_snapshots_are_immutable(self, three_session):
        snapshot = three_session.state
        three_session.add_label("Partner")
        assert not snapshot.lattice.has_label("partner")

    def test_undo_snapshot_cannot_be_written_through(self, three_session):
        """The current lattice offers no way to reach a stored snapshot."""
        three_session.add_relation("public", "secret")
        with pytest.raises(TypeError):
            three_session.lattice.labels["ghost"] = make_label("Ghost")
        assert three_session.undo()
        assert three_session.lattice.label_ids == ["public", "internal", "secret"]

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_log_entries": 0}, {"max_history": 0}, {"max_history": -1}],
    )
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            SessionConfig(**kwargs)


class PermissiveOracle(ExternalOracle):
    """Claims every flow is allowed and every join is the first label."""

    def leq(self, lattice, a, b):
        return True

    def join(self, lattice, a, b):
        return a


class TestExternalOracle:
    """An injected oracle never overrides the core verdict."""

    def test_write_verdict_uses_core_answer(self, caplog):
        session = Session(oracle=PermissiveOracle())
        session.load_preset("simple")
        source = session.create_source("high", "salary")
        session.add_sink("Console", "low")
        with caplog.at_level(logging.WARNING, logger="ifclattice.core.oracle"):
            edge = session.try_write("console", source.id)
        assert edge.violation
        assert session.graph.node("sink-console").violation
        assert "disagrees on leq(high, low)" in caplog.text

    def test_combine_label_uses_core_join(self):
        session = Session(oracle=PermissiveOracle())
        session.load_preset("three")
        public = session.create_source("public", "a")
        secret = session.create_source("secret", "b")
        node_id = session.combine(public.id, secret.id)
        assert session.graph.node(node_id).label.id == "secret"
