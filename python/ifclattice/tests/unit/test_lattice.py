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
"""Unit tests for the lattice store."""

import pytest

from ifclattice.core.label import UNRESOLVED, make_label
from ifclattice.core.lattice import (
    PRESETS,
    Lattice,
    Relation,
    add_label,
    add_relation,
    build_lattice,
    empty_lattice,
    predecessors,
    preset,
    preset_names,
    reset,
    successors,
)


# =============================================================================
# Labels
# =============================================================================


class TestAddLabel:
    """Tests for add_label."""

    def test_empty_lattice(self):
        lattice = empty_lattice()
        assert lattice.is_empty()
        assert lattice.labels == {}
        assert lattice.edges == ()

    def test_add_label(self):
        lattice = add_label(empty_lattice(), make_label("Low"))
        assert lattice.has_label("low")
        assert lattice.label("low").name == "Low"

    def test_add_label_does_not_modify_input(self):
        original = empty_lattice()
        add_label(original, make_label("Low"))
        assert original.is_empty()

    def test_add_existing_label_returns_same_object(self):
        """Adding an id that is already present is a no-op."""
        lattice = add_label(empty_lattice(), make_label("Low"))
        again = add_label(lattice, make_label("low"))
        assert again is lattice
        assert again.label("low").name == "Low"

    def test_unresolved_marker_rejected(self):
        lattice = empty_lattice()
        assert add_label(lattice, UNRESOLVED) is lattice

    def test_insertion_order_kept(self):
        lattice = build_lattice(["C", "A", "B"])
        assert lattice.label_ids == ["c", "a", "b"]


# =============================================================================
# Relations
# =============================================================================


class TestAddRelation:
    """Tests for add_relation."""

    def test_add_relation(self):
        lattice = build_lattice(["Low", "High"])
        lattice = add_relation(lattice, "low", "high")
        assert lattice.edges == (Relation("low", "high"),)
        assert lattice.has_relation("low", "high")
        assert not lattice.has_relation("high", "low")

    def test_self_relation_is_noop(self):
        lattice = build_lattice(["Low"])
        assert add_relation(lattice, "low", "low") is lattice

    def test_duplicate_relation_is_noop(self):
        lattice = build_lattice(["Low", "High"], [("Low", "High")])
        assert add_relation(lattice, "low", "high") is lattice
        assert len(lattice.edges) == 1

    def test_unknown_label_is_noop(self):
        lattice = build_lattice(["Low"])
        assert add_relation(lattice, "low", "missing") is lattice
        assert add_relation(lattice, "missing", "low") is lattice

    def test_cycles_are_accepted(self):
        lattice = build_lattice(["A", "B"], [("A", "B")])
        lattice = add_relation(lattice, "b", "a")
        assert lattice.edges == (Relation("a", "b"), Relation("b", "a"))

    def test_relation_unpacks(self):
        low, high = Relation("low", "high")
        assert (low, high) == ("low", "high")

    def test_adjacency(self, diamond_lattice):
        assert successors(diamond_lattice) == {
            "a": ["c", "d"],
            "b": ["c", "d"],
            "c": [],
            "d": [],
        }
        assert predecessors(diamond_lattice)["c"] == ["a", "b"]


# =============================================================================
# Presets
# =============================================================================


class TestPresets:
    """Tests for the preset lattices."""

    def test_preset_names(self):
        assert preset_names() == list(PRESETS)
        assert "simple" in preset_names()
        assert "three" in preset_names()

    def test_simple(self):
        lattice = preset("simple")
        assert lattice.label_ids == ["low", "high"]
        assert lattice.edges == (Relation("low", "high"),)

    def test_three(self):
        lattice = preset("three")
        assert lattice.label_ids == ["public", "internal", "secret"]
        assert lattice.edges == (
            Relation("public", "internal"),
            Relation("internal", "secret"),
        )

    def test_unknown_preset(self):
        with pytest.raises(KeyError, match="available"):
            preset("nonexistent")

    def test_presets_are_fresh_values(self):
        assert preset("three") == preset("three")

    def test_reset(self):
        assert reset() == Lattice()


# =============================================================================
# Immutability
# =============================================================================


class TestLatticeImmutability:
    """Lattice values share no mutable state."""

    def test_labels_are_read_only(self, simple_lattice):
        with pytest.raises(TypeError):
            simple_lattice.labels["ghost"] = make_label("Ghost")

    def test_derived_lattice_does_not_alias_input(self):
        """add_relation output cannot be used to reach the earlier value."""
        before = preset("simple")
        after = add_relation(before, "high", "low")
        with pytest.raises(TypeError):
            after.labels["ghost"] = make_label("Ghost")
        assert not before.has_label("ghost")
        assert not after.has_label("ghost")

    def test_constructor_copies_mapping(self):
        source = {"low": make_label("Low")}
        lattice = Lattice(labels=source)
        source["high"] = make_label("High")
        assert lattice.label_ids == ["low"]

    def test_hashable(self):
        assert hash(preset("simple")) == hash(preset("simple"))
        assert len({preset("simple"), preset("simple"), preset("three")}) == 2

    def test_equal_regardless_of_label_order(self):
        low, high = make_label("Low"), make_label("High")
        first = Lattice(labels={"low": low, "high": high})
        second = Lattice(labels={"high": high, "low": low})
        assert first == second
        assert hash(first) == hash(second)
