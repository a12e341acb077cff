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
"""Shared fixtures for ifclattice tests.

Lattices used throughout:
    simple   Low ≤ High
    three    Public ≤ Internal ≤ Secret
    diamond  a, b ≤ c and a, b ≤ d, with c and d unrelated (no unique join)
    cyclic   x ≤ y ≤ z ≤ x
"""

from datetime import datetime, timezone

import pytest

from ifclattice.core.lattice import build_lattice, preset
from ifclattice.session import Session

FIXED_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def simple_lattice():
    return preset("simple")


@pytest.fixture
def three_lattice():
    return preset("three")


@pytest.fixture
def diamond_lattice():
    return build_lattice(
        ["a", "b", "c", "d"],
        [("a", "c"), ("b", "c"), ("a", "d"), ("b", "d")],
    )


@pytest.fixture
def cyclic_lattice():
    return build_lattice(["x", "y", "z"], [("x", "y"), ("y", "z"), ("z", "x")])


@pytest.fixture
def fixed_time():
    return FIXED_TIME


@pytest.fixture
def three_session():
    session = Session()
    session.load_preset("three")
    return session
