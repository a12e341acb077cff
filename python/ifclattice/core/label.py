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
"""Security labels: the points of a user-defined lattice.

A label pairs a display name with a stable identifier. Identifiers are
derived from names by lowercasing and collapsing whitespace runs into a
single dash, so the same name always yields the same id:

    make_label("Top Secret")  ->  Label(id="top-secret", name="Top Secret")

The UNRESOLVED marker stands in for the label of data whose join has no
unique least upper bound. It is never part of a lattice.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

LabelId = str

_WHITESPACE = re.compile(r"\s+")


class InvalidLabelNameError(ValueError):
    """A label name was empty or whitespace-only."""

    def __init__(self, name: str):
        super().__init__(f"Invalid label name: {name!r}")
        self.name = name


@dataclass(frozen=True, slots=True)
class Label:
    """A named security classification.

    Attributes:
        id: Stable identifier, unique within a lattice
        name: Human readable name
        resolved: False only for the UNRESOLVED marker
    """

    id: LabelId
    name: str
    resolved: bool = True

    def __str__(self) -> str:
        return self.name


UNRESOLVED = Label(id="<unresolved>", name="unresolved", resolved=False)


def label_id_for(name: str) -> LabelId:
    """Derive the stable id for a label name."""
    return _WHITESPACE.sub("-", name.lower())


def is_valid_label_name(name: str) -> bool:
    """True if name can be turned into a label."""
    return bool(name and name.strip())


def make_label(name: str) -> Label:
    """Create a label from a raw name.

    Surrounding whitespace is stripped before the id is derived.

    Raises:
        InvalidLabelNameError: If the name is empty or whitespace-only
    """
    if not is_valid_label_name(name):
        raise InvalidLabelNameError(name)
    name = name.strip()
    return Label(id=label_id_for(name), name=name)
