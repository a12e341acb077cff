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
"""Checked access to an optional external ordering oracle.

Some hosts ship their own IFC library with leq/join primitives. Those may
be consulted, but they are never trusted: every external answer is compared
against the core oracle in order.py, and the core answer wins. A failing
external oracle is logged and skipped.

Example:
    >>> oracle = CheckedOracle(lattice, external=MyLibraryOracle())
    >>> oracle.leq("public", "secret")
    True
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from . import order
from .label import LabelId
from .lattice import Lattice

logger = logging.getLogger(__name__)


class ExternalOracle(ABC):
    """Interface for a third-party ordering oracle.

    Implementations receive the lattice so they can answer for labels
    created at runtime, but may ignore it.
    """

    @abstractmethod
    def leq(self, lattice: Lattice, a: LabelId, b: LabelId) -> bool:
        raise NotImplementedError

    @abstractmethod
    def join(self, lattice: Lattice, a: LabelId, b: LabelId) -> Optional[LabelId]:
        raise NotImplementedError


class CheckedOracle:
    """Order oracle that validates an external oracle against the core.

    Attributes:
        lattice: The lattice queries are answered for
        external: Optional external oracle consulted first
        disagreements: Number of external answers overridden so far
    """

    def __init__(self, lattice: Lattice, external: Optional[ExternalOracle] = None):
        self.lattice = lattice
        self.external = external
        self.disagreements = 0

    def leq(self, a: LabelId, b: LabelId) -> bool:
        answer = order.leq(self.lattice, a, b)
        if self.external is not None:
            try:
                claimed = self.external.leq(self.lattice, a, b)
            except Exception as e:
                logger.warning(f"External oracle failed on leq({a}, {b}): {e}")
            else:
                self._check("leq", a, b, claimed, answer)
        return answer

    def join(self, a: LabelId, b: LabelId) -> Optional[LabelId]:
        answer = order.join(self.lattice, a, b)
        if self.external is not None:
            try:
                claimed = self.external.join(self.lattice, a, b)
            except Exception as e:
                logger.warning(f"External oracle failed on join({a}, {b}): {e}")
            else:
                self._check("join", a, b, claimed, answer)
        return answer

    def _check(self, op: str, a: LabelId, b: LabelId, claimed: object, answer: object) -> None:
        if claimed != answer:
            self.disagreements += 1
            logger.warning(
                f"External oracle disagrees on {op}({a}, {b}): "
                f"claimed {claimed!r}, using {answer!r}"
            )
