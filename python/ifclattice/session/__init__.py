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
"""Editing sessions with undo, and scripted scenario replay."""

from .state import Session, SessionError, SessionState
from .scenario import ScenarioError, load_scenario, load_scenario_file

__all__ = [
    "Session",
    "SessionError",
    "SessionState",
    "ScenarioError",
    "load_scenario",
    "load_scenario_file",
]
