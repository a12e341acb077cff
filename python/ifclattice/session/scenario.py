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
"""Replay a scripted session from a JSON-compatible description.

Format:
    {
        "preset": "three",                       # optional
        "labels": ["Partner"],                   # optional, added after preset
        "relations": [["Public", "Partner"]],    # names or ids
        "sources": [{"id": "s1", "label": "Public", "value": "hello"}],
        "sinks": [{"name": "Console", "label": "Public"}],
        "actions": [
            {"op": "map", "node": "s1", "as": "m"},
            {"op": "combine", "left": "s1", "right": "m", "as": "c"},
            {"op": "write", "sink": "console", "node": "c"}
        ]
    }

"as" names the node an action creates so later actions can refer to it.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..config import SessionConfig
from ..core.label import InvalidLabelNameError, label_id_for
from ..core.oracle import ExternalOracle
from .state import Session, SessionError


class ScenarioError(ValueError):
    """The scenario description is malformed or references unknown items."""


def _ref(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ScenarioError(f"Expected a {what} name, got {value!r}")
    return label_id_for(value.strip())


def _sink_ref(session: Session, value: Any) -> str:
    if isinstance(value, str) and session.sink(value) is not None:
        return value
    return _ref(value, "sink")


def _apply_action(session: Session, action: Dict[str, Any], aliases: Dict[str, str]) -> None:
    op = action.get("op")

    def node(key: str) -> str:
        if key not in action:
            raise ScenarioError(f"Action {op!r} needs {key!r}")
        ref = str(action[key])
        return aliases.get(ref, ref)

    if op == "map":
        created = session.map(node("node"), action.get("suffix"))
    elif op == "combine":
        created = session.combine(node("left"), node("right"))
    elif op == "write":
        target = node("node") if "node" in action else None
        if session.try_write(_sink_ref(session, action.get("sink")), target) is None:
            raise ScenarioError(f"Action 'write' recorded no write: {session.log.latest}")
        return
    elif op == "remove_sink":
        session.remove_sink(_sink_ref(session, action.get("sink")))
        return
    elif op == "clear_flow":
        session.clear_flow()
        return
    else:
        raise ScenarioError(f"Unknown action {op!r}")

    if created is None:
        raise ScenarioError(f"Action {op!r} did not create a node: {session.log.latest}")
    if "as" in action:
        aliases[str(action["as"])] = created


def load_scenario(
    data: Dict[str, Any],
    config: Optional[SessionConfig] = None,
    oracle: Optional[ExternalOracle] = None,
) -> Session:
    """Build a session by replaying a scenario description.

    Raises:
        ScenarioError: If the description is malformed or inconsistent
    """
    if not isinstance(data, dict):
        raise ScenarioError("Scenario must be a JSON object")

    session = Session(config=config, oracle=oracle)
    aliases: Dict[str, str] = {}
    try:
        if "preset" in data:
            session.load_preset(str(data["preset"]))
        for name in data.get("labels", []):
            session.add_label(name)
        for pair in data.get("relations", []):
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise ScenarioError(f"Relation must be a [low, high] pair, got {pair!r}")
            session.add_relation(_ref(pair[0], "label"), _ref(pair[1], "label"))
        for entry in data.get("sources", []):
            session.create_source(
                _ref(entry.get("label"), "label"),
                entry.get("value", ""),
                source_id=entry.get("id"),
            )
        for entry in data.get("sinks", []):
            session.add_sink(
                str(entry.get("name", "")),
                _ref(entry.get("label"), "label"),
                sink_id=entry.get("id"),
            )
        for action in data.get("actions", []):
            _apply_action(session, action, aliases)
    except (SessionError, InvalidLabelNameError) as e:
        raise ScenarioError(str(e)) from e
    except AttributeError as e:
        raise ScenarioError(f"Malformed scenario entry: {e}") from e
    return session


def load_scenario_file(
    path: Union[str, Path],
    config: Optional[SessionConfig] = None,
    oracle: Optional[ExternalOracle] = None,
) -> Session:
    """Load and replay a scenario from a JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ScenarioError(f"Invalid JSON in {path}: {e}") from e
    return load_scenario(data, config=config, oracle=oracle)
