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
"""Command line interface for ifclattice.

Usage:
    ifclattice presets
    ifclattice query --preset three leq public secret
    ifclattice query --scenario flow.json join a b
    ifclattice synth --preset simple --no-banner
    ifclattice synth --scenario flow.json -o flow.ts
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import SynthesisConfig
from .core.lattice import PRESET_DESCRIPTIONS, preset_names
from .core.order import join, leq
from .session import ScenarioError, Session, SessionError, load_scenario_file

logger = logging.getLogger(__name__)


def _load_session(args: argparse.Namespace) -> Session:
    if args.scenario:
        return load_scenario_file(args.scenario)
    session = Session()
    session.load_preset(args.preset or "simple")
    return session


def _cmd_presets(args: argparse.Namespace) -> int:
    for name in preset_names():
        print(f"{name:10} {PRESET_DESCRIPTIONS.get(name, '')}")
    return 0


def _cmd_query(args: argparse.Namespace) -> int:
    lattice = _load_session(args).lattice
    for label_id in (args.a, args.b):
        if not lattice.has_label(label_id):
            print(f"warning: {label_id!r} is not a label of this lattice", file=sys.stderr)

    if args.op == "leq":
        result = leq(lattice, args.a, args.b)
        print(f"{args.a} ≤ {args.b}: {'yes' if result else 'no'}")
        return 0 if result else 1

    joined = join(lattice, args.a, args.b)
    if joined is None:
        print(f"join({args.a}, {args.b}): unresolved (no unique least upper bound)")
        return 1
    print(f"join({args.a}, {args.b}) = {joined}")
    return 0


def _cmd_synth(args: argparse.Namespace) -> int:
    session = _load_session(args)
    code = session.synthesize(SynthesisConfig(include_banner=not args.no_banner))
    if args.output:
        Path(args.output).write_text(code, encoding="utf-8")
        logger.info(f"Wrote {len(code)} characters to {args.output}")
    else:
        sys.stdout.write(code)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ifclattice",
        description="Security lattice queries and IFC code synthesis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    presets_parser = subparsers.add_parser("presets", help="List preset lattices")
    presets_parser.set_defaults(func=_cmd_presets)

    def add_input(sub: argparse.ArgumentParser) -> None:
        group = sub.add_mutually_exclusive_group()
        group.add_argument("--preset", choices=preset_names(), help="Preset lattice (default: simple)")
        group.add_argument("--scenario", help="JSON scenario file to replay")

    # query
    query_parser = subparsers.add_parser("query", help="Ask leq or join")
    add_input(query_parser)
    query_parser.add_argument("op", choices=["leq", "join"])
    query_parser.add_argument("a")
    query_parser.add_argument("b")
    query_parser.set_defaults(func=_cmd_query)

    # synth
    synth_parser = subparsers.add_parser("synth", help="Synthesize TypeScript")
    add_input(synth_parser)
    synth_parser.add_argument("--no-banner", action="store_true", help="Omit the timestamped banner")
    synth_parser.add_argument("-o", "--output", help="Write to a file instead of stdout")
    synth_parser.set_defaults(func=_cmd_synth)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (ScenarioError, SessionError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
