"""
Command-line front end.

Usage:
    bn-enum <structure.txt> <cpts.txt> [COMMANDS...] [options]

Commands (each one a single argument, quote them in the shell):
    MOSTRAR:ESTRUCT                 print the structure in topological order
    MOSTRAR:CPTS                    print every CPT
    CONSULTAR: Var | A=a,B=b        posterior of Var given the evidence
    CONSULTAR_TRACE: Var | A=a      same, with a step-by-step enumeration trace

Example:
    bn-enum structure.txt cpts.txt "CONSULTAR: Rain | WetGrass=true"

Exit codes: 1 usage error, 2 the network could not be loaded, 0 otherwise. Errors
in individual commands are reported on stderr and do not stop later commands.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from .config import CPT_STYLES, EngineConfig, load_config
from .errors import BayesNetError
from .inference_discrete import Distribution, InferenceEngine
from .network import BayesianNetwork
from .parsers import load_network, parse_evidence, parse_query
from .printing import format_cpts, format_query_result, format_structure

QUERY_PREFIX = "CONSULTAR:"
TRACE_PREFIX = "CONSULTAR_TRACE:"

COMMANDS_HELP = (
    "Commands:\n"
    "  MOSTRAR:ESTRUCT\n"
    "  MOSTRAR:CPTS\n"
    "  CONSULTAR: Var | evidence   (e.g. CONSULTAR: Rain | WetGrass=true)\n"
    "  CONSULTAR_TRACE: Var | evidence\n"
)


class _UsageParser(argparse.ArgumentParser):
    def error(self, message: str):
        self.print_usage(sys.stderr)
        sys.stderr.write(f"{self.prog}: error: {message}\n\n{COMMANDS_HELP}")
        raise SystemExit(1)


def create_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="bn-enum",
        description="Exact inference by enumeration on a discrete Bayesian network",
        epilog=COMMANDS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("structure", type=Path, help="Structure file (one 'parent -> child' per line)")
    parser.add_argument("cpts", type=Path, help="CPT file (NODE/VALUES/PARENTS/TABLE/END blocks)")
    parser.add_argument("commands", nargs="*", help="Commands to run in order")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with engine settings")
    parser.add_argument("--strict", action="store_true", default=None, help="Reject CPT rows that do not sum to 1")
    parser.add_argument("--precision", type=int, default=None, help="Decimals printed for probabilities")
    parser.add_argument("--cpt-style", choices=CPT_STYLES, default=None, help="How MOSTRAR:CPTS renders tables")
    parser.add_argument("--verbose", action="store_true", default=None, help="Print loading progress")
    parser.add_argument("--draw", type=Path, default=None, help="Save a drawing of the network to this image file")
    parser.add_argument("--csv", type=Path, default=None, help="Write all query results to this CSV file")
    return parser


class CommandRunner:
    """Runs commands against one loaded network, reusing a single engine."""

    def __init__(self, network: BayesianNetwork, config: EngineConfig):
        self.network = network
        self.config = config
        self._engine: Optional[InferenceEngine] = None
        self.results: List[Tuple[str, dict, Distribution]] = []

    @property
    def engine(self) -> InferenceEngine:
        if self._engine is None:
            self._engine = InferenceEngine(self.network)
        return self._engine

    def run(self, cmd: str) -> bool:
        """Run one command; return False if it failed or was not recognised."""
        if cmd.startswith("MOSTRAR:ESTRUCT"):
            return self._show(lambda: format_structure(self.network))
        if cmd.startswith("MOSTRAR:CPTS"):
            return self._show(lambda: format_cpts(self.network, style=self.config.cpt_style))
        if cmd.startswith(TRACE_PREFIX):
            return self.query(cmd[len(TRACE_PREFIX):], trace=True)
        if cmd.startswith(QUERY_PREFIX):
            return self.query(cmd[len(QUERY_PREFIX):], trace=False)
        print(f"Unknown command: {cmd}", file=sys.stderr)
        return False

    def _show(self, render) -> bool:
        try:
            print(render())
        except BayesNetError as e:
            print(f"Error in MOSTRAR: {e}", file=sys.stderr)
            return False
        return True

    def query(self, text: str, trace: bool = False) -> bool:
        var, evs = parse_query(text)
        evidence = parse_evidence(evs)
        try:
            dist = self.engine.query(var, evidence, trace=sys.stdout if trace else None)
        except BayesNetError as e:
            print(f"Error in CONSULTAR: {e}", file=sys.stderr)
            return False
        print(format_query_result(var, evidence, dist, self.config.precision))
        self.results.append((var, evidence, dist))
        return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config).updated(
            strict=args.strict,
            precision=args.precision,
            cpt_style=args.cpt_style,
            verbose=args.verbose,
        )
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error in config: {e}", file=sys.stderr)
        return 1

    try:
        network = load_network(
            args.structure,
            args.cpts,
            strict=config.strict,
            row_sum_tolerance=config.row_sum_tolerance,
            verbose=config.verbose,
        )
    except BayesNetError as e:
        print(f"Error loading network: {e}", file=sys.stderr)
        return 2

    runner = CommandRunner(network, config)
    for cmd in args.commands:
        runner.run(cmd)

    if args.draw is not None:
        from .bn_utils import draw_bayesian_network

        try:
            draw_bayesian_network(network, path=args.draw)
        except BayesNetError as e:
            print(f"Error drawing network: {e}", file=sys.stderr)
        else:
            if config.verbose:
                print(f"✓ Network drawing saved to: {args.draw}")

    if args.csv is not None:
        from .query_sweep import distributions_to_frame

        distributions_to_frame(runner.results).to_csv(args.csv, index=False)
        if config.verbose:
            print(f"✓ {len(runner.results)} query results saved to: {args.csv}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
