"""Command-line driver: synthesize a registered circuit and check its trace.

    plonkish run --k 4 --a 1 --b 1 --steps 7 --print-trace
    plonkish run --tamper-row 4            # corrupt c at row 4, expect failures
    plonkish layout --steps 3              # shape only, no witness values

Exit codes: 0 satisfied, 1 unsatisfied, 2 configuration or synthesis error.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from plonkish.circuits import get_circuit
from plonkish.config import CircuitParams
from plonkish.primitives.field import get_field
from plonkish.protocol import (
    Column,
    MockProver,
    NotEnoughRowsAvailableError,
    PlonkishError,
    Trace,
    VerificationReport,
    extract_layout,
)

EXIT_SATISFIED = 0
EXIT_UNSATISFIED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='plonkish',
        description='Synthesize a Plonkish circuit and check its trace'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    run = subparsers.add_parser('run', help='Synthesize with witnesses and verify the trace')
    _add_param_arguments(run)
    run.add_argument(
        '--tamper-row',
        type=int,
        default=None,
        help='Overwrite one cell of the tampered column at this row before verifying'
    )
    run.add_argument(
        '--tamper-column',
        type=str,
        default='c',
        help='Advice column to tamper with (default: c)'
    )
    run.add_argument(
        '--tamper-value',
        type=int,
        default=None,
        help='Value written by --tamper-row (default: current value + 1)'
    )
    run.add_argument(
        '--print-trace',
        action='store_true',
        help='Print the used rows of the trace'
    )

    layout = subparsers.add_parser('layout', help='Synthesize without witnesses and print the layout')
    _add_param_arguments(layout)

    return parser


def _add_param_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='JSON file with circuit parameters; flags override it'
    )
    parser.add_argument('--circuit', type=str, default=None, help='Registered circuit name (default: fibonacci)')
    parser.add_argument('--k', type=int, default=None, help='Trace has 2^k rows (default: 4)')
    parser.add_argument('--a', type=int, default=None, help='First seed (default: 1)')
    parser.add_argument('--b', type=int, default=None, help='Second seed (default: 1)')
    parser.add_argument('--steps', type=int, default=None, help='Rows after the first (default: 7)')
    parser.add_argument('--field', type=str, default=None, help='Field name: pasta or goldilocks (default: pasta)')


def load_params(args: argparse.Namespace) -> CircuitParams:
    """Defaults, then the config file, then explicit flags.

    Raises:
        ValueError: Unknown config keys or out-of-range parameters
        FileNotFoundError: --config points at a missing file
    """
    params = CircuitParams.from_json(args.config) if args.config is not None else CircuitParams()
    params = params.merged(
        circuit=args.circuit, k=args.k, a=args.a, b=args.b, steps=args.steps, field=args.field,
    )
    return params.validate()


def print_table(trace: Trace) -> None:
    header, body = trace.to_table()
    widths = [len(h) for h in header]
    for line in body:
        widths = [max(w, len(cell)) for w, cell in zip(widths, line)]

    def render(cells: Sequence[str]) -> str:
        return " | ".join(cell.rjust(w) for cell, w in zip(cells, widths))

    print(render(header))
    print("-+-".join("-" * w for w in widths))
    for line in body:
        print(render(line))


def print_report(report: VerificationReport) -> None:
    """Report failures grouped by kind: unassigned cells, gates, copy constraints."""
    print("Verifying cell assignments")
    for failure in report.unassigned_failures():
        print(f"ERROR: {failure}")

    print("Verifying gates")
    for failure in report.gate_failures():
        print(f"ERROR: {failure}")

    print("Verifying copy constraints")
    for failure in report.copy_failures():
        print(f"ERROR: {failure}")


def _find_column(trace: Trace, name: str) -> Column:
    for column in trace.schema.advice_columns:
        if column.name == name:
            return column
    names = [str(c) for c in trace.schema.advice_columns]
    raise ValueError(f"No advice column named '{name}'. Available: {names}")


def cmd_run(args: argparse.Namespace) -> int:
    params = load_params(args)
    circuit = get_circuit(params.circuit, a=params.a, b=params.b, steps=params.steps,
                          field=get_field(params.field))

    print(f"Synthesizing {params.circuit} circuit (k={params.k}, steps={params.steps}, field={params.field})...")
    prover = MockProver.run(params.k, circuit)

    if args.tamper_row is not None:
        column = _find_column(prover.trace, args.tamper_column)
        if not 0 <= args.tamper_row < prover.trace.n:
            raise NotEnoughRowsAvailableError(prover.k, args.tamper_row)
        value = args.tamper_value
        if value is None:
            value = int(prover.trace.column_values(column)[args.tamper_row]) + 1
        print(f"Tampering with {column}[{args.tamper_row}] := {value}")
        trace = prover.trace.tampered(column, args.tamper_row, value)
        prover = MockProver(prover.k, prover.schema, trace)

    if args.print_trace:
        print_table(prover.trace)

    report = prover.report()
    print_report(report)

    print(f"Checked {report.gates_checked} gate(s) over {report.rows_checked} rows "
          f"and {report.copies_checked} copy constraint(s)")
    if not report.is_satisfied:
        print(f"ERROR: {len(report)} constraint failure(s)")
        return EXIT_UNSATISFIED

    print("Trace satisfies all constraints")
    return EXIT_SATISFIED


def cmd_layout(args: argparse.Namespace) -> int:
    params = load_params(args)
    circuit = get_circuit(params.circuit, a=params.a, b=params.b, steps=params.steps,
                          field=get_field(params.field))

    print(f"Extracting layout of {params.circuit} circuit (k={params.k}, steps={params.steps})...")
    trace = extract_layout(circuit, params.k)

    for info in trace.regions:
        print(f"  region '{info.name}': rows {info.start}..{info.end - 1}")
    print(f"  {len(trace.copies)} copy constraint(s), {trace.used_rows} of {trace.n} rows used")
    print_table(trace)
    return EXIT_SATISFIED


COMMANDS = {
    'run': cmd_run,
    'layout': cmd_layout,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return COMMANDS[args.command](args)
    except (PlonkishError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
