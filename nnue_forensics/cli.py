# nnue_forensics/cli.py
"""
cli.py

Rich console CLI:
- info:    print header metadata for one or more network files.
- list:    print header metadata for every .nnue/.bin file in a directory.
- analyze: binary format analysis plus per-layer statistics.
- scan:    staged inspection report (sha256, structure, layers).
- combine: merge networks with the harmonic (or arithmetic) mean.
- version: show the package version.
"""
from __future__ import annotations

import argparse
import os
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from nnue_forensics import __version__
from nnue_forensics.analysis.combiner import CombinationMethod, combine
from nnue_forensics.analysis.format_analyzer import analyze_file
from nnue_forensics.analysis.layers import analyze_network
from nnue_forensics.analysis.nnue_analyzer import NNUEAnalyzer
from nnue_forensics.config import AVAILABLE_STAGES, NETWORK_EXTENSIONS, AnalysisSettings
from nnue_forensics.errors import NetworkIOError
from nnue_forensics.formats.nnue import read_full, read_info
from nnue_forensics.logging import configure_logging
from nnue_forensics.reporting import console as reporter
from nnue_forensics.reporting.json_reporter import write_json
from nnue_forensics.result import Outcome, attempt

console = Console()


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--debug", action="store_true", help="Enable debug logging")
    common.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines")

    p = argparse.ArgumentParser(
        prog="nnfx",
        description="NNUE Forensics: inspect, analyze and combine NNUE network files.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    sub = p.add_subparsers(dest="cmd", title="Available Commands", metavar="<command>")

    sp_info = sub.add_parser("info", parents=[common], help="Show header metadata")
    sp_info.add_argument("paths", nargs="+", help="Network files (.nnue | .bin)")

    sp_list = sub.add_parser("list", parents=[common], help="List network files in a directory")
    sp_list.add_argument("directory", help="Directory to scan (non-recursive)")

    sp_an = sub.add_parser("analyze", parents=[common], help="Analyze binary format and layers")
    sp_an.add_argument("path", help="Network file to analyze")
    sp_an.add_argument(
        "--sample-limit",
        type=int,
        default=AnalysisSettings.distribution_sample_limit,
        help="Max INT16 values used for the weight distribution",
    )
    sp_an.add_argument(
        "--json-out", type=str, default=None, help="Write JSON analysis to this path"
    )

    sp_scan = sub.add_parser("scan", parents=[common], help="Run the staged inspection report")
    sp_scan.add_argument("path", help="Network file to scan")
    sp_scan.add_argument(
        "--json-out", type=str, default=None, help="Write JSON report to this path"
    )
    sp_scan.add_argument(
        "--stage",
        nargs="+",
        choices=AVAILABLE_STAGES,
        metavar="STAGE",
        help=(
            f"Run only specific analysis stages. Defaults to all stages if not provided.\n"
            f"Available stages: {', '.join(AVAILABLE_STAGES)}."
        ),
    )

    sp_comb = sub.add_parser("combine", parents=[common], help="Combine networks into one")
    sp_comb.add_argument("output", help="Output network path")
    sp_comb.add_argument("inputs", nargs="+", help="Input networks (same architecture and size)")
    sp_comb.add_argument("--description", default=None, help="Description of the combined network")
    sp_comb.add_argument(
        "--method",
        choices=[m.value for m in CombinationMethod],
        default=CombinationMethod.HARMONIC_MEAN.value,
        help="Per-position merge rule (default: harmonic)",
    )
    sp_comb.add_argument(
        "--decompress",
        action="store_true",
        help=(
            "Decode single-frame LEB128 payloads and merge INT16 values.\n"
            "Default merges raw payload bytes as 0-255 magnitudes."
        ),
    )

    sub.add_parser("version", help="Show the version of nnue-forensics")

    return p


def _fail(outcome: Outcome) -> int:
    err = outcome.error
    console.print(f"[red]{outcome.kind}:[/red] {escape(str(err))}")
    return 2


def find_networks(directory: str) -> List[str]:
    """Network files directly inside ``directory``, sorted by name."""
    try:
        names = os.listdir(directory)
    except OSError as e:
        raise NetworkIOError(f"Cannot list directory: {e.strerror or e}", path=directory) from e
    return sorted(
        os.path.join(directory, name)
        for name in names
        if os.path.splitext(name)[1].lower() in NETWORK_EXTENSIONS
        and os.path.isfile(os.path.join(directory, name))
    )


def _cmd_info(paths: List[str]) -> int:
    infos = []
    for path in paths:
        outcome = attempt(read_info, path)
        if not outcome.ok:
            return _fail(outcome)
        infos.append(outcome.value)
    reporter.render_network_infos(infos)
    return 0


def _cmd_list(directory: str) -> int:
    if not os.path.isdir(directory):
        console.print(f"[red]Directory not found:[/red] {escape(directory)}")
        return 2
    listed = attempt(find_networks, directory)
    if not listed.ok:
        return _fail(listed)
    paths = listed.value
    if not paths:
        console.print(f"[yellow]No network files found in:[/yellow] {escape(directory)}")
        return 0
    return _cmd_info(paths)


def _cmd_analyze(args: argparse.Namespace) -> int:
    settings_outcome = attempt(AnalysisSettings, distribution_sample_limit=args.sample_limit)
    if not settings_outcome.ok:
        return _fail(settings_outcome)
    settings = settings_outcome.value

    outcome = attempt(analyze_file, args.path, settings)
    if not outcome.ok:
        return _fail(outcome)
    reporter.render_analysis(outcome.value)

    network = attempt(read_full, args.path)
    if not network.ok:
        return _fail(network)
    layers = analyze_network(network.value.payload, settings)
    reporter.render_layers(layers)

    if args.json_out:
        written = attempt(write_json, {"analysis": outcome.value, "layers": layers}, args.json_out)
        if not written.ok:
            return _fail(written)
        console.print(f"[dim]Wrote JSON analysis → {escape(args.json_out)}[/dim]")
    return 0


def _cmd_scan(args: argparse.Namespace) -> int:
    stages_to_run = args.stage or AVAILABLE_STAGES
    console.print(f"[dim]Running stages: {', '.join(stages_to_run)}...[/dim]")

    outcome = attempt(NNUEAnalyzer(args.path).run, stages_to_run)
    if not outcome.ok:
        return _fail(outcome)
    rep = outcome.value

    console.print(
        Panel(
            f"[bold]Result:[/bold] {'[green]OK[/green]' if rep.ok else '[red]FAILED[/red]'}",
            style="bold cyan",
        )
    )
    reporter.render_report(rep)

    if args.json_out:
        written = attempt(write_json, rep, args.json_out)
        if not written.ok:
            return _fail(written)
        console.print(f"[dim]Wrote JSON report → {escape(args.json_out)}[/dim]")
    return 0


def _cmd_combine(args: argparse.Namespace) -> int:
    infos = []
    for path in args.inputs:
        info = attempt(read_info, path)
        if not info.ok:
            return _fail(info)
        infos.append(info.value)
    reporter.render_network_infos(infos, title="Inputs")

    description = args.description
    if description is None:
        description = f"Combined {len(infos)} networks - {datetime.now():%Y-%m-%d %H:%M:%S}"

    method = CombinationMethod(args.method)
    with console.status(f"[yellow]Combining {len(infos)} networks...[/yellow]"):
        outcome = attempt(
            combine,
            args.inputs,
            args.output,
            description,
            method=method,
            decompress=args.decompress,
        )
    if not outcome.ok:
        return _fail(outcome)

    mode = "decompressed INT16" if args.decompress else "raw bytes"
    console.print(f"[green]✓ Successfully created:[/green] [yellow]{escape(args.output)}[/yellow]")
    console.print(f"[cyan]{escape(description)}[/cyan]")
    console.print(f"[dim]Method: {method.value} mean over {mode}[/dim]")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    if args.cmd == "version":
        console.print(f"NNUE Forensics Version {__version__}")
        return 0

    configure_logging(debug=args.debug, json=args.log_json)

    if args.cmd == "info":
        return _cmd_info(args.paths)
    if args.cmd == "list":
        return _cmd_list(args.directory)
    if args.cmd == "analyze":
        return _cmd_analyze(args)
    if args.cmd == "scan":
        return _cmd_scan(args)
    if args.cmd == "combine":
        return _cmd_combine(args)

    parser.print_help()
    return 1
