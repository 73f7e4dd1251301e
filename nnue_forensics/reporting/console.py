# nnue_forensics/reporting/console.py
"""
Console reporting functions for NNUE records.
"""
from __future__ import annotations

from typing import List, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nnue_forensics.analysis.base import AnalysisReport, Finding
from nnue_forensics.analysis.format_analyzer import AnalysisResult
from nnue_forensics.analysis.layers import LayerInfo
from nnue_forensics.formats.nnue import NetworkInfo

console = Console()


def _status(ok: bool) -> str:
    return "[green]PASS[/green]" if ok else "[bold red]FAIL[/bold red]"


def render_network_infos(infos: Sequence[NetworkInfo], *, title: str = "Networks") -> None:
    """Render one row per network header."""
    table = Table(title=title, box=box.ROUNDED, title_style="bold magenta")
    table.add_column("#", justify="right", style="yellow")
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Version", justify="right")
    table.add_column("Hash", justify="right")
    table.add_column("Payload (bytes)", justify="right")
    table.add_column("Description", style="white")

    for i, info in enumerate(infos, start=1):
        table.add_row(
            str(i),
            escape(info.file_path),
            f"0x{info.version:08X}",
            f"0x{info.architecture_hash:08X}",
            f"{info.payload_bytes:,}",
            escape(info.description),
        )
    console.print(table)


def _render_samples(title: str, values: Sequence[int]) -> None:
    table = Table(title=title, box=box.SIMPLE, show_header=False, title_style="cyan")
    table.add_column("Index", justify="right", style="dim")
    table.add_column("Value", justify="right")
    for i, v in enumerate(values):
        table.add_row(escape(f"[{i}]"), str(v))
    console.print(table)


def render_analysis(result: AnalysisResult) -> None:
    """Render header facts, value samples and the weight distribution."""
    t = Table(title=f"NNUE File Analysis: {escape(result.file_name)}", box=box.SIMPLE_HEAVY)
    t.add_column("Field", style="bold yellow")
    t.add_column("Value")
    t.add_row("Version", f"0x{result.version:08X}")
    t.add_row("Hash", f"0x{result.architecture_hash:08X}")
    t.add_row("Description", escape(result.description))
    t.add_row("Header size", f"{result.header_size:,} bytes")
    t.add_row("Data size", f"{result.data_size:,} bytes")
    console.print(t)

    _render_samples(f"First {len(result.sample_int16)} values (as INT16)", result.sample_int16)
    _render_samples(f"First {len(result.sample_int8)} values (as INT8)", result.sample_int8)

    dist = result.distribution
    d = Table(
        title=f"Weight distribution (first {dist.sample_size} INT16 values)",
        box=box.SIMPLE_HEAVY,
    )
    d.add_column("Statistic", style="bold yellow")
    d.add_column("Value", justify="right")
    d.add_row("Min", str(dist.min))
    d.add_row("Max", str(dist.max))
    d.add_row("Unique values", str(dist.unique_values))
    d.add_row("Mean", f"{dist.mean:.2f}")
    console.print(d)


def render_layers(layers: Sequence[LayerInfo]) -> None:
    """Render per-layer statistics."""
    table = Table(title="Layer Statistics", box=box.ROUNDED, title_style="bold magenta")
    table.add_column("Layer", style="cyan")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Mean", justify="right")
    table.add_column("Std Dev", justify="right")
    table.add_column("Min", justify="right", style="yellow")
    table.add_column("Max", justify="right", style="yellow")
    for layer in layers:
        table.add_row(
            layer.name,
            str(layer.start_offset),
            str(layer.end_offset),
            f"{layer.size:,}",
            f"{layer.mean:.4f}",
            f"{layer.std_dev:.4f}",
            str(layer.min),
            str(layer.max),
        )
    console.print(table)


def render_summary(rep: AnalysisReport) -> None:
    """Render a high-level summary table."""
    t = Table(title="NNUE Forensics Summary", box=box.SIMPLE_HEAVY)
    t.add_column("Field", style="bold")
    t.add_column("Value")
    t.add_row("Path", escape(rep.file_path))
    t.add_row("Size (bytes)", str(rep.file_size))
    t.add_row("Format", rep.format)
    t.add_row("SHA-256", rep.sha256_hex)
    t.add_row("Stages", ", ".join(rep.stages_run))
    for k, v in rep.metadata.items():
        if k == "layers":
            continue
        t.add_row(k.replace("_", " ").title(), escape(str(v)))
    console.print(t)


def _render_findings_table(title: str, findings: List[Finding]) -> None:
    table = Table(title=title, box=box.ROUNDED, show_lines=False, title_style="bold magenta")
    table.add_column("Status", justify="center", width=8)
    table.add_column("Check", style="cyan", no_wrap=True)
    table.add_column("Details", style="white")

    findings.sort(key=lambda f: f.context.get("start", 0))
    for f in findings:
        check_name = f.name.split(":", 1)[-1].replace("_", " ")
        table.add_row(_status(f.ok), check_name, escape(f.details))
    console.print(table)


def render_report(rep: AnalysisReport) -> None:
    """Render the summary and one findings table per group."""
    render_summary(rep)

    groups = {}
    for f in rep.findings:
        group = f.name.split(":", 1)[0] if ":" in f.name else "general"
        groups.setdefault(group, []).append(f)

    for group_name, findings in groups.items():
        _render_findings_table(group_name.replace("_", " ").title() + " Checks", findings)
