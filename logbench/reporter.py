from __future__ import annotations

import json
import os
from typing import Dict, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from logbench.domain.models import BenchmarkReport, LoadResult, LogPage


def get_container_resources() -> Dict[str, Optional[str]]:
    """
    Container resource constraints, from env overrides or cgroup v2 files.

    Returns dict with 'cpus' and 'memory' keys (None when unconstrained).
    """
    resources: Dict[str, Optional[str]] = {
        "cpus": os.environ.get("BENCHMARK_CPU_LIMIT"),
        "memory": os.environ.get("BENCHMARK_MEMORY_LIMIT"),
    }

    if resources["cpus"] is None:
        try:
            with open("/sys/fs/cgroup/cpu.max", "r") as f:
                parts = f.read().split()
            if len(parts) == 2 and parts[0] != "max":
                resources["cpus"] = f"{int(parts[0]) / int(parts[1]):.1f}"
        except (OSError, ValueError):
            pass

    if resources["memory"] is None:
        try:
            with open("/sys/fs/cgroup/memory.max", "r") as f:
                content = f.read().strip()
            if content != "max":
                mem_bytes = int(content)
                if mem_bytes >= 1024**3:
                    resources["memory"] = f"{mem_bytes / 1024**3:.1f}GB"
                else:
                    resources["memory"] = f"{mem_bytes / 1024**2:.0f}MB"
        except (OSError, ValueError):
            pass

    return resources


def _format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.2f}ms"
    return f"{seconds:.3f}s"


def print_benchmark_report(report: BenchmarkReport, console: Optional[Console] = None) -> None:
    """
    Render one benchmark run as a rich table, in case order.

    Uncapped cases show `ALL` as their limit; skipped cases are listed below
    the table with their error.
    """
    console = console or Console()

    resources = get_container_resources()
    resource_parts = []
    if resources["cpus"]:
        resource_parts.append(f"CPU: {resources['cpus']} cores")
    if resources["memory"]:
        resource_parts.append(f"Memory: {resources['memory']}")

    title = f"Search Benchmark | rows={report.dataset_size:,}"
    if report.content_size:
        title += f" content={report.content_size}"
    if resource_parts:
        title = f"{title}\n[dim]Container Resources: {' │ '.join(resource_parts)}[/dim]"

    table = Table(
        title=title,
        box=box.ROUNDED,
        caption=f"common='{report.common_term}' rare='{report.rare_term}'",
    )
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Case", style="cyan")
    table.add_column("Limit", justify="right", style="blue")
    table.add_column("Duration", justify="right", style="green")
    table.add_column("Rows", justify="right", style="magenta")
    table.add_column("Description", style="dim")

    uncapped = max(report.dataset_size, 1)
    for result in report.results:
        case = result.case
        limit = "ALL" if case.limit == uncapped else str(case.limit)
        table.add_row(
            case.mode.label,
            case.name,
            limit,
            _format_duration(result.duration_seconds),
            f"{result.rows_found:,}",
            case.description,
        )

    console.print(table)
    for name, error in report.errors.items():
        console.print(f"[red]Skipped {name}:[/red] {error}")


def print_load_result(result: LoadResult, console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(title="Bulk Load", box=box.ROUNDED)
    table.add_column("Rows", justify="right", style="magenta")
    table.add_column("Batches", justify="right", style="blue")
    table.add_column("Content", style="cyan")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Throughput (rows/s)", justify="right", style="bold green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_row(
        f"{result.inserted:,}",
        str(result.batches),
        result.content_size,
        f"{result.elapsed_seconds:.2f}",
        f"{result.records_per_second:,.2f}",
        f"{(result.peak_rss_bytes or 0) / (1024 * 1024):.2f}",
    )
    console.print(table)


def print_log_page(page: LogPage, console: Optional[Console] = None, preview: int = 80) -> None:
    console = console or Console()
    table = Table(
        title=f"Logs page {page.page}/{page.total_pages} (total {page.total:,})",
        box=box.SIMPLE,
        caption=f"query {_format_duration(page.query_duration)}",
    )
    table.add_column("Created", style="green", no_wrap=True)
    table.add_column("Domain", style="cyan")
    table.add_column("Action", style="magenta")
    table.add_column("User", style="dim", no_wrap=True)
    table.add_column("Content", overflow="ellipsis")

    for record in page.data:
        content = json.dumps(record.content, ensure_ascii=False)
        table.add_row(
            record.created_at.isoformat(timespec="seconds"),
            record.domain,
            record.action,
            str(record.user_id),
            content[:preview] + ("…" if len(content) > preview else ""),
        )
    console.print(table)


def print_reports(reports: Sequence[BenchmarkReport]) -> None:
    console = Console()
    if not reports:
        console.print("[yellow]No results to display.[/yellow]")
        return
    for report in reports:
        print_benchmark_report(report, console=console)


__all__ = [
    "get_container_resources",
    "print_benchmark_report",
    "print_load_result",
    "print_log_page",
    "print_reports",
]
