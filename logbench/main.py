from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.progress import Progress

from logbench.config import get_settings
from logbench.domain.models import ContentSize
from logbench.errors import InvalidRequestError, LogBenchError
from logbench.harness import BenchmarkHarness, SeedPlan, persist_reports
from logbench.infrastructure.db_factory import build_dsn
from logbench.reporter import (
    print_benchmark_report,
    print_load_result,
    print_log_page,
    print_reports,
)
from logbench.service import LogService
from logbench.utils.logging import configure_logging

app = typer.Typer(help="PostgreSQL log indexing benchmark CLI.")

DsnOption = typer.Option(None, "--dsn", help="Optional DSN override for Postgres.")


def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _fail(exc: LogBenchError) -> None:
    typer.echo(f"Error: {exc}", err=True)
    if isinstance(exc, InvalidRequestError):
        for error in exc.errors:
            typer.echo(f"  {'.'.join(str(p) for p in error['loc'])}: {error['msg']}", err=True)
        raise typer.Exit(code=2)
    raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"batch={settings.ingest_batch_size} jitter_days={settings.ingest_jitter_days} "
        f"case_limit={settings.benchmark_case_limit} sample={settings.benchmark_sample_size}"
    )


@app.command()
def init(
    rows: int = typer.Option(1000, "--rows", "-r", help="Record count (1000 ... 10000000)."),
    content_size: ContentSize = typer.Option(ContentSize.SMALL, "--content-size", "-c"),
    dsn: Optional[str] = DsnOption,
) -> None:
    """
    Generate synthetic logs and bulk-load them with COPY.
    """
    _setup()
    service = LogService.from_dsn(dsn)
    try:
        response = service.initialize({"record_count": rows, "content_size": content_size})
        typer.echo(response.model_dump_json(indent=2))
    except LogBenchError as exc:
        _fail(exc)
    finally:
        service.close()


@app.command()
def seed(
    rows: int = typer.Option(
        ..., "--rows", "-r", min=1, help="Any positive number of rows to load."
    ),
    content_size: ContentSize = typer.Option(ContentSize.SMALL, "--content-size", "-c"),
    dsn: Optional[str] = DsnOption,
) -> None:
    """
    Load an arbitrary number of rows (no record-count whitelist) and show throughput.
    """
    _setup()
    service = LogService.from_dsn(dsn)
    try:
        with Progress(transient=True) as progress:
            task = progress.add_task(f"Loading {content_size.value} logs", total=rows)
            result = service.loader.load(
                rows, content_size, on_batch=lambda _, accepted: progress.advance(task, accepted)
            )
        print_load_result(result)
    except LogBenchError as exc:
        _fail(exc)
    finally:
        service.close()


def _filter_payload(
    user_id: Optional[str],
    domain: Optional[str],
    created_at: Optional[str],
    created_at_to: Optional[str],
    page: int,
    limit: Optional[int],
) -> dict:
    return {
        "user_id": user_id,
        "domain": domain,
        "created_at": created_at,
        "created_at_to": created_at_to,
        "page": page,
        "limit": limit or get_settings().default_page_limit,
    }


@app.command()
def logs(
    user_id: Optional[str] = typer.Option(None, "--user-id"),
    domain: Optional[str] = typer.Option(None, "--domain"),
    created_at: Optional[str] = typer.Option(None, "--from", help="YYYY-MM-DD, inclusive."),
    created_at_to: Optional[str] = typer.Option(None, "--to", help="YYYY-MM-DD, whole day."),
    content_like: Optional[str] = typer.Option(None, "--fts", help="Full-text search term."),
    page: int = typer.Option(1, "--page", "-p"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l"),
    as_json: bool = typer.Option(False, "--json", help="Emit the raw page as JSON."),
    dsn: Optional[str] = DsnOption,
) -> None:
    """
    List logs with optional filters and full-text search.
    """
    _setup()
    payload = _filter_payload(user_id, domain, created_at, created_at_to, page, limit)
    payload["content_like"] = content_like
    service = LogService.from_dsn(dsn)
    try:
        result = service.list_logs(payload)
        if as_json:
            typer.echo(result.model_dump_json(indent=2))
        else:
            print_log_page(result)
    except LogBenchError as exc:
        _fail(exc)
    finally:
        service.close()


@app.command()
def search(
    term: str = typer.Argument(..., help="Substring to match (case-insensitive)."),
    user_id: Optional[str] = typer.Option(None, "--user-id"),
    domain: Optional[str] = typer.Option(None, "--domain"),
    created_at: Optional[str] = typer.Option(None, "--from"),
    created_at_to: Optional[str] = typer.Option(None, "--to"),
    page: int = typer.Option(1, "--page", "-p"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l"),
    as_json: bool = typer.Option(False, "--json"),
    dsn: Optional[str] = DsnOption,
) -> None:
    """
    Partial (trigram-backed ILIKE) search over content.
    """
    _setup()
    payload = _filter_payload(user_id, domain, created_at, created_at_to, page, limit)
    payload["search_term"] = term
    service = LogService.from_dsn(dsn)
    try:
        result = service.search_partial(payload)
        if as_json:
            typer.echo(result.model_dump_json(indent=2))
        else:
            print_log_page(result)
    except LogBenchError as exc:
        _fail(exc)
    finally:
        service.close()


@app.command()
def create(
    domain: str = typer.Option(..., "--domain"),
    action: str = typer.Option(..., "--action"),
    content: str = typer.Option("{}", "--content", help="JSON object."),
    user_id: Optional[str] = typer.Option(None, "--user-id"),
    dsn: Optional[str] = DsnOption,
) -> None:
    """
    Insert a single log record (the per-request path, not COPY).
    """
    _setup()
    try:
        document = json.loads(content)
    except json.JSONDecodeError as exc:
        typer.echo(f"Error: --content is not valid JSON ({exc.msg})", err=True)
        raise typer.Exit(code=2) from exc

    payload = {"domain": domain, "action": action, "content": document}
    if user_id:
        payload["user_id"] = user_id
    service = LogService.from_dsn(dsn)
    try:
        record = service.create_log(payload)
        typer.echo(record.model_dump_json(indent=2))
    except LogBenchError as exc:
        _fail(exc)
    finally:
        service.close()


@app.command()
def truncate(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
    dsn: Optional[str] = DsnOption,
) -> None:
    """
    Remove every row from the logs table.
    """
    _setup()
    if not yes:
        typer.confirm("Truncate the logs table?", abort=True)
    service = LogService.from_dsn(dsn)
    try:
        typer.echo(service.truncate().message)
    except LogBenchError as exc:
        _fail(exc)
    finally:
        service.close()


@app.command()
def benchmark(
    seed_rows: Optional[int] = typer.Option(
        None, "--seed", min=1, help="Truncate and seed this many rows before measuring."
    ),
    content_size: ContentSize = typer.Option(ContentSize.SMALL, "--content-size", "-c"),
    persist: bool = typer.Option(False, "--persist", help="Write results/latest.json."),
    dsn: Optional[str] = DsnOption,
) -> None:
    """
    Run the FTS vs. partial case matrix once against the current (or seeded) data.
    """
    _setup()
    harness = BenchmarkHarness.from_dsn(dsn)
    try:
        plan = SeedPlan(seed_rows, content_size) if seed_rows else None
        report = harness.run(seed=plan)
        print_benchmark_report(report)
        if persist:
            persist_reports([report], Path(get_settings().benchmark_results_dir))
    except LogBenchError as exc:
        _fail(exc)
    finally:
        harness.close()


@app.command()
def matrix(
    rows: List[int] = typer.Option(
        [1000, 10_000], "--rows", "-r", min=1, help="Dataset sizes."
    ),
    content_sizes: List[ContentSize] = typer.Option(
        [ContentSize.SMALL], "--content-size", "-c", help="Content size classes."
    ),
    results_dir: Optional[Path] = typer.Option(None, "--results-dir"),
    dsn: Optional[str] = DsnOption,
) -> None:
    """
    Benchmark every dataset size x content size pair (truncates between runs).
    """
    _setup()
    typer.echo(
        f"Running matrix rows={rows} content={[c.value for c in content_sizes]} "
        f"against {dsn or build_dsn()}"
    )
    harness = BenchmarkHarness.from_dsn(dsn)
    try:
        reports = harness.run_matrix(rows, content_sizes, results_dir=results_dir)
        print_reports(reports)
    except LogBenchError as exc:
        _fail(exc)
    finally:
        harness.close()


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
