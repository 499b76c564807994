"""
Batched bulk loader.

Usage:
    from logbench.loader import BulkLoader

    loader = BulkLoader(LogStore())
    result = loader.load(100_000, ContentSize.MEDIUM)
    print(result.inserted, result.records_per_second)

A load is a fold over `plan_batches(total, batch_size)`: each BatchSpec is
materialized into rows, streamed through COPY and committed on its own, and
the accepted row counts are summed. Batches run strictly one after another.
The first failing batch aborts the load with BatchInsertError; batches
committed before it stay in the table.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Protocol

import psycopg

from logbench.config import get_settings
from logbench.domain.models import BatchSpec, ContentSize, LoadResult
from logbench.errors import BatchInsertError
from logbench.generator import ContentGenerator
from logbench.infrastructure.log_store import CopyRow
from logbench.utils.logging import get_logger
from logbench.utils.profiler import profile_block

log = get_logger(__name__)

BatchCallback = Callable[[BatchSpec, int], None]


class CopySink(Protocol):
    """The slice of LogStore the loader needs."""

    def copy_rows(self, rows: List[CopyRow]) -> int:
        ...


def batch_sizes(total: int, batch_size: int) -> List[int]:
    """Sizes of `ceil(total / batch_size)` batches summing to `total`."""
    if total < 0:
        raise ValueError("total must be >= 0")
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    count = math.ceil(total / batch_size)
    sizes = [batch_size] * count
    if count and total % batch_size:
        sizes[-1] = total % batch_size
    return sizes


def plan_batches(total: int, batch_size: int, generator: ContentGenerator) -> List[BatchSpec]:
    """Batch descriptors, each with its own user id and domain."""
    return [
        BatchSpec(
            index=index,
            size=size,
            user_id=generator.uuid4(),
            domain=generator.random_domain(),
        )
        for index, size in enumerate(batch_sizes(total, batch_size))
    ]


def build_rows(
    spec: BatchSpec,
    content_size: ContentSize,
    generator: ContentGenerator,
    now: datetime,
    jitter_seconds: int,
) -> List[CopyRow]:
    """Materialize one batch; created_at is backdated by up to `jitter_seconds`."""
    rng = generator.rng
    return [
        (
            spec.user_id,
            spec.domain,
            generator.random_action(),
            generator.generate(content_size),
            now - timedelta(seconds=rng.randrange(jitter_seconds) if jitter_seconds else 0),
        )
        for _ in range(spec.size)
    ]


class BulkLoader:
    """
    Generate synthetic logs and write them in fixed-size COPY batches.

    Parameters
    ----------
    store : CopySink
        Storage adapter exposing `copy_rows` (normally LogStore).
    generator : ContentGenerator | None
        Content and identity source; a fresh unseeded one by default.
    batch_size : int | None
        Rows per batch (INGEST_BATCH_SIZE, 1000 by default).
    jitter_days : int | None
        How far back created_at may be pushed (INGEST_JITTER_DAYS).
    """

    def __init__(
        self,
        store: CopySink,
        generator: Optional[ContentGenerator] = None,
        batch_size: Optional[int] = None,
        jitter_days: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        settings = get_settings()
        self.store = store
        self.generator = generator or ContentGenerator()
        self.batch_size = batch_size or settings.ingest_batch_size
        self.jitter_days = settings.ingest_jitter_days if jitter_days is None else jitter_days
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def load(
        self,
        total_count: int,
        content_size: ContentSize | str,
        on_batch: Optional[BatchCallback] = None,
    ) -> LoadResult:
        content_size = ContentSize(content_size)
        plan = plan_batches(total_count, self.batch_size, self.generator)
        jitter_seconds = self.jitter_days * 86_400

        log.info(
            f"Generating {total_count} records with {content_size.value} content size",
            extra={"rows": total_count, "batches": len(plan), "batch_size": self.batch_size},
        )

        inserted = 0
        with profile_block(f"load-{total_count}-{content_size.value}") as stats:
            for spec in plan:
                rows = build_rows(spec, content_size, self.generator, self._clock(), jitter_seconds)
                try:
                    accepted = self.store.copy_rows(rows)
                except psycopg.Error as exc:
                    log.error(
                        f"Failed to insert batch {spec.index}",
                        extra={"batch": spec.index, "inserted": inserted, "error": str(exc)},
                    )
                    raise BatchInsertError(spec.index, inserted, exc) from exc
                inserted += accepted
                log.info(
                    f"Progress: {(spec.index + 1) / len(plan) * 100:.2f}% "
                    f"(inserted {accepted} rows in batch {spec.index + 1})",
                    extra={"batch": spec.index + 1, "rows": accepted, "total_batches": len(plan)},
                )
                if on_batch is not None:
                    on_batch(spec, accepted)

        result = LoadResult(
            inserted=inserted,
            elapsed_seconds=stats.duration_seconds,
            content_size=content_size.value,
            batches=len(plan),
            peak_rss_bytes=stats.peak_rss_bytes,
            cpu_percent=stats.cpu_percent,
        )
        log.info(
            f"Completed! Inserted {inserted} records in {result.elapsed_seconds:.2f}s "
            f"({result.records_per_second:.2f} records/sec)",
            extra={"rows": inserted, "duration": result.elapsed_seconds},
        )
        return result


__all__ = ["BulkLoader", "batch_sizes", "plan_batches", "build_rows"]
