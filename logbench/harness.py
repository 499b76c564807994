"""
Benchmark harness for full-text vs. partial (trigram) search.

Usage (example from CLI):
    from logbench.harness import BenchmarkHarness, SeedPlan

    harness = BenchmarkHarness.from_dsn(dsn)
    report = harness.run(seed=SeedPlan(10_000, ContentSize.MEDIUM))

A run walks the stages CONNECT → COUNT_EXISTING → DISCOVER_TERMS → SEED
(optional) → WARM_UP → EXECUTE → REPORT. Storage failures before WARM_UP
end the run. A failing case is logged and skipped; the matrix continues.
When SEED runs, the dataset count and the discovered terms are refreshed
from the freshly loaded rows.

Outputs of `run_matrix` are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
import random
import time
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from logbench.config import Settings, get_settings
from logbench.domain.models import (
    BenchmarkCase,
    BenchmarkReport,
    CaseResult,
    ContentSize,
    SearchFilter,
    SearchMode,
)
from logbench.errors import LogBenchError, StorageError
from logbench.generator import ContentGenerator
from logbench.infrastructure.log_store import LogStore
from logbench.loader import BulkLoader
from logbench.query.engine import LogQueryEngine
from logbench.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_TERMS = ("login", "error")
DEFAULT_SHORT_TERM = "lo"
MIN_TOKEN_LENGTH = 4
RARE_MAX_FREQUENCY = 5
WARM_UP_LIMIT = 10
_STRIP_CHARS = ".,!?-()[]{}\""


class Stage(str, Enum):
    CONNECT = "connect"
    COUNT_EXISTING = "count_existing"
    DISCOVER_TERMS = "discover_terms"
    SEED = "seed"
    WARM_UP = "warm_up"
    EXECUTE = "execute"
    REPORT = "report"


@dataclass(frozen=True)
class SeedPlan:
    record_count: int
    content_size: ContentSize
    truncate: bool = True


def iter_strings(value: Any) -> Iterator[str]:
    """Every string leaf of a JSON tree."""
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_strings(item)
    elif isinstance(value, list):
        for item in value:
            yield from iter_strings(item)


def tokenize(text: str) -> List[str]:
    tokens = []
    for word in text.split():
        token = word.strip(_STRIP_CHARS).lower()
        if len(token) >= MIN_TOKEN_LENGTH:
            tokens.append(token)
    return tokens


def discover_terms(documents: Iterable[Any]) -> Tuple[str, str]:
    """
    Pick a (common, rare) term pair from sampled content documents.

    Common is the most frequent token. Rare is the least frequent token seen
    between 1 and 4 times, falling back to the least frequent token overall.
    Ties break alphabetically so the choice is deterministic.
    """
    counts: Counter[str] = Counter()
    for document in documents:
        for text in iter_strings(document):
            counts.update(tokenize(text))

    if not counts:
        return DEFAULT_TERMS

    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    common = ranked[0][0]
    rare = ranked[-1][0]
    for token, frequency in reversed(ranked):
        if 1 <= frequency < RARE_MAX_FREQUENCY:
            rare = token
            break
    return common, rare


def build_cases(
    common: str,
    rare: str,
    dataset_size: int,
    cap: int = 100,
    not_found_term: Optional[str] = None,
) -> List[BenchmarkCase]:
    """The ten-case matrix: {FTS, Partial} x {not found, rare, common, common uncapped, short}."""
    not_found = not_found_term or str(uuid.uuid4())
    short = common[:2] if len(common) >= 2 else DEFAULT_SHORT_TERM
    uncapped = max(dataset_size, 1)

    cases: List[BenchmarkCase] = []
    for mode in (SearchMode.FTS, SearchMode.PARTIAL):
        prefix = mode.label
        cases.extend(
            [
                BenchmarkCase(f"{prefix} Not Found", mode, not_found, cap, "Random UUID"),
                BenchmarkCase(f"{prefix} Rare (Few)", mode, rare, cap, "Rare term"),
                BenchmarkCase(
                    f"{prefix} Common (Many) Limit", mode, common, cap, f"Common term, Limit {cap}"
                ),
                BenchmarkCase(
                    f"{prefix} Common (Many) NoLimit", mode, common, uncapped, "Common term, Full Scan"
                ),
                BenchmarkCase(f"{prefix} Short Input", mode, short, cap, "1-2 chars"),
            ]
        )
    return cases


def case_filter(case: BenchmarkCase) -> SearchFilter:
    if case.mode is SearchMode.FTS:
        return SearchFilter(full_text=case.term, limit=case.limit)
    return SearchFilter(partial=case.term, limit=case.limit)


def persist_reports(reports: Sequence[BenchmarkReport], results_dir: Path) -> Path:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"
    payload = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "reports": [report.to_dict() for report in reports],
    }

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True, ensure_ascii=False)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})
    return archive_path


class BenchmarkHarness:
    """
    Drive the search case matrix against the `logs` table.

    Cases execute one at a time on the calling thread; overlapping timed
    queries would distort each other's latency.
    """

    def __init__(
        self,
        store: LogStore,
        engine: LogQueryEngine,
        loader: Optional[BulkLoader] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.loader = loader or BulkLoader(store, ContentGenerator(rng=self.rng))

    @classmethod
    def from_dsn(cls, dsn: Optional[str] = None) -> "BenchmarkHarness":
        """Harness with its own store and engine (shared pool when dsn is None)."""
        return cls(LogStore(dsn_override=dsn), LogQueryEngine(dsn_override=dsn))

    def close(self) -> None:
        self.engine.close()
        self.store.close()

    def _stage(self, stage: Stage, **context: Any) -> None:
        log.info(f"[STAGE] {stage.value.upper()}", extra={"stage": stage.value, **context})

    def _discover(self) -> Tuple[str, str]:
        try:
            sample = self.store.sample(self.settings.benchmark_sample_size)
        except StorageError as exc:
            log.warning(
                "Failed to discover terms, using defaults", extra={"error": str(exc)}
            )
            return DEFAULT_TERMS
        common, rare = discover_terms(record.content for record in sample)
        log.info(
            f"Terms discovered: common='{common}' rare='{rare}'",
            extra={"common": common, "rare": rare, "sampled": len(sample)},
        )
        return common, rare

    def warm_up(self, term: str) -> None:
        try:
            self.engine.list(SearchFilter(full_text=term, limit=WARM_UP_LIMIT))
        except LogBenchError as exc:
            log.warning("[WARMUP] Failed", extra={"error": str(exc)})

    def run_case(self, case: BenchmarkCase) -> CaseResult:
        search_filter = case_filter(case)
        start = time.perf_counter()
        records = self.engine.list(search_filter)
        duration = time.perf_counter() - start
        return CaseResult(case=case, duration_seconds=duration, rows_found=len(records))

    def run(self, seed: Optional[SeedPlan] = None) -> BenchmarkReport:
        self._stage(Stage.CONNECT)
        self.store.ping()

        self._stage(Stage.COUNT_EXISTING)
        dataset_size = self.store.count_all()
        log.info(f"Dataset Size: {dataset_size}", extra={"rows": dataset_size})

        self._stage(Stage.DISCOVER_TERMS)
        common, rare = self._discover()

        content_size: Optional[str] = None
        if seed is not None:
            self._stage(Stage.SEED, rows=seed.record_count, content_size=seed.content_size.value)
            if seed.truncate:
                self.store.truncate()
            self.loader.load(seed.record_count, seed.content_size)
            content_size = seed.content_size.value
            dataset_size = self.store.count_all()
            common, rare = self._discover()

        self._stage(Stage.WARM_UP, term=common)
        self.warm_up(common)

        not_found = str(uuid.UUID(int=self.rng.getrandbits(128), version=4))
        cases = build_cases(
            common,
            rare,
            dataset_size,
            cap=self.settings.benchmark_case_limit,
            not_found_term=not_found,
        )
        report = BenchmarkReport(
            dataset_size=dataset_size,
            common_term=common,
            rare_term=rare,
            content_size=content_size,
        )

        self._stage(Stage.EXECUTE, cases=len(cases))
        for index, case in enumerate(cases, start=1):
            try:
                result = self.run_case(case)
            except (LogBenchError, ValueError) as exc:
                log.exception(
                    f"[CASE FAILED] {case.name}", extra={"case": case.name, "mode": case.mode.value}
                )
                report.errors[case.name] = str(exc)
                continue
            report.results.append(result)
            log.info(
                f"[CASE {index}/{len(cases)}] {case.name}",
                extra={
                    "case": case.name,
                    "limit": case.limit,
                    "duration": result.duration_seconds,
                    "rows": result.rows_found,
                },
            )

        self._stage(Stage.REPORT, completed=len(report.results), skipped=len(report.errors))
        return report

    def run_matrix(
        self,
        dataset_sizes: Iterable[int],
        content_sizes: Iterable[ContentSize],
        results_dir: Optional[Path | str] = None,
        persist: bool = True,
    ) -> List[BenchmarkReport]:
        """Truncate, reseed and benchmark every (dataset size, content size) pair."""
        sizes = [ContentSize(size) for size in content_sizes]
        plans = [
            SeedPlan(record_count=rows, content_size=size)
            for rows in dataset_sizes
            for size in sizes
        ]
        reports: List[BenchmarkReport] = []
        for number, plan in enumerate(plans, start=1):
            log.info(f"{'=' * 60}")
            log.info(
                f"[MATRIX {number}/{len(plans)}] rows={plan.record_count} "
                f"content={plan.content_size.value}",
                extra={"rows": plan.record_count, "content_size": plan.content_size.value},
            )
            log.info(f"{'=' * 60}")
            reports.append(self.run(seed=plan))

        if persist:
            persist_reports(reports, Path(results_dir or self.settings.benchmark_results_dir))
        return reports


__all__ = [
    "BenchmarkHarness",
    "SeedPlan",
    "Stage",
    "build_cases",
    "case_filter",
    "discover_terms",
    "iter_strings",
    "persist_reports",
    "tokenize",
]
