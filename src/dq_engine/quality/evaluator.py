"""
Core evaluation engine.

Evaluator runs every rule of a registry against its own fresh pass of a
row source, isolates per-rule failures, and produces a Report.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from .errors import RuleTimeout, SourceUnavailable
from .registry import RuleRegistry
from .report import Report, RunStatus
from .rules import DEFAULT_SAMPLE_SIZE, Record, Rule, RuleResult


def _with_deadline(records: Iterable[Record], rule_name: str, timeout: float) -> Iterator[Record]:
    deadline = time.monotonic() + timeout
    for record in records:
        if time.monotonic() > deadline:
            raise RuleTimeout(f"rule {rule_name!r} exceeded {timeout}s")
        yield record


class Evaluator:
    """
    Evaluate a rule registry against a row source.

    Usage:
        from dq_engine.quality import Evaluator, RuleRegistry, CompletenessRule
        from dq_engine.sources import CsvSource

        registry = RuleRegistry("supastore")
        registry.register(CompletenessRule(["order_id", "customer_id"]))

        report = Evaluator(max_workers=4).run(registry, CsvSource("exports/"), "supastore_db")
        report.print_summary()

        if not report.passed:
            report.print_failures()

    Args:
        max_workers: Rules evaluated concurrently. 1 runs them in order
                     on the calling thread.
        rule_timeout: Seconds a single rule's pass may take, or None.
        sample_size: Violations kept per rule.
        key_columns: Columns identifying a record in violation samples.
    """

    def __init__(
        self,
        max_workers: int = 1,
        rule_timeout: Optional[float] = None,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        key_columns: Optional[Sequence[str]] = None,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers
        self.rule_timeout = rule_timeout
        self.sample_size = sample_size
        self.key_columns = list(key_columns or [])
        self.status = RunStatus.PENDING
        self.logger = logging.getLogger(self.__class__.__name__)

    def run(self, registry: RuleRegistry, source, table: str, name: Optional[str] = None) -> Report:
        """
        Run every registered rule against ``table``.

        Returns a Report with one result per rule, in registry order.

        Raises:
            SourceUnavailable: If the table cannot be opened before any
                rule runs. The evaluator status becomes ``aborted``.
        """
        self.status = RunStatus.PENDING
        registry.lock()
        rules = registry.all()
        run_name = name or registry.name

        try:
            fields = source.fields(table)
        except SourceUnavailable as exc:
            self.status = RunStatus.ABORTED
            self.logger.error("Run %s aborted: %s", run_name, exc)
            raise

        self.status = RunStatus.RUNNING
        self.logger.info("Run %s: %d rules against %s", run_name, len(rules), table)
        report = Report(name=run_name, table=table, status=RunStatus.RUNNING)

        if self.max_workers > 1 and len(rules) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='dq-rule') as pool:
                results = pool.map(lambda rule: self._evaluate(rule, source, table, fields), rules)
                for result in results:
                    report.append(result)
        else:
            for rule in rules:
                report.append(self._evaluate(rule, source, table, fields))

        report.status = RunStatus.COMPLETED
        self.status = RunStatus.COMPLETED
        self.logger.info(
            "Run %s completed: %d passed, %d failed, %d errored",
            run_name, report.pass_count, report.fail_count, report.error_count,
        )
        return report

    def _evaluate(self, rule: Rule, source, table: str, fields: List[str]) -> RuleResult:
        """Evaluate one rule on a fresh pass; never raises."""
        key_columns = [c for c in self.key_columns if not fields or c in fields]
        if fields:
            missing = [c for c in rule.columns if c not in fields]
            if missing:
                self.logger.warning("Rule %s references missing columns %s", rule.name, missing)
                return RuleResult.errored(rule, f"RuleEvaluationError: missing columns: {missing}")

        projection = list(dict.fromkeys(list(rule.columns) + key_columns))

        def rule_pass() -> RuleResult:
            records = source.records(table, columns=projection)
            if self.rule_timeout is not None:
                records = _with_deadline(records, rule.name, self.rule_timeout)
            return rule.evaluate(records, key_columns=key_columns, sample_size=self.sample_size)

        try:
            if self.rule_timeout is None:
                result = rule_pass()
            else:
                result = self._run_with_timeout(rule, rule_pass)
        except Exception as exc:
            self.logger.warning("Rule %s errored: %s", rule.name, exc)
            return RuleResult.errored(rule, f"{type(exc).__name__}: {exc}")

        self.logger.info(
            "Rule %s: %s (%d/%d)",
            rule.name, result.severity, result.violation_count, result.total_examined,
        )
        return result

    def _run_with_timeout(self, rule: Rule, rule_pass: Callable[[], RuleResult]) -> RuleResult:
        """
        Run one pass on its own thread and wait at most ``rule_timeout``.

        A pass blocked inside the source is abandoned, not interrupted: its
        thread finishes in the background and its result is discarded.
        """
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix='dq-pass')
        future = pool.submit(rule_pass)
        try:
            return future.result(timeout=self.rule_timeout)
        except FutureTimeout:
            raise RuleTimeout(f"rule {rule.name!r} exceeded {self.rule_timeout}s") from None
        finally:
            pool.shutdown(wait=False)
