"""
Validation report generation.

Structures rule results into a report with pass/fail/error counts,
failure details, and summary statistics. Rendering never includes
wall-clock data, so identical inputs render byte-identically.
"""

import json
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from .rules import RuleResult


class RunStatus(str, Enum):
    PENDING = 'pending'
    RUNNING = 'running'
    COMPLETED = 'completed'
    ABORTED = 'aborted'


@dataclass
class Report:
    """
    Structured output from an evaluation run.

    Attributes:
        name: Name of this run (usually the registry name).
        table: Table the rules were evaluated against.
        results: One result per registered rule, in registry order.
        status: Run status.
    """
    name: str
    table: str
    results: List[RuleResult] = field(default_factory=list)
    status: RunStatus = RunStatus.COMPLETED

    def __post_init__(self):
        self._append_lock = threading.Lock()

    def append(self, result: RuleResult) -> None:
        """Append a result. Writers are serialized; readers never block."""
        with self._append_lock:
            self.results = self.results + [result]

    @property
    def passed(self) -> bool:
        """True if every rule passed."""
        return all(r.passed for r in self.results)

    @property
    def pass_count(self) -> int:
        return sum(1 for r in self.results if r.status == 'pass')

    @property
    def fail_count(self) -> int:
        return sum(1 for r in self.results if r.status == 'fail')

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if r.status == 'error')

    @property
    def total_rules(self) -> int:
        return len(self.results)

    @property
    def failures(self) -> List[RuleResult]:
        """Return only failed results."""
        return [r for r in self.results if r.status == 'fail']

    @property
    def errors(self) -> List[RuleResult]:
        return [r for r in self.results if r.status == 'error']

    def result_for(self, rule_name: str) -> Optional[RuleResult]:
        for r in self.results:
            if r.rule_name == rule_name:
                return r
        return None

    def summarize(self) -> Dict[str, int]:
        return {
            'total_rules': self.total_rules,
            'passed': self.pass_count,
            'failed': self.fail_count,
            'errored': self.error_count,
        }

    def anomaly_summary(self) -> Dict[str, int]:
        """Violation count per rule, in registry order."""
        return {r.rule_name: r.violation_count for r in self.results}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the full report to a dictionary."""
        return {
            'name': self.name,
            'table': self.table,
            'status': self.status.value,
            'passed': self.passed,
            'summary': self.summarize(),
            'results': [r.to_dict() for r in self.results],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True, default=str)

    def to_frame(self) -> pd.DataFrame:
        """One row per rule, for tabular display or export."""
        return pd.DataFrame(
            [
                {
                    'rule': r.rule_name,
                    'kind': r.kind,
                    'columns': ','.join(r.columns),
                    'severity': r.severity,
                    'total_examined': r.total_examined,
                    'violation_count': r.violation_count,
                    'error': r.error,
                }
                for r in self.results
            ],
            columns=['rule', 'kind', 'columns', 'severity',
                     'total_examined', 'violation_count', 'error'],
        )

    def render(self) -> str:
        """Deterministic plain-text rendering."""
        status = 'PASSED' if self.passed else 'FAILED'
        summary = self.summarize()
        lines = [
            '=' * 60,
            f"  Validation: {self.name}",
            f"  Table:      {self.table}",
            f"  Status:     {status} ({self.status.value})",
            f"  Rules:      {summary['passed']}/{summary['total_rules']} passed, "
            f"{summary['failed']} failed, {summary['errored']} errored",
            '=' * 60,
        ]
        width = max([len(r.rule_name) for r in self.results] + [4])
        for r in self.results:
            line = (
                f"  {r.severity:<5}  {r.rule_name:<{width}}  "
                f"{r.violation_count}/{r.total_examined}"
            )
            if r.error:
                line = f"{line}  {r.error}"
            lines.append(line)
        return '\n'.join(lines) + '\n'

    def print_summary(self) -> None:
        """Print a concise summary to stdout."""
        status = 'PASSED' if self.passed else 'FAILED'
        print(f"\n{'=' * 60}")
        print(f"  Validation: {self.name}")
        print(f"  Status:     {status}")
        print(f"  Rules:      {self.pass_count}/{self.total_rules} passed")
        print(f"  Table:      {self.table}")
        print(f"{'=' * 60}")

    def print_failures(self) -> None:
        """Print details of failed and errored rules."""
        problems = [r for r in self.results if not r.passed]
        if not problems:
            print("  No failures.")
            return

        print(f"\n  Failures ({len(problems)}):")
        print(f"  {'-' * 56}")
        for r in problems:
            print(f"  {r.severity:<5} {r.rule_name}")
            print(f"        columns: {', '.join(r.columns)}")
            if r.error:
                print(f"        error: {r.error}")
            else:
                print(f"        violations: {r.violation_count}/{r.total_examined}")
            for key, val in r.details.items():
                print(f"        {key}: {val}")
            for v in r.violations:
                print(f"        row {v.row_number}: {v.key if v.key is not None else v.record}")
            print()
