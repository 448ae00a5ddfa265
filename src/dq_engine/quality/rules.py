"""
Validation rule definitions.

Each rule encapsulates a single data quality check of one kind and
evaluates a pass of records into a RuleResult. Rules are pure: they
never mutate the records they inspect and keep no state between passes.
"""

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .errors import RuleDefinitionError, RuleEvaluationError

Record = Mapping[str, Any]

DEFAULT_SAMPLE_SIZE = 5

KINDS = (
    'completeness',
    'null-check',
    'duplicate-check',
    'whitespace-check',
    'cross-field',
    'business-predicate',
)

OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    '<': operator.lt,
    '<=': operator.le,
    '>': operator.gt,
    '>=': operator.ge,
    '==': operator.eq,
    '!=': operator.ne,
}

_OPERATOR_NAMES = {'<': 'lt', '<=': 'le', '>': 'gt', '>=': 'ge', '==': 'eq', '!=': 'ne'}


def is_null(value: Any) -> bool:
    """True for None and pandas missing markers (NaN, NaT, pd.NA)."""
    if value is None:
        return True
    if not pd.api.types.is_scalar(value):
        return False
    return bool(pd.isna(value))


def resolve_operator(op: str) -> Callable[[Any, Any], bool]:
    try:
        return OPERATORS[op]
    except KeyError:
        raise RuleDefinitionError(
            f"unknown operator {op!r}; expected one of {sorted(OPERATORS)}"
        ) from None


@dataclass(frozen=True)
class Violation:
    """One record flagged by a rule."""
    rule_name: str
    row_number: int
    key: Optional[Tuple[Any, ...]]
    record: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rule': self.rule_name,
            'row_number': self.row_number,
            'key': list(self.key) if self.key is not None else None,
            'record': self.record,
        }


@dataclass
class RuleResult:
    """Result of a single rule evaluation."""
    rule_name: str
    kind: str
    columns: Tuple[str, ...]
    total_examined: int = 0
    violation_count: int = 0
    status: str = 'pass'
    details: Dict[str, Any] = field(default_factory=dict)
    violations: List[Violation] = field(default_factory=list)
    error: Optional[str] = None

    def __post_init__(self):
        if self.violation_count > self.total_examined:
            raise ValueError(
                f"{self.rule_name}: violation_count ({self.violation_count}) "
                f"exceeds total_examined ({self.total_examined})"
            )

    @classmethod
    def errored(cls, rule: 'Rule', error: str) -> 'RuleResult':
        """Result for a rule whose pass could not be completed."""
        return cls(
            rule_name=rule.name,
            kind=rule.kind,
            columns=rule.columns,
            status='error',
            error=error,
        )

    @property
    def passed(self) -> bool:
        return self.status == 'pass'

    @property
    def severity(self) -> str:
        return self.status.upper()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rule': self.rule_name,
            'kind': self.kind,
            'columns': list(self.columns),
            'severity': self.severity,
            'total_examined': self.total_examined,
            'violation_count': self.violation_count,
            'details': self.details,
            'violations': [v.to_dict() for v in self.violations],
            'error': self.error,
        }


class _Tally:
    """Counts examined records and keeps a bounded violation sample."""

    def __init__(self, rule: 'Rule', key_columns: Sequence[str], sample_size: int):
        self.rule = rule
        self.key_columns = tuple(key_columns)
        self.sample_size = sample_size
        self.examined = 0
        self.violations = 0
        self.samples: List[Violation] = []

    def examine(self, row_number: int, record: Record, violated: bool) -> None:
        self.examined += 1
        if not violated:
            return
        self.violations += 1
        if len(self.samples) < self.sample_size:
            key = tuple(record.get(c) for c in self.key_columns) if self.key_columns else None
            self.samples.append(Violation(self.rule.name, row_number, key, dict(record)))

    def result(self, details: Optional[Dict[str, Any]] = None) -> RuleResult:
        return RuleResult(
            rule_name=self.rule.name,
            kind=self.rule.kind,
            columns=self.rule.columns,
            total_examined=self.examined,
            violation_count=self.violations,
            status='pass' if self.violations == 0 else 'fail',
            details=details or {},
            violations=self.samples,
        )


class Rule(ABC):
    """
    Base class for all validation rules.

    Subclasses implement ``evaluate`` over a whole pass of records.
    """

    kind: str = ''

    def __init__(self, columns: Sequence[str], name: Optional[str] = None):
        if isinstance(columns, str):
            columns = [columns]
        self.columns: Tuple[str, ...] = tuple(columns)
        if not self.columns:
            raise RuleDefinitionError(f"{self.__class__.__name__} needs at least one column")
        self.name = name or self.default_name()
        if not isinstance(self.name, str):
            raise RuleDefinitionError(
                f"rule name must be a string, got {type(self.name).__name__}"
            )

    def default_name(self) -> str:
        return f"{self.kind.replace('-', '_')}_{'_'.join(self.columns)}"

    @abstractmethod
    def evaluate(
        self,
        records: Iterable[Record],
        key_columns: Sequence[str] = (),
        sample_size: int = DEFAULT_SAMPLE_SIZE,
    ) -> RuleResult:
        """Run this rule against one pass of records and return a result."""

    def _require_columns(self, record: Record) -> None:
        missing = [c for c in self.columns if c not in record]
        if missing:
            raise RuleEvaluationError(f"{self.name}: missing columns: {missing}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, columns={list(self.columns)!r})"


class RecordRule(Rule):
    """
    A rule decided one record at a time.

    ``applies_to`` says whether a record is evaluable at all; records it
    rejects are left out of the totals.
    """

    def applies_to(self, record: Record) -> bool:
        return True

    @abstractmethod
    def violates(self, record: Record) -> bool:
        """True when the record breaches the rule."""

    def details(self) -> Dict[str, Any]:
        return {}

    def evaluate(
        self,
        records: Iterable[Record],
        key_columns: Sequence[str] = (),
        sample_size: int = DEFAULT_SAMPLE_SIZE,
    ) -> RuleResult:
        tally = _Tally(self, key_columns, sample_size)
        for row_number, record in enumerate(records, start=1):
            if row_number == 1:
                self._require_columns(record)
            if not self.applies_to(record):
                continue
            tally.examine(row_number, record, self._check(row_number, record))
        return tally.result(self.details())

    def _check(self, row_number: int, record: Record) -> bool:
        try:
            return bool(self.violates(record))
        except Exception as exc:
            raise RuleEvaluationError(
                f"rule {self.name!r} failed on row {row_number}: {exc}"
            ) from exc


class CompletenessRule(Rule):
    """
    Check that required columns have a value in every record.

    ``violation_count`` counts records missing at least one column;
    per-column null counts and completeness ratios go in ``details``.

    Args:
        columns: Required column names.
    """

    kind = 'completeness'

    def evaluate(
        self,
        records: Iterable[Record],
        key_columns: Sequence[str] = (),
        sample_size: int = DEFAULT_SAMPLE_SIZE,
    ) -> RuleResult:
        tally = _Tally(self, key_columns, sample_size)
        null_counts = {c: 0 for c in self.columns}
        for row_number, record in enumerate(records, start=1):
            if row_number == 1:
                self._require_columns(record)
            missing = [c for c in self.columns if is_null(record[c])]
            for col in missing:
                null_counts[col] += 1
            tally.examine(row_number, record, bool(missing))

        total = tally.examined
        completeness = {
            c: round((total - n) / total, 4) if total > 0 else 1.0
            for c, n in null_counts.items()
        }
        return tally.result({'null_counts': null_counts, 'completeness': completeness})


class NullCheckRule(RecordRule):
    """
    Flag records where any of a fixed column set is null.

    A record counts once however many of its columns are null.
    """

    kind = 'null-check'

    def violates(self, record: Record) -> bool:
        return any(is_null(record[c]) for c in self.columns)


class DuplicateCheckRule(Rule):
    """
    Check that a (possibly composite) key is unique across the pass.

    The pass is materialized and grouped by key; every record in a group
    of size > 1 is a violation, so keys [A, B, A, C] give two violations
    in one duplicate group. Records with a null key part are skipped and
    left to the completeness and null checks.

    Args:
        columns: Columns that form the key.
    """

    kind = 'duplicate-check'

    def evaluate(
        self,
        records: Iterable[Record],
        key_columns: Sequence[str] = (),
        sample_size: int = DEFAULT_SAMPLE_SIZE,
    ) -> RuleResult:
        tally = _Tally(self, key_columns, sample_size)
        keyed: List[Tuple[int, Record]] = []
        null_keys = 0
        for row_number, record in enumerate(records, start=1):
            if row_number == 1:
                self._require_columns(record)
            if any(is_null(record[c]) for c in self.columns):
                null_keys += 1
                continue
            keyed.append((row_number, record))

        keys = pd.DataFrame(
            [[record[c] for c in self.columns] for _, record in keyed],
            columns=list(self.columns),
        )
        dup_mask = keys.duplicated(keep=False)
        groups = int(keys[dup_mask].drop_duplicates().shape[0])

        for (row_number, record), duplicated in zip(keyed, dup_mask.tolist()):
            tally.examine(row_number, record, duplicated)

        return tally.result({
            'duplicate_groups': groups,
            'unique_rows': tally.examined - tally.violations,
            'null_keys_skipped': null_keys,
        })


class WhitespaceRule(RecordRule):
    """
    Flag text values with leading or trailing whitespace.

    Null values are exempt: they are neither examined nor violations.
    Non-text values are checked on their string form.
    """

    kind = 'whitespace-check'

    def __init__(self, column: str, name: Optional[str] = None):
        super().__init__([column], name)
        self.column = column

    def applies_to(self, record: Record) -> bool:
        return not is_null(record[self.column])

    def violates(self, record: Record) -> bool:
        value = record[self.column]
        text = value if isinstance(value, str) else str(value)
        return len(text) != len(text.strip())


class CrossFieldRule(RecordRule):
    """
    Flag records where a comparison between two columns holds.

    The comparison describes the invalid state, e.g.
    ``CrossFieldRule('ship_date', '<', 'order_date')``. Records with a
    null on either side are not evaluable and are excluded from totals.
    """

    kind = 'cross-field'

    def __init__(self, left: str, op: str, right: str, name: Optional[str] = None):
        self.left = left
        self.op = op
        self.right = right
        self._compare = resolve_operator(op)
        super().__init__([left, right], name)

    def default_name(self) -> str:
        return f"cross_field_{self.left}_{_OPERATOR_NAMES[self.op]}_{self.right}"

    def applies_to(self, record: Record) -> bool:
        return not (is_null(record[self.left]) or is_null(record[self.right]))

    def violates(self, record: Record) -> bool:
        return self._compare(record[self.left], record[self.right])

    def details(self) -> Dict[str, Any]:
        return {'condition': f"{self.left} {self.op} {self.right}"}


class BusinessPredicateRule(RecordRule):
    """
    User-defined domain rule over a single record.

    Args:
        columns: Columns the predicate reads. Records with a null in any
                 of them are excluded from totals.
        predicate: A function taking a record and returning True when the
                   record breaches the rule.
        name: Rule name.
        description: Optional human-readable condition for reports.
    """

    kind = 'business-predicate'

    def __init__(
        self,
        columns: Sequence[str],
        predicate: Callable[[Record], bool],
        name: str = 'business_rule',
        description: Optional[str] = None,
    ):
        super().__init__(columns, name)
        self.predicate = predicate
        self.description = description

    @classmethod
    def comparison(
        cls,
        column: str,
        op: str,
        value: Any,
        name: Optional[str] = None,
    ) -> 'BusinessPredicateRule':
        """Build a rule violated when ``record[column] <op> value`` holds."""
        compare = resolve_operator(op)
        return cls(
            columns=[column],
            predicate=lambda record: compare(record[column], value),
            name=name or f"business_{column}_{_OPERATOR_NAMES[op]}_{value}",
            description=f"{column} {op} {value!r}",
        )

    def applies_to(self, record: Record) -> bool:
        return not any(is_null(record[c]) for c in self.columns)

    def violates(self, record: Record) -> bool:
        return self.predicate(record)

    def details(self) -> Dict[str, Any]:
        return {'condition': self.description} if self.description else {}
