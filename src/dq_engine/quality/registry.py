"""
Ordered, name-unique collection of rules.

The registry is built once and locked by the Evaluator when a run
begins; later mutation raises RegistryLocked.
"""

import threading
from typing import Iterable, Iterator, List, Tuple

from .errors import DuplicateRuleName, RegistryLocked
from .rules import Rule


class RuleRegistry:
    """
    A named, ordered collection of rules that run together.

    Usage:
        registry = RuleRegistry("supastore")
        registry.register(CompletenessRule(["order_id"]))
        registry.register(DuplicateCheckRule(["order_id"]))
        report = Evaluator().run(registry, source, "supastore_db")
    """

    def __init__(self, name: str = 'default'):
        self.name = name
        self._rules: List[Rule] = []
        self._locked = False
        self._lock = threading.Lock()

    def register(self, rule: Rule) -> 'RuleRegistry':
        with self._lock:
            if self._locked:
                raise RegistryLocked(
                    f"registry {self.name!r} is locked; cannot register {rule.name!r}"
                )
            if any(r.name == rule.name for r in self._rules):
                raise DuplicateRuleName(rule.name)
            self._rules.append(rule)
        return self

    def register_all(self, rules: Iterable[Rule]) -> 'RuleRegistry':
        for rule in rules:
            self.register(rule)
        return self

    def lock(self) -> None:
        """Freeze the registry. Idempotent."""
        with self._lock:
            self._locked = True

    @property
    def locked(self) -> bool:
        return self._locked

    def all(self) -> Tuple[Rule, ...]:
        return tuple(self._rules)

    def names(self) -> List[str]:
        return [r.name for r in self._rules]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._rules)
