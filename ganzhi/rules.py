"""
Custom chart rules.

A RuleSet is a caller-owned list of named predicates over a chart, for
reports that want to flag their own situations ("has a Fu Yin", "water
over 40%"). Core calculations never consult it.

A RuleSet is not thread-safe: guard register / clear / evaluate with
your own lock if one instance is shared between threads.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List

from ganzhi.pillars import FourPillars

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartRule:
    name: str
    predicate: Callable[[FourPillars], bool]


class RuleSet:
    def __init__(self, rules=None):
        self._rules: List[ChartRule] = list(rules or [])

    def __len__(self):
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    @property
    def names(self) -> list:
        return [rule.name for rule in self._rules]

    def register(self, name: str, predicate: Callable[[FourPillars], bool]) -> ChartRule:
        """Append a rule. Names need not be unique; rules run in registration order."""
        if not callable(predicate):
            raise TypeError(f"Rule {name!r}: predicate must be callable")
        rule = ChartRule(name, predicate)
        self._rules.append(rule)
        return rule

    def clear(self) -> None:
        self._rules.clear()

    def evaluate(self, chart: FourPillars) -> list:
        """Names of the rules whose predicate holds for the chart."""
        matched = []
        for rule in self._rules:
            if rule.predicate(chart):
                matched.append(rule.name)
        logger.debug("custom rules matched %d of %d", len(matched), len(self._rules))
        return matched
