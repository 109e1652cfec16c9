"""Declarative pattern cascades used by the field extractors.

Every cascade is an ordered list of :class:`PatternStrategy` objects. The
first strategy whose match survives its transform and validity check wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Pattern


@dataclass(frozen=True)
class PatternStrategy:
    """One regex-backed attempt at extracting a field value."""

    name: str
    pattern: Pattern[str]
    group: int = 0
    transform: Optional[Callable[[str], Optional[str]]] = None
    validate: Optional[Callable[[str], bool]] = None

    def try_extract(self, text: str) -> Optional[str]:
        for match in self.pattern.finditer(text):
            raw = match.group(self.group) if self.group <= (self.pattern.groups or 0) else None
            if raw is None:
                raw = match.group(0)
            value = self.transform(raw) if self.transform else raw.strip()
            if not value:
                continue
            if self.validate and not self.validate(value):
                continue
            return value
        return None


def run_cascade(strategies: Iterable[PatternStrategy], text: str) -> Optional[str]:
    for strategy in strategies:
        value = strategy.try_extract(text)
        if value is not None:
            return value
    return None


def compile_strategy(
    name: str,
    regex: str,
    flags: int = 0,
    group: int = 0,
    transform: Optional[Callable[[str], Optional[str]]] = None,
    validate: Optional[Callable[[str], bool]] = None,
) -> PatternStrategy:
    return PatternStrategy(name, re.compile(regex, flags), group, transform, validate)


__all__ = ["PatternStrategy", "compile_strategy", "run_cascade"]
