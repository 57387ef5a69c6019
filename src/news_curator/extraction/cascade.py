"""Ordered fallback chains for selector-based extraction.

A cascade is an explicit list of named steps. Each step has a predicate
(does this step apply to the source?) and an extractor; the first step whose
extractor returns a non-empty value wins.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Generic, NamedTuple, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")
R = TypeVar("R")


def always(_source: object) -> bool:
    return True


class CascadeStep(NamedTuple, Generic[S, R]):
    name: str
    applies: Callable[[S], bool]
    extract: Callable[[S], R | None]


def run_cascade(steps: Sequence[CascadeStep[S, R]], source: S) -> tuple[R | None, str | None]:
    """Evaluate steps in order. Returns (value, step name) or (None, None)."""
    for step in steps:
        if not step.applies(source):
            continue
        value = step.extract(source)
        if value:
            logger.debug("Cascade step %s matched", step.name)
            return value, step.name
    return None, None
