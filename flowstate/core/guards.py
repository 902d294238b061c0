# flowstate/core/guards.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from flowstate.core.errors import ConfigurationError
from flowstate.core.results import TransitionInfo
from flowstate.interfaces.types import GuardCheck


@runtime_checkable
class Guard(Protocol):
    """
    Guard protocol. A guard decides whether a transition rule applies.

    Runtime Invariants:
    - Guards are side-effect free
    - Guards may be evaluated more than once per ``fire`` call
    """

    def evaluate(self, transition: TransitionInfo, context: Any) -> bool: ...


class GuardCondition:
    """
    Wraps a predicate ``(transition, context) -> bool`` and lets guards be
    composed with ``&``, ``|`` and ``~``.

    A condition built with ``unconditional=True`` is statically known to
    always pass; the validator relies on that flag to report ambiguous rules.
    """

    def __init__(self, condition: GuardCheck, unconditional: bool = False) -> None:
        self._condition = condition
        self._unconditional = unconditional

    @property
    def unconditional(self) -> bool:
        return self._unconditional

    def evaluate(self, transition: TransitionInfo, context: Any) -> bool:
        return bool(self._condition(transition, context))

    def __and__(self, other: Any) -> "GuardCondition":
        right = as_guard(other)
        return GuardCondition(
            lambda t, c: self.evaluate(t, c) and right.evaluate(t, c),
            unconditional=self._unconditional and is_unconditional(right),
        )

    def __or__(self, other: Any) -> "GuardCondition":
        right = as_guard(other)
        return GuardCondition(
            lambda t, c: self.evaluate(t, c) or right.evaluate(t, c),
            unconditional=self._unconditional or is_unconditional(right),
        )

    def __invert__(self) -> "GuardCondition":
        return GuardCondition(lambda t, c: not self.evaluate(t, c))

    def __repr__(self) -> str:
        return f"GuardCondition({self._condition!r}, unconditional={self._unconditional})"


def always() -> GuardCondition:
    """A guard that always passes."""
    return GuardCondition(lambda t, c: True, unconditional=True)


def when(condition: Callable[[Any], bool]) -> GuardCondition:
    """Build a guard from a predicate over the context alone."""
    return GuardCondition(lambda t, c: condition(c))


def as_guard(guard: Any) -> Guard:
    """
    Adapt ``guard`` to the Guard protocol.

    :param guard: An object with ``evaluate`` or a plain callable.
    :raises ConfigurationError: If ``guard`` is neither.
    """
    if isinstance(guard, Guard):
        return guard
    if callable(guard):
        return GuardCondition(guard)
    raise ConfigurationError(f"Guard must be callable or define evaluate(), got {type(guard).__name__}")


def is_unconditional(guard: Optional[Any]) -> bool:
    """True only for guards that provably always pass: ``None`` or ``always()``."""
    if guard is None:
        return True
    return getattr(guard, "unconditional", False) is True


def evaluate_guard(guard: Optional[Guard], transition: TransitionInfo, context: Any) -> bool:
    """Evaluate an optional guard. A missing guard always passes."""
    if guard is None:
        return True
    return bool(guard.evaluate(transition, context))
