# flowstate/core/actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable

from flowstate.core.errors import ConfigurationError
from flowstate.core.results import TransitionInfo
from flowstate.interfaces.types import ActionExec


@runtime_checkable
class Action(Protocol):
    """
    Action protocol. Actions run during transitions and may mutate the context.
    """

    def apply(self, transition: TransitionInfo, context: Any) -> None: ...


class TransitionEffect:
    """
    Adapts a callable ``(transition, context) -> None`` to the Action protocol.
    Effects compose sequentially with ``+``.
    """

    def __init__(self, action: ActionExec) -> None:
        self._action = action

    def apply(self, transition: TransitionInfo, context: Any) -> None:
        self._action(transition, context)

    def __add__(self, other: Any) -> "TransitionEffect":
        right = as_action(other)

        def _both(transition: TransitionInfo, context: Any) -> None:
            self.apply(transition, context)
            right.apply(transition, context)

        return TransitionEffect(_both)

    def __repr__(self) -> str:
        return f"TransitionEffect({self._action!r})"


def as_action(action: Any) -> Action:
    """
    Adapt ``action`` to the Action protocol.

    :param action: An object with ``apply`` or a plain callable.
    :raises ConfigurationError: If ``action`` is neither.
    """
    if isinstance(action, Action):
        return action
    if callable(action):
        return TransitionEffect(action)
    raise ConfigurationError(f"Action must be callable or define apply(), got {type(action).__name__}")


def run_actions(actions: Iterable[Action], transition: TransitionInfo, context: Any) -> None:
    """Run actions in order. The first failure propagates."""
    for action in actions:
        action.apply(transition, context)
