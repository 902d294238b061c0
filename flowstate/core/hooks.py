# flowstate/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Tuple

from flowstate.core.results import DebugInfo

logger = logging.getLogger(__name__)


class StateMachineListener:
    """
    Base class for objects observing a machine. Every method is optional; a
    listener may also be any object defining a subset of them.
    """

    def on_state_exit(self, state: Any, event: Any, context: Any) -> None:
        pass

    def on_transition(self, from_state: Any, to_state: Any, event: Any, context: Any) -> None:
        pass

    def on_state_entry(self, state: Any, event: Any, context: Any) -> None:
        pass

    def on_transition_error(self, state: Any, event: Any, context: Any, error: Exception) -> None:
        pass

    def on_fire(self, debug_info: DebugInfo) -> None:
        """Called once per ``fire`` call with the definitive trace entry."""


class HookManager:
    """
    Dispatches lifecycle notifications to registered listeners. A listener
    that raises is logged and skipped; it never changes the outcome of a
    ``fire`` call.
    """

    def __init__(self, listeners: Optional[Iterable[Any]] = None) -> None:
        self._listeners: Tuple[Any, ...] = tuple(listeners or ())

    @property
    def listeners(self) -> Tuple[Any, ...]:
        return self._listeners

    def __len__(self) -> int:
        return len(self._listeners)

    def state_exited(self, state: Any, event: Any, context: Any) -> None:
        self._invoke("on_state_exit", state, event, context)

    def transitioned(self, from_state: Any, to_state: Any, event: Any, context: Any) -> None:
        self._invoke("on_transition", from_state, to_state, event, context)

    def state_entered(self, state: Any, event: Any, context: Any) -> None:
        self._invoke("on_state_entry", state, event, context)

    def transition_failed(self, state: Any, event: Any, context: Any, error: Exception) -> None:
        self._invoke("on_transition_error", state, event, context, error)

    def fired(self, debug_info: DebugInfo) -> None:
        self._invoke("on_fire", debug_info)

    def _invoke(self, method: str, *args: Any) -> None:
        for listener in self._listeners:
            hook = getattr(listener, method, None)
            if hook is None:
                continue
            try:
                hook(*args)
            except Exception:
                logger.warning(
                    "Listener %s failed during %s%r", type(listener).__name__, method, args, exc_info=True
                )
