# flowstate/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Callable, Hashable, TypeVar

S = TypeVar("S", bound=Hashable)
E = TypeVar("E", bound=Hashable)
C = TypeVar("C")

EventID = Hashable

# Callback Types
GuardCheck = Callable[[Any, Any], bool]
ActionExec = Callable[[Any, Any], None]
ErrorHandlerFunc = Callable[[Any, Any, Any, Exception], Any]
