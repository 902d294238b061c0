# flowstate/plugins/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from .state_handlers import StateHandler, StateHandlerRegistry

__all__ = ["StateHandler", "StateHandlerRegistry"]
