"""flowstate: embeddable finite state machine engine

Host applications declare states, events, guarded transition rules and
actions over a context value they own, then drive the machine by firing
events against a current state they also own.

Responsibilities:
    - Transition resolution (first passing guard in registration order wins)
    - Entry/exit/transition action ordering
    - Auto-transition chaining with cycle detection
    - Static validation of the rule graph
    - Introspection and diagram generation

Cross-cutting Concerns:
    Thread Safety:
        - Built machines are immutable and may be shared across threads
        - Context objects are owned and synchronized by the caller

    Error Handling:
        - Resolution failures are returned as TransitionResult values
        - Guard/action failures go to the configured error handler or propagate

    Logging:
        - Standard library logging under the "flowstate" logger
"""

import logging

from flowstate.core import *  # noqa: F401,F403
from flowstate.core import __all__ as _core_all

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = list(_core_all)
