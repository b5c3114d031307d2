"""Non-critical side effects: run, capture the outcome, log it, never raise.

The spreadsheet mirror is one of these.  The request that triggers it has
already committed its real work, so whatever happens here is only logged.
In ``background`` mode the callable runs on a daemon thread and the
request does not wait for it; ``inline`` mode runs it before returning
(handy for tests and for the CLI).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

log = logging.getLogger(__name__)

BACKGROUND = "background"
INLINE = "inline"


@dataclass
class SideEffectOutcome:
    name: str
    ok: bool
    result: Any = None
    reason: str = ""


class NonCriticalTask:
    def __init__(self, name: str, func: Callable[..., Any], *args: Any, **kwargs: Any):
        self.name = name
        self.func = func
        self.args = args
        self.kwargs = kwargs
        self.outcome: Optional[SideEffectOutcome] = None
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run(self) -> SideEffectOutcome:
        try:
            result = self.func(*self.args, **self.kwargs)
        except Exception as exc:
            log.warning("%s failed (ignored): %s", self.name, exc, exc_info=True)
            self.outcome = SideEffectOutcome(self.name, False, reason=f"{type(exc).__name__}: {exc}")
        else:
            log.info("%s completed", self.name)
            self.outcome = SideEffectOutcome(self.name, True, result=result)
        finally:
            self._done.set()
        return self.outcome

    def start(self) -> "NonCriticalTask":
        self._thread = threading.Thread(target=self.run, name=self.name, daemon=True)
        self._thread.start()
        return self

    def wait(self, timeout: Optional[float] = None) -> Optional[SideEffectOutcome]:
        self._done.wait(timeout)
        return self.outcome


def dispatch(name: str, func: Callable[..., Any], *args: Any, mode: str = BACKGROUND, **kwargs: Any) -> NonCriticalTask:
    """Run *func* as a non-critical side effect and return the task handle."""

    task = NonCriticalTask(name, func, *args, **kwargs)
    if mode == INLINE:
        task.run()
    else:
        task.start()
    return task
