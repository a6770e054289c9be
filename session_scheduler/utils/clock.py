from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], float]


def now() -> float:
    """Current wall-clock time in epoch seconds."""
    return time.time()
