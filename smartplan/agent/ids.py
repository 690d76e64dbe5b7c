from __future__ import annotations

import time
from typing import Callable, Optional

from ..config import ID_COUNTER_MODULO


class IdGenerator:
  """Numeric task ids: millisecond timestamp * 1000 + a rolling counter.

  The counter wraps modulo 1000. Ids are strictly increasing for the life of
  the generator, so a burst of calls inside one tick (or a clock step
  backwards) still never repeats an id.
  """

  def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
    self._clock = clock or time.time
    self._counter = 0
    self._last_id = 0

  def next_id(self) -> int:
    timestamp = int(self._clock() * 1000)
    candidate = timestamp * ID_COUNTER_MODULO + self._counter
    self._counter = (self._counter + 1) % ID_COUNTER_MODULO
    if candidate <= self._last_id:
      candidate = self._last_id + 1
    self._last_id = candidate
    return candidate


default_id_generator = IdGenerator()
