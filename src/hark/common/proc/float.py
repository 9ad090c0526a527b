from typing import Any

import numpy as np
from structlog.typing import EventDict, WrappedLogger


class FloatPrecisionProcessor:
  """
  A structlog processor for rounding floats, as single values or inside (nested) lists,
  dicts and numpy arrays.
  """

  def __init__(
    self,
    digits: int = 3,
    only_fields: frozenset[str] = frozenset(),
    not_fields: frozenset[str] = frozenset(),
    np_array_to_list: bool = True,
  ):
    """
    :param digits: The number of digits to round to
    :param only_fields: Fields to round (empty = round all fields except not_fields)
    :param not_fields: Fields never to round
    :param np_array_to_list: Whether to cast np.ndarray to list for nicer printing
    """
    self.digits = digits
    self.np_array_to_list = np_array_to_list
    self.only_fields = only_fields
    self.not_fields = not_fields

  def _round(self, value: Any) -> Any:
    if isinstance(value, bool):
      return value
    if isinstance(value, float | np.floating):
      return round(float(value), self.digits)
    if self.np_array_to_list and isinstance(value, np.ndarray):
      return self._round(value.tolist())
    if isinstance(value, list):
      return [self._round(item) for item in value]
    if isinstance(value, dict):
      return {k: self._round(v) for k, v in value.items()}
    return value

  def __call__(self, _: WrappedLogger, __: str, event_dict: EventDict):
    for key, value in event_dict.items():
      if self.only_fields and key not in self.only_fields:
        continue
      if key in self.not_fields:
        continue
      event_dict[key] = self._round(value)
    return event_dict
