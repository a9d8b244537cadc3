# ==================================================
# kvset_store/sorted_set.py
# ==================================================
from typing import Iterable, Iterator

import numpy as np

from .const import INT32_MIN, INT32_MAX

_DTYPE = np.int32


def check_value(value) -> int:
    """Return `value` as a plain int, rejecting anything a snapshot can't hold."""
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise TypeError(f"value must be an int, not {type(value).__name__}")
    value = int(value)
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValueError(f"value {value} outside the int32 range")
    return value


class ValueSet:
    """Ascending, duplicate-free int32 values kept in a numpy array."""
    __slots__ = ("_values",)

    def __init__(self, values: Iterable[int] = ()):
        checked = [check_value(v) for v in values]
        # np.unique sorts and drops duplicates in one pass
        self._values = np.unique(np.asarray(checked, dtype=_DTYPE))

    # ------------------------------------------------------------------
    def _position(self, value: int) -> int:
        return int(np.searchsorted(self._values, value))

    def add(self, value) -> bool:
        value = check_value(value)
        i = self._position(value)
        if i < len(self._values) and self._values[i] == value:
            return False
        self._values = np.insert(self._values, i, value)
        return True

    def discard(self, value) -> bool:
        value = check_value(value)
        i = self._position(value)
        if i == len(self._values) or self._values[i] != value:
            return False
        self._values = np.delete(self._values, i)
        return True

    # ------------------------------------------------------------------
    def __contains__(self, value) -> bool:
        try:
            value = check_value(value)
        except (TypeError, ValueError):
            return False
        i = self._position(value)
        return i < len(self._values) and self._values[i] == value

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(self._values.tolist())

    def __eq__(self, other):
        if isinstance(other, ValueSet):
            return np.array_equal(self._values, other._values)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"ValueSet({self._values.tolist()!r})"

    def as_tuple(self) -> tuple[int, ...]:
        return tuple(self._values.tolist())

    def to_array(self) -> np.ndarray:
        return self._values.copy()
