"""Ordered key/value container helpers.

`FluentArray` keeps its items as an ordered mapping. Sequences become the keys
`0..n-1`; mappings keep their keys. Positional inserts renumber integer keys and
keep string keys, so a plain list stays a plain list.

Value matching follows one of two explicit policies:

- strict: same type and equal (`1` does not match `1.0`, `"1"` or `True`);
- loose: equal, or both sides are numbers or numeric strings with the same
  numeric value (`"3"` matches `3`). Nothing else is coerced.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Hashable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

_NUMERIC_STRING = re.compile(r"\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*")
_COLLECTIONS = (list, tuple, set, frozenset)


# ============================================================================
#                               Equality policy
# ============================================================================


def strict_equals(a: Any, b: Any) -> bool:
    """Return True if `a` and `b` have the same type and compare equal."""
    return type(a) is type(b) and a == b


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float | Decimal):
        return float(value)
    if isinstance(value, str) and _NUMERIC_STRING.fullmatch(value):
        return float(value)
    return None


def loose_equals(a: Any, b: Any) -> bool:
    """Return True if `a` and `b` are equal, coercing numeric strings to numbers."""
    # booleans only ever match booleans
    if isinstance(a, bool) or isinstance(b, bool):
        return strict_equals(a, b)
    if a == b:
        return True
    left, right = _as_number(a), _as_number(b)
    return left is not None and right is not None and left == right


def _matcher(strict: bool):
    return strict_equals if strict else loose_equals


# ============================================================================
#                               Flatten
# ============================================================================


def flatten(value: Any, target: list[Any] | None = None) -> list[Any]:
    """Recursively flatten nested lists, tuples and mappings.

    `[[1, 2], [3]]` becomes `[1, 2, 3]`. Mappings contribute their values,
    strings are leaves, empty containers contribute nothing.

    Args:
        value: The value to flatten. A non-container value is a single leaf.
        target: Optional list to append to. It is extended in place.

    Returns:
        The target list (a new list if none was given).
    """
    if target is None:
        target = []

    if isinstance(value, Mapping):
        for piece in value.values():
            flatten(piece, target)
    elif isinstance(value, list | tuple):
        for piece in value:
            flatten(piece, target)
    else:
        target.append(value)

    return target


# ============================================================================
#                               Insertion points
# ============================================================================


class Side(Enum):
    """Which side of the anchor an insert goes to."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class InsertionPoint:
    """Where to insert into a `FluentArray`, produced by its locator methods.

    The point describes the anchor only; it is resolved against the array when
    `insert()` runs.
    """

    array: FluentArray = field(repr=False, compare=False)
    anchor: Any
    side: Side
    by_key: bool = False
    strict: bool = True

    def insert(self, value: Any, key: Hashable | None = None) -> FluentArray:
        """Insert `value` at this point and return the array."""
        return self.array.insert(value, key, at=self)


# ============================================================================
#                               FluentArray
# ============================================================================


def _to_items(items: Iterable[Any] | Mapping[Hashable, Any]) -> dict[Hashable, Any]:
    if isinstance(items, Mapping):
        return dict(items)
    return dict(enumerate(items))


def _renumber(pairs: list[tuple[Hashable | None, Any]]) -> dict[Hashable, Any]:
    """Rebuild a mapping, renumbering integer (and missing) keys from zero."""
    result: dict[Hashable, Any] = {}
    counter = 0
    for key, value in pairs:
        if key is None or (isinstance(key, int) and not isinstance(key, bool)):
            result[counter] = value
            counter += 1
        else:
            result[key] = value
    return result


class FluentArray:
    """Chainable wrapper around an ordered key/value container.

    Example:
        ```py
        arr([1, 3, 4]).before(3).insert(2).to_list()  # [1, 2, 3, 4]
        ```
    """

    def __init__(self, items: Iterable[Any] | Mapping[Hashable, Any]) -> None:
        self._items = _to_items(items)

    def __repr__(self) -> str:
        return f"FluentArray({self.value!r})"

    def __str__(self) -> str:
        return repr(self.value)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items.values())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FluentArray):
            return list(self._items.items()) == list(other._items.items())
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    # --- Accessors ---

    @property
    def value(self) -> list[Any] | dict[Hashable, Any]:
        """The items as a list if keys are exactly `0..n-1`, otherwise as a dict."""
        if list(self._items) == list(range(len(self._items))):
            return list(self._items.values())
        return dict(self._items)

    def set_array(self, items: Iterable[Any] | Mapping[Hashable, Any]) -> FluentArray:
        """Replace the wrapped items."""
        self._items = _to_items(items)
        return self

    def to_list(self) -> list[Any]:
        """Return the values in order, dropping keys."""
        return list(self._items.values())

    def to_dict(self) -> dict[Hashable, Any]:
        """Return a copy of the key/value mapping."""
        return dict(self._items)

    # --- Transformations ---

    def flatten(self, target: list[Any] | None = None) -> FluentArray:
        """Replace the items with their recursively flattened values.

        Args:
            target: Optional list whose items come first. It is extended in place.
        """
        self._items = _to_items(flatten(list(self._items.values()), target))
        return self

    def remove(self, value: Any, strict: bool = True) -> FluentArray:
        """Remove every element equal to `value`.

        Args:
            value: A value, or a list/tuple/set of values to remove.
            strict: Use strict (type and value) comparison.
        """
        matches = _matcher(strict)
        candidates = list(value) if isinstance(value, _COLLECTIONS) else [value]

        self._items = {
            k: v
            for k, v in self._items.items()
            if not any(matches(v, candidate) for candidate in candidates)
        }
        return self

    # --- Lookup ---

    def index_of(self, value: Any, strict: bool = True) -> int | None:
        """Get the 0-based position of the first element equal to `value`."""
        matches = _matcher(strict)
        for position, element in enumerate(self._items.values()):
            if matches(element, value):
                return position
        return None

    def index_of_key(self, key: Hashable, strict: bool = True) -> int | None:
        """Get the 0-based position of `key`."""
        matches = _matcher(strict)
        for position, element_key in enumerate(self._items):
            if matches(element_key, key):
                return position
        return None

    # --- Insertion ---

    def before(self, value: Any, strict: bool = True) -> InsertionPoint:
        """Point before the first element equal to `value`."""
        return InsertionPoint(self, value, Side.BEFORE, by_key=False, strict=strict)

    def before_key(self, key: Hashable, strict: bool = True) -> InsertionPoint:
        """Point before the element stored under `key`."""
        return InsertionPoint(self, key, Side.BEFORE, by_key=True, strict=strict)

    def after(self, value: Any, strict: bool = True) -> InsertionPoint:
        """Point after the first element equal to `value`."""
        return InsertionPoint(self, value, Side.AFTER, by_key=False, strict=strict)

    def after_key(self, key: Hashable, strict: bool = True) -> InsertionPoint:
        """Point after the element stored under `key`."""
        return InsertionPoint(self, key, Side.AFTER, by_key=True, strict=strict)

    def insert(
        self,
        value: Any,
        key: Hashable | None = None,
        at: InsertionPoint | None = None,
    ) -> FluentArray:
        """Insert a value, at the end or relative to an insertion point.

        Without `at` the value is appended under the next integer key, or stored
        under `key` when given (replacing an existing value in place).

        With `at`, the anchor is located first; if it is missing, or if `key` is
        already present, the array is left unchanged. Integer keys are renumbered
        after a positional insert.

        Args:
            value: The value to insert.
            key: Optional key for the new value.
            at: Optional insertion point from `before()`, `after()` and friends.

        Returns:
            This array.
        """
        if at is None:
            self._append(value, key)
            return self

        if at.by_key:
            index = self.index_of_key(at.anchor, at.strict)
        else:
            index = self.index_of(at.anchor, at.strict)

        if index is None:
            logger.debug("Insert anchor %r not found; array unchanged", at.anchor)
            return self

        if key is not None and key in self._items:
            logger.debug("Insert key %r already present; array unchanged", key)
            return self

        if at.side is Side.AFTER:
            index += 1

        pairs: list[tuple[Hashable | None, Any]] = list(self._items.items())
        pairs.insert(index, (key, value))
        self._items = _renumber(pairs)
        return self

    def _append(self, value: Any, key: Hashable | None) -> None:
        if key is not None:
            self._items[key] = value
            return

        int_keys = [
            k for k in self._items if isinstance(k, int) and not isinstance(k, bool)
        ]
        self._items[max(int_keys) + 1 if int_keys else 0] = value
