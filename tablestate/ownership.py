"""State ownership strategies for the slices of engine state.

Each slice (selection, sort, pagination, favorites) is held in a slot
chosen once at construction:

- ``Owned``: the engine stores the value itself.
- ``External``: the owner outside the engine is authoritative. The engine
  reports every new value through ``on_change`` and keeps reading the
  owner's value until the owner pushes a new one with ``update``.

Usage:
    from tablestate.ownership import External

    selection = External(frozenset(), on_change=store.save_selection)
    engine = GridEngine(rows, columns, get_row_key, selection=selection)
    ...
    selection.update(store.load_selection())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from .exceptions import OwnershipError


T = TypeVar("T")


class StateSlot(ABC, Generic[T]):
    """Where one slice of engine state lives."""

    @abstractmethod
    def get(self) -> T:
        """Return the authoritative value."""
        ...

    @abstractmethod
    def set(self, value: T) -> None:
        """Accept a new value computed by the engine."""
        ...

    @property
    @abstractmethod
    def is_external(self) -> bool:
        """Whether the value is owned outside the engine."""
        ...


class Owned(StateSlot[T]):
    """Slot whose value is stored by the engine."""

    def __init__(self, value: T) -> None:
        self._value = value

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value

    @property
    def is_external(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Owned({self._value!r})"


class External(StateSlot[T]):
    """Slot whose value is owned by the caller.

    Parameters
    ----------
    value : T
        The owner's current value.
    on_change : callable
        Called with each new value the engine computes. The engine never
        writes the value back itself.

    Raises
    ------
    OwnershipError
        If ``on_change`` is not callable.
    """

    def __init__(self, value: T, on_change: Callable[[T], Any]) -> None:
        if not callable(on_change):
            raise OwnershipError("External state requires a callable on_change")
        self._value = value
        self._on_change = on_change

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._on_change(value)

    def update(self, value: T) -> None:
        """Push the owner's new authoritative value."""
        self._value = value

    @property
    def is_external(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"External({self._value!r})"


def as_slot(value: StateSlot[T] | T | None, default: T) -> StateSlot[T]:
    """Wrap a plain value (or ``None`` for the default) in an ``Owned`` slot.

    Slots are returned unchanged.
    """
    if isinstance(value, StateSlot):
        return value
    if value is None:
        return Owned(default)
    return Owned(value)
