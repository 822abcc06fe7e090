"""Tests for state ownership slots, standalone and wired into the engine."""

from __future__ import annotations

import pytest

from tablestate.engine import GridEngine
from tablestate.exceptions import OwnershipError
from tablestate.models import PageState, SortDirection, SortState
from tablestate.ownership import External, Owned, StateSlot, as_slot


class TestSlots:
    """Tests for Owned, External and as_slot()."""

    def test_owned_stores_value(self):
        """Owned slots keep what they are given."""
        slot = Owned(1)
        slot.set(2)
        assert slot.get() == 2
        assert not slot.is_external

    def test_external_only_reports(self):
        """External slots report new values and keep the owner's value."""
        seen = []
        slot = External(1, on_change=seen.append)
        slot.set(2)
        assert seen == [2]
        assert slot.get() == 1
        assert slot.is_external

    def test_external_update(self):
        """The owner pushes its value with update()."""
        slot = External(1, on_change=lambda v: None)
        slot.update(5)
        assert slot.get() == 5

    def test_external_requires_callable(self):
        """A missing on_change is a configuration error."""
        with pytest.raises(OwnershipError):
            External(1, on_change=None)

    def test_as_slot(self):
        """Plain values are wrapped, slots pass through."""
        owned = Owned(3)
        assert as_slot(owned, 0) is owned
        assert as_slot(None, 7).get() == 7
        assert as_slot(4, 7).get() == 4
        assert isinstance(as_slot(4, 7), StateSlot)

    def test_state_slot_is_abstract(self):
        """StateSlot cannot be instantiated directly."""
        with pytest.raises(TypeError):
            StateSlot()  # pylint: disable=abstract-class-instantiated


class TestEngineOwnership:
    """Tests for externally owned engine state."""

    def test_external_selection_is_not_written(self, people, columns):
        """The engine reports a new selection but keeps reading the owner's."""
        changes = []
        slot = External(frozenset(), on_change=changes.append)
        engine = GridEngine(people, columns, lambda row, i: row["id"], selection=slot)

        engine.toggle_row_selection(2)

        assert changes == [frozenset({2})]
        assert engine.get_selection() == frozenset()

        slot.update(changes[-1])
        assert engine.get_selection() == frozenset({2})

    def test_external_sort(self, people, columns):
        """Sort requests go through the owner."""
        changes = []
        slot = External(SortState.unsorted(), on_change=changes.append)
        engine = GridEngine(people, columns, lambda row, i: row["id"], sort=slot)

        engine.request_sort("name")
        assert changes == [SortState(column_key="name", direction=SortDirection.ASCENDING)]
        assert not engine.get_sort_state().is_active

    def test_external_pagination(self, people, columns):
        """Page requests are reported with the clamped page."""
        changes = []
        slot = External(PageState(page=1, page_size=5), on_change=changes.append)
        engine = GridEngine(
            people, columns, lambda row, i: row["id"], pagination=slot, page_size_options=[2, 5]
        )

        engine.request_page_size(2)
        assert changes == [PageState(page=1, page_size=2)]
        slot.update(changes[-1])
        engine.request_page(10)
        assert changes[-1] == PageState(page=3, page_size=2)

    def test_mixed_ownership(self, people, columns):
        """Each slice picks its own strategy."""
        changes = []
        engine = GridEngine(
            people,
            columns,
            lambda row, i: row["id"],
            selection=External(frozenset(), on_change=changes.append),
            sort=Owned(SortState.unsorted()),
        )
        engine.request_sort("name")
        engine.toggle_row_selection(1)
        assert engine.get_sort_state().is_active
        assert changes == [frozenset({1})]
