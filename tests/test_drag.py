import pytest

from core.drag import (
    DragTransferCoordinator, DragPhase, Placeholder, SlotGeometry, PLACEHOLDER, find_insertion_slot,
)
from core.models.results import FailureKind, SaveStatus

def column_layout(*ids, top=0, height=100):
    """Stack elements of equal height from top downwards."""
    return [SlotGeometry(book_id, top + i * height, height) for i, book_id in enumerate(ids)]

class TestFindInsertionSlot:
    def test_pointer_above_everything_inserts_before_first(self):
        assert find_insertion_slot(column_layout("a", "b", "c"), 10) == "a"

    def test_pointer_between_midpoints(self):
        # midpoints at 50, 150, 250
        assert find_insertion_slot(column_layout("a", "b", "c"), 120) == "b"
        assert find_insertion_slot(column_layout("a", "b", "c"), 220) == "c"

    def test_pointer_below_last_midpoint_appends(self):
        assert find_insertion_slot(column_layout("a", "b", "c"), 260) is None

    def test_pointer_exactly_on_midpoint_goes_after(self):
        assert find_insertion_slot(column_layout("a", "b"), 50) == "b"

    def test_empty_column(self):
        assert find_insertion_slot([], 42) is None

    def test_dragged_element_is_skipped(self):
        assert find_insertion_slot(column_layout("a", "b", "c"), 120, dragging_id="b") == "c"

    def test_unordered_elements_pick_the_closest_below(self):
        elements = [SlotGeometry("low", 400, 100), SlotGeometry("near", 200, 100), SlotGeometry("top", 0, 100)]
        assert find_insertion_slot(elements, 120) == "near"

    def test_ties_keep_the_first_element(self):
        elements = [SlotGeometry("first", 100, 100), SlotGeometry("second", 100, 100)]
        assert find_insertion_slot(elements, 0) == "first"

@pytest.fixture
def coordinator(populated_store):
    return DragTransferCoordinator(populated_store)

def test_initial_view_matches_store(coordinator):
    assert coordinator.phase == DragPhase.IDLE
    assert coordinator.view == {"to-read": ["b1", "b2"], "reading": [], "read": ["b3"], "favorites": []}

def test_start_places_placeholder_after_dragged_book(coordinator):
    assert coordinator.start("b1", "to-read")
    assert coordinator.phase == DragPhase.DRAGGING
    assert coordinator.placeholder == Placeholder(column="to-read", before="b2")
    assert coordinator.preview()["to-read"] == ["b1", PLACEHOLDER, "b2"]

def test_start_last_book_places_placeholder_at_end(coordinator):
    coordinator.start("b2", "to-read")
    assert coordinator.placeholder == Placeholder(column="to-read", before=None)

@pytest.mark.parametrize("book_id, column", [("b3", "to-read"), ("missing", "read"), ("b1", "attic")])
def test_start_rejects_books_not_shown(coordinator, book_id, column):
    assert not coordinator.start(book_id, column)
    assert coordinator.phase == DragPhase.IDLE

def test_start_while_dragging_is_ignored(coordinator):
    coordinator.start("b1", "to-read")
    assert not coordinator.start("b3", "read")
    assert coordinator.state.book_id == "b1"

def test_enter_and_leave_track_hover_column(coordinator):
    coordinator.start("b1", "to-read")
    coordinator.enter("reading")
    assert coordinator.state.hover_column == "reading"
    coordinator.leave("read")
    assert coordinator.state.hover_column == "reading"
    coordinator.leave("reading")
    assert coordinator.state.hover_column is None

def test_hover_moves_placeholder_between_columns(coordinator):
    coordinator.start("b1", "to-read")
    placeholder = coordinator.hover("read", 10, column_layout("b3"))
    assert placeholder == Placeholder(column="read", before="b3")
    assert coordinator.preview()["read"] == [PLACEHOLDER, "b3"]
    assert coordinator.preview()["to-read"] == ["b1", "b2"]

def test_hover_is_ignored_when_idle(coordinator):
    assert coordinator.hover("read", 10, column_layout("b3")) is None
    assert coordinator.placeholder is None

def test_drop_on_other_column_moves_once(coordinator, populated_store, repository):
    """Test a drop commits exactly one move and the view follows the store."""
    saves = repository.saves
    coordinator.start("b1", "to-read")
    coordinator.hover("read", 10, column_layout("b3"))
    outcome = coordinator.drop("read")

    assert outcome.committed
    assert not outcome.reloaded
    assert repository.saves == saves + 1
    assert populated_store.column_of("b1") == "read"
    assert coordinator.phase == DragPhase.IDLE
    assert coordinator.placeholder is None
    # the store appends, so the view ignores the placeholder position
    assert coordinator.view["read"] == ["b3", "b1"]
    assert coordinator.view["to-read"] == ["b2"]

def test_drop_on_source_column_does_not_touch_store(coordinator, repository):
    saves = repository.saves
    coordinator.start("b1", "to-read")
    coordinator.hover("to-read", 500, column_layout("b1", "b2"))
    assert coordinator.preview()["to-read"] == ["b1", "b2", PLACEHOLDER]

    outcome = coordinator.drop("to-read")
    assert not outcome.committed
    assert outcome.result is None
    assert repository.saves == saves
    assert coordinator.view["to-read"] == ["b1", "b2"]

def test_drop_outside_any_column(coordinator, repository):
    saves = repository.saves
    coordinator.start("b1", "to-read")
    outcome = coordinator.drop(None)
    assert not outcome.committed
    assert repository.saves == saves
    assert coordinator.phase == DragPhase.IDLE

def test_drop_without_drag_does_nothing(coordinator):
    assert coordinator.drop("read") == coordinator.drop("reading")
    assert not coordinator.drop("read").committed

def test_failed_move_reloads_and_reconciles(coordinator, populated_store, repository):
    """Test the board shows the durable state after a refused save."""
    repository.fail_with = SaveStatus.QUOTA_EXCEEDED
    coordinator.start("b1", "to-read")
    outcome = coordinator.drop("favorites")

    assert not outcome.committed
    assert outcome.reloaded
    assert outcome.result.failure == FailureKind.QUOTA_EXCEEDED
    assert populated_store.column_of("b1") == "to-read"
    assert coordinator.view["favorites"] == []
    assert coordinator.view["to-read"] == ["b1", "b2"]
    assert coordinator.phase == DragPhase.IDLE

def test_drop_of_book_removed_meanwhile(coordinator, populated_store):
    coordinator.start("b1", "to-read")
    populated_store.delete_book("b1")
    outcome = coordinator.drop("read")
    assert outcome.result.failure == FailureKind.NOT_FOUND
    assert outcome.reloaded
    assert "b1" not in coordinator.view["to-read"]

def test_cancel_discards_gesture(coordinator, repository):
    saves = repository.saves
    coordinator.start("b1", "to-read")
    coordinator.hover("reading", 0, [])
    assert coordinator.cancel()
    assert coordinator.phase == DragPhase.IDLE
    assert coordinator.preview() == coordinator.view
    assert repository.saves == saves
    assert not coordinator.cancel()

def test_consecutive_gestures_apply_in_order(coordinator, populated_store):
    coordinator.start("b1", "to-read")
    coordinator.drop("reading")
    coordinator.start("b1", "reading")
    coordinator.drop("favorites")
    assert populated_store.column_of("b1") == "favorites"
    assert coordinator.view["reading"] == []
