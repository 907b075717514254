# core/drag/placement.py

from dataclasses import dataclass
from typing import Optional, Sequence

@dataclass(frozen=True)
class SlotGeometry:
    """Vertical extent of one rendered book element in a column"""
    book_id: str
    top: float
    height: float

    @property
    def midpoint(self) -> float:
        return self.top + self.height / 2

def find_insertion_slot(elements: Sequence[SlotGeometry], pointer_y: float,
                        dragging_id: Optional[str] = None) -> Optional[str]:
    """Return the id of the element the placeholder goes before, or None for the end.

    Picks the element whose midpoint lies below the pointer and closest to
    it (the largest negative ``pointer_y - midpoint``). The element being
    dragged is skipped. Elements are visited in order and only a strictly
    closer candidate replaces the current one, so the answer is unique.
    """
    best_offset = float("-inf")
    best_id = None
    for element in elements:
        if element.book_id == dragging_id:
            continue
        offset = pointer_y - element.midpoint
        if offset < 0 and offset > best_offset:
            best_offset = offset
            best_id = element.book_id
    return best_id
