# core/drag/__init__.py
from .placement import SlotGeometry, find_insertion_slot
from .coordinator import DragTransferCoordinator, DragPhase, DragState, DropOutcome, Placeholder, PLACEHOLDER

__all__ = [
    'SlotGeometry',
    'find_insertion_slot',
    'DragTransferCoordinator',
    'DragPhase',
    'DragState',
    'DropOutcome',
    'Placeholder',
    'PLACEHOLDER',
]
