"""
Selection & notification coordinator.

Tracks which patient is selected and which view is active, and fans change
notifications out to the view adapters that render the patient list,
examination history, file list and dashboard panels. Dispatch is synchronous
and in registration order: every listener has run before the triggering call
returns. Views pull fresh data from the store when notified; nothing is cached
here beyond the two state variables.
"""
import logging
from typing import Callable, Dict, FrozenSet, List, Optional

from ..core.errors import ReentrantDispatchError
from ..models.patient import Patient
from .entity_store import EntityStore, StoreEvent

logger = logging.getLogger(__name__)

STORAGE_WARNING = "Failed to save data. Changes may not persist."
NO_PATIENT_WARNING = "Patient {patient_id} not found"


class ViewId:
    DASHBOARD = "dashboard"
    PATIENTS = "patients"
    EXAMINATIONS = "examinations"
    FILES = "files"

    ALL = [DASHBOARD, PATIENTS, EXAMINATIONS, FILES]


class Event:
    SELECTION_CHANGED = "selection-changed"
    VIEW_CHANGED = "view-changed"
    DATA_CHANGED = "data-changed"
    WARNING = "warning"


class SelectionCoordinator:

    def __init__(self, store: EntityStore):
        self.store = store
        self._selected_patient_id: Optional[int] = None
        self._active_view: str = ViewId.DASHBOARD
        self._listeners: Dict[str, List[Callable]] = {
            Event.SELECTION_CHANGED: [],
            Event.VIEW_CHANGED: [],
            Event.DATA_CHANGED: [],
            Event.WARNING: [],
        }
        self._dispatch_depth = 0
        store.subscribe(self._on_store_event)

    @property
    def selected_patient_id(self) -> Optional[int]:
        return self._selected_patient_id

    @property
    def active_view(self) -> str:
        return self._active_view

    def selected_patient(self) -> Optional[Patient]:
        if self._selected_patient_id is None:
            return None
        return self.store.get_patient(self._selected_patient_id)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def on_selection_changed(self, listener: Callable[[Optional[int]], None]) -> None:
        self._listeners[Event.SELECTION_CHANGED].append(listener)

    def on_view_changed(self, listener: Callable[[str], None]) -> None:
        self._listeners[Event.VIEW_CHANGED].append(listener)

    def on_data_changed(self, listener: Callable[[FrozenSet[str]], None]) -> None:
        self._listeners[Event.DATA_CHANGED].append(listener)

    def on_warning(self, listener: Callable[[str], None]) -> None:
        self._listeners[Event.WARNING].append(listener)

    # ------------------------------------------------------------------
    # State changes
    # ------------------------------------------------------------------

    def select_patient(self, patient_id) -> bool:
        """Select an existing patient. Unknown ids leave the selection alone and raise a warning."""
        self._guard_reentry("select_patient")
        patient = self.store.get_patient(patient_id)
        if patient is None:
            logger.warning("Ignoring selection of unknown patient %s", patient_id)
            self._emit(Event.WARNING, NO_PATIENT_WARNING.format(patient_id=patient_id))
            return False

        self._selected_patient_id = patient.id
        logger.info("Selected patient %s", patient.id)
        self._emit(Event.SELECTION_CHANGED, patient.id)
        return True

    def clear_selection(self) -> None:
        self._guard_reentry("clear_selection")
        self._selected_patient_id = None
        self._emit(Event.SELECTION_CHANGED, None)

    def switch_view(self, view_id: str) -> None:
        self._guard_reentry("switch_view")
        if view_id not in ViewId.ALL:
            raise ValueError(f"Unknown view: {view_id}")
        self._active_view = view_id
        self._emit(Event.VIEW_CHANGED, view_id)

    def reset(self) -> None:
        """Back to the initial state, e.g. on logout."""
        self.clear_selection()
        self.switch_view(ViewId.DASHBOARD)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _guard_reentry(self, operation: str) -> None:
        if self._dispatch_depth:
            logger.warning("Rejected re-entrant %s during change dispatch", operation)
            raise ReentrantDispatchError(f"{operation} called from inside a change listener")

    def _emit(self, event: str, payload) -> None:
        self._dispatch_depth += 1
        try:
            for listener in list(self._listeners[event]):
                try:
                    listener(payload)
                except Exception:
                    logger.exception("%s listener %r failed", event, listener)
        finally:
            self._dispatch_depth -= 1

    def _on_store_event(self, event: StoreEvent) -> None:
        if event.storage_error is not None:
            self._emit(Event.WARNING, STORAGE_WARNING)
        if event.deleted_patient_id is not None and event.deleted_patient_id == self._selected_patient_id:
            # Cascade clear also runs when the delete came from one of our own listeners
            self._selected_patient_id = None
            logger.info("Selected patient %s was deleted, selection cleared", event.deleted_patient_id)
            self._emit(Event.SELECTION_CHANGED, None)
        self._emit(Event.DATA_CHANGED, event.collections)
