"""
Booking draft state.

- DraftStore: Reducer-style holder of the BookingDraft snapshot
- RosterCache: Best-effort Redis autosave of the companion roster
"""

from booking.state.draft_store import DraftStore, new_companion
from booking.state.roster_cache import RosterCache

__all__ = ["DraftStore", "RosterCache", "new_companion"]
