"""
Time Ledger - Core hours tracking logic.

Owns the list of work-session entries and derives the progress figures from
it. Every mutation updates the in-memory list first and then writes the
whole collection through the gateway; the list stays authoritative even when
that write fails.
"""

import datetime
import logging
import math
import re
from typing import Iterable, List, Optional

from internship_tracker.domain.ids import IdGenerator
from internship_tracker.domain.models import Entry, EntryDraft, ENTRIES_KEY, GOAL_HOURS
from internship_tracker.infra.gateway import PersistenceGateway, load_collection, save_collection

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def parse_clock(value: Optional[str]) -> Optional[int]:
    """Convert "HH:MM" to minutes since midnight, None if not a valid time"""
    if not value:
        return None
    match = _CLOCK_RE.match(value)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def compute_duration(time_in: Optional[str], time_out: Optional[str]) -> float:
    """
    Hours between two clock times.

    A clock-out earlier than the clock-in is an overnight shift ending the next
    day. Missing or malformed times count as zero hours.
    """
    start = parse_clock(time_in)
    end = parse_clock(time_out)
    if start is None or end is None:
        return 0.0

    diff = end - start
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff / 60


class TimeLedger:
    """
    The hours tracking engine. Manages entries but knows nothing about the UI.
    """

    def __init__(self, gateway: PersistenceGateway, goal_hours: float = GOAL_HOURS,
                 id_generator: Optional[IdGenerator] = None):
        self.gateway = gateway
        self.goal_hours = goal_hours
        self.ids = id_generator or IdGenerator()
        self.entries: List[Entry] = []
        self._loaded = False

    async def load(self) -> bool:
        """
        Replace the in-memory entries with the stored snapshot.

        Only the first call reads storage. Returns True if stored entries were
        adopted.
        """
        if self._loaded:
            return False
        self._loaded = True

        stored = await load_collection(self.gateway, ENTRIES_KEY, Entry)
        if stored is None:
            return False
        self.entries = stored
        self.ids.observe(entry.id for entry in stored)
        logger.info(f"Loaded {len(stored)} entries")
        return True

    async def _persist(self) -> bool:
        saved = await save_collection(self.gateway, ENTRIES_KEY, self.entries)
        if not saved:
            logger.warning("Entries kept in memory only; they will be saved with the next change")
        return saved

    def _find_index(self, entry_id: int) -> Optional[int]:
        for index, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return index
        return None

    async def add_entry(self, draft: EntryDraft) -> Optional[Entry]:
        """
        Record a new work session.

        Returns the created entry, or None when date, time in or time out is
        missing.
        """
        if not draft.is_complete():
            return None

        entry = Entry(
            id=self.ids.next_id(),
            date=draft.date,
            time_in=draft.time_in.strip(),
            time_out=draft.time_out.strip(),
            project=draft.project,
            description=draft.description,
        )
        self.entries.append(entry)
        await self._persist()
        return entry

    async def update_entry(self, entry_id: int, draft: EntryDraft) -> bool:
        """Replace an entry with the edited draft, keeping its id"""
        index = self._find_index(entry_id)
        if index is None or not draft.is_complete():
            return False

        self.entries[index] = Entry(
            id=entry_id,
            date=draft.date,
            time_in=draft.time_in.strip(),
            time_out=draft.time_out.strip(),
            project=draft.project,
            description=draft.description,
        )
        await self._persist()
        return True

    async def delete_entry(self, entry_id: int) -> bool:
        index = self._find_index(entry_id)
        if index is None:
            return False
        del self.entries[index]
        await self._persist()
        return True

    async def reset(self) -> None:
        """
        Drop every entry, in memory and in storage.

        The caller is responsible for asking the user first.
        """
        self.entries = []
        await self.gateway.clear(ENTRIES_KEY)
        logger.info("All entries cleared")

    async def replace_all(self, entries: Iterable[Entry]) -> None:
        """Swap in a whole new collection (used by backup restore)"""
        self.entries = list(entries)
        self.ids.observe(entry.id for entry in self.entries)
        await self._persist()

    def get_entry(self, entry_id: int) -> Optional[Entry]:
        index = self._find_index(entry_id)
        return self.entries[index] if index is not None else None

    # Derived figures

    @staticmethod
    def entry_hours(entry: Entry) -> float:
        return compute_duration(entry.time_in, entry.time_out)

    def total_hours(self) -> float:
        return sum(self.entry_hours(entry) for entry in self.entries)

    def remaining_hours(self) -> float:
        """Hours left to the goal; negative once the goal is exceeded"""
        return self.goal_hours - self.total_hours()

    def progress_percent(self) -> float:
        percent = self.total_hours() / self.goal_hours * 100
        return max(0.0, min(percent, 100.0))

    def estimated_completion_date(self, today: Optional[datetime.date] = None) -> Optional[datetime.date]:
        """
        Project the date the goal will be reached at the current average pace.

        The pace is total hours divided by the days between the first and last
        logged date (at least one day). No estimate with fewer than two entries,
        without any logged hours, or once the goal is exceeded. Past the goal
        there is no estimate rather than a date in the past.
        """
        if len(self.entries) < 2:
            return None

        by_date = sorted(self.entries, key=lambda e: e.date)
        days_passed = max((by_date[-1].date - by_date[0].date).days, 1)
        avg_hours_per_day = self.total_hours() / days_passed
        if avg_hours_per_day <= 0:
            return None

        remaining = self.remaining_hours()
        if remaining < 0:
            return None

        days_remaining = math.ceil(remaining / avg_hours_per_day)
        today = today or datetime.date.today()
        return today + datetime.timedelta(days=days_remaining)

    def sorted_for_display(self) -> List[Entry]:
        """Most recent date first; entries on the same date keep their order"""
        return sorted(self.entries, key=lambda e: e.date, reverse=True)

    def hours_by_project(self) -> dict:
        """Total hours per project label, unlabeled sessions under ''"""
        totals = {}
        for entry in self.entries:
            label = entry.project.strip()
            totals[label] = totals.get(label, 0.0) + self.entry_hours(entry)
        return totals
