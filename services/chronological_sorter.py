"""
Chronological Sorter for the Anime Series Timeline Engine.
Orders discovered anime into a timeline with stable positions.
"""

from datetime import date
from typing import Iterable, List, Tuple, Union

from models.entities import AnimeInfo
from models.timeline import TimelineEntry
from services.relationship_priority import media_type_priority
from config import get_logger

logger = get_logger(__name__)

SortKey = Tuple[bool, date, int, int]


class ChronologicalSorter:
    """
    Sorts anime records into chronological order.

    Ordering, each key breaking ties of the previous one:
    1. dated entries before undated ones
    2. premiere date, earliest first
    3. media type (tv, movie, ova, special, ona, music, unknown)
    4. episode count, most first; a missing count ranks below zero

    The sort is stable, so input order decides any remaining ties.
    """

    @staticmethod
    def sort_key(record: AnimeInfo) -> SortKey:
        """Build the sort key for a record."""
        undated = record.premiere_date is None
        episodes = record.num_episodes if record.num_episodes is not None else -1
        return (
            undated,
            record.premiere_date or date.min,
            media_type_priority(record.anime_type),
            -episodes
        )

    def sort(
        self,
        records: Iterable[Union[AnimeInfo, TimelineEntry]],
        root_id: int = None
    ) -> List[TimelineEntry]:
        """
        Sort records into timeline entries.

        Args:
            records: Anime records, or entries of an existing timeline to re-sort
            root_id: Identifier the timeline is rooted at (used for logging)

        Returns:
            Entries with chronological_order 1..N in sorted order
        """
        # Entries keep their relationship path through a re-sort
        items = [
            (item.record, list(item.relationship_path)) if isinstance(item, TimelineEntry)
            else (item, [])
            for item in records
        ]
        ordered = sorted(items, key=lambda item: self.sort_key(item[0]))

        entries = [
            TimelineEntry(
                record=record,
                chronological_order=position,
                is_main_entry=record.is_main_timeline_type,
                relationship_path=path
            )
            for position, (record, path) in enumerate(ordered, start=1)
        ]

        if root_id is not None:
            logger.debug(f"Sorted {len(entries)} entries for MAL ID {root_id}")
        return entries
