# ABOUTME: Splices coach-pinned videos to the front of a ranked recommendation list.
# ABOUTME: Orders pins by priority then recency, swaps in the coach's note, and re-ranks the result.

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Sequence

from src.common.schemas import PinRecord, RankedEntry

logger = logging.getLogger(__name__)

COACH_RECOMMENDED = "Coach Recommended"


def order_pins(pins: Iterable[PinRecord]) -> List[PinRecord]:
    """Highest priority first; equal priorities put the most recent pin first."""

    def _key(pin: PinRecord):
        created = pin.created_at.timestamp() if pin.created_at is not None else float("-inf")
        return (-pin.priority, -created)

    return sorted(pins, key=_key)


def apply_pins(entries: Sequence[RankedEntry], pins: Iterable[PinRecord]) -> List[RankedEntry]:
    """
    Return a new list with every pinned video ahead of every unpinned one.

    Unpinned entries keep their relative order and reasons. Ranks are
    reassigned 1..N over the final list. Input entries are never modified.
    """

    by_video = {entry.video.id: entry for entry in entries}
    pinned: List[RankedEntry] = []
    seen = set()
    for pin in order_pins(pins):
        if pin.video_id in seen:
            continue
        entry = by_video.get(pin.video_id)
        if entry is None:
            logger.debug(f"Pinned video {pin.video_id} not in ranked list for {pin.player_id}; skipping")
            continue
        note = (pin.note or "").strip()
        pinned.append(replace(entry, reason=note or COACH_RECOMMENDED, pinned=True))
        seen.add(pin.video_id)

    rest = [entry for entry in entries if entry.video.id not in seen]
    return [replace(entry, rank=idx) for idx, entry in enumerate(pinned + rest, 1)]
