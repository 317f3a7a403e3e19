"""Spaced repetition scheduling for per-item progress records.

A simplified SM-2 variant driven by a right/wrong outcome instead of a
0-5 quality rating.
"""
import logging
import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from pharmdeck.models import ProgressRecord

logger = logging.getLogger(__name__)

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
EASE_BONUS = 0.1
EASE_PENALTY = 0.2
GRADUATED_INTERVAL = 6  # days after the second consecutive correct answer
EASIER_AFTER_STREAK = 3
MAX_INTERVAL_DAYS = 36500  # keeps next_review_date within datetime range

_EASIER = {"hard": "medium", "medium": "easy", "easy": "easy"}
_HARDER = {"easy": "medium", "medium": "hard", "hard": "hard"}


def calc_ease_factor(ease_factor: float, correct: bool) -> float:
    if correct:
        new_ef = ease_factor + EASE_BONUS
    else:
        new_ef = ease_factor - EASE_PENALTY
    return round(max(MIN_EASE_FACTOR, new_ef), 2)


def calc_next_interval(interval: int, ease_factor: float, correct: bool) -> int:
    """Days until the next review.

    Args:
        interval: Current interval in days
        ease_factor: The already-updated ease factor
        correct: Whether the answer was right

    Returns:
        New interval, between 1 and MAX_INTERVAL_DAYS.
    """
    if not correct:
        return 1
    if interval == 1:
        return GRADUATED_INTERVAL
    # Half-up rounding, matching how the intervals were always computed.
    return min(MAX_INTERVAL_DAYS, max(1, math.floor(interval * ease_factor + 0.5)))


def step_difficulty(difficulty: str, correct: bool, streak_count: int) -> str:
    """Move one step toward easy after a long enough streak, toward hard on a miss."""
    if correct and streak_count >= EASIER_AFTER_STREAK:
        return _EASIER.get(difficulty, "medium")
    if not correct:
        return _HARDER.get(difficulty, "medium")
    return difficulty


def update_progress(
    record: Optional[ProgressRecord],
    correct: bool,
    now: Optional[datetime] = None,
    item_id: Optional[int] = None,
) -> ProgressRecord:
    """Return the progress record that results from answering an item.

    Args:
        record: The current record, or None if the item was never answered
        correct: Whether the answer was right
        now: Time of the answer (defaults to the current time)
        item_id: Required when record is None

    Returns:
        A new ProgressRecord; the input record is left untouched.
    """
    now = now or datetime.now()

    if record is None:
        if item_id is None:
            raise ValueError("item_id is required to create a new progress record")
        return ProgressRecord(
            item_id=item_id,
            seen=True,
            correct_count=1 if correct else 0,
            incorrect_count=0 if correct else 1,
            last_seen=now,
            difficulty="medium",
            next_review_date=now + timedelta(days=1),
            review_interval=1,
            ease_factor=DEFAULT_EASE_FACTOR,
            needs_review=not correct,
            streak_count=1 if correct else 0,
        )

    new_ef = calc_ease_factor(record.ease_factor, correct)
    new_interval = calc_next_interval(record.review_interval, new_ef, correct)
    # Uses the streak *before* this answer.
    new_difficulty = step_difficulty(record.difficulty, correct, record.streak_count)
    if new_difficulty != record.difficulty:
        logger.debug("item %s difficulty %s -> %s", record.item_id, record.difficulty, new_difficulty)

    return replace(
        record,
        seen=True,
        correct_count=record.correct_count + 1 if correct else record.correct_count,
        incorrect_count=record.incorrect_count if correct else record.incorrect_count + 1,
        last_seen=now,
        difficulty=new_difficulty,
        next_review_date=now + timedelta(days=new_interval),
        review_interval=new_interval,
        ease_factor=new_ef,
        needs_review=not correct,
        streak_count=record.streak_count + 1 if correct else 0,
    )
