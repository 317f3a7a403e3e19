"""Study session bookkeeping and lifetime statistics."""
import math
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from pharmdeck.models import (
    ProgressRecord, SessionResult, Statistics, StudyItem, StudySession,
    SystemPerformance, STUDY_MODES,
)

STREAK_LOOKBACK_DAYS = 365
DIFFICULTY_SCORES = {"easy": 1, "medium": 2, "hard": 3}


def percent(part: float, whole: float) -> int:
    """Whole-number percentage, rounding halves up. 0 when whole is 0."""
    if not whole:
        return 0
    return math.floor(part / whole * 100 + 0.5)


def start_session(
    systems: Iterable[str],
    mode: str,
    total_cards: int,
    now: Optional[datetime] = None,
    session_id: Optional[str] = None,
) -> StudySession:
    if mode not in STUDY_MODES:
        raise ValueError(f"Unknown study mode: {mode!r}")
    now = now or datetime.now()
    return StudySession(
        id=session_id or f"session_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:8]}",
        start_time=now,
        total_cards=total_cards,
        systems=list(systems),
        study_mode=mode,
    )


def record_answer(session: StudySession, correct: bool) -> StudySession:
    if correct:
        return replace(session, correct_cards=session.correct_cards + 1)
    return replace(session, incorrect_cards=session.incorrect_cards + 1)


def end_session(session: StudySession, now: Optional[datetime] = None) -> StudySession:
    """Close a session. A session that already ended is returned as-is."""
    if session.is_completed:
        return session
    now = now or datetime.now()
    minutes = math.floor((now - session.start_time).total_seconds() / 60 + 0.5)
    return replace(session, end_time=now, time_spent_minutes=minutes)


def calc_study_streak(
    sessions: Iterable[StudySession],
    now: Optional[datetime] = None,
    max_days: int = STREAK_LOOKBACK_DAYS,
) -> int:
    """Count consecutive calendar days with a completed session, ending today.

    An empty today does not break the streak (the day is not over yet), but
    any other empty day does.
    """
    today = (now or datetime.now()).date()
    active_days: set[date] = {s.start_time.date() for s in sessions if s.is_completed}
    streak = 0
    for offset in range(max_days):
        if today - timedelta(days=offset) in active_days:
            streak += 1
        elif offset > 0:
            break
    return streak


def compute_lifetime_statistics(
    progress: Iterable[ProgressRecord],
    sessions: Iterable[StudySession],
    now: Optional[datetime] = None,
) -> Statistics:
    progress = list(progress)
    completed = [s for s in sessions if s.is_completed]
    total_correct = sum(p.correct_count for p in progress)
    total_incorrect = sum(p.incorrect_count for p in progress)
    return Statistics(
        total_studied=sum(1 for p in progress if p.seen),
        total_correct=total_correct,
        total_incorrect=total_incorrect,
        average_accuracy_pct=percent(total_correct, total_correct + total_incorrect),
        study_streak_days=calc_study_streak(completed, now),
        cards_needing_review=sum(1 for p in progress if p.needs_review),
        total_time_spent_minutes=sum(s.time_spent_minutes for s in completed),
        sessions_completed=len(completed),
    )


def summarize_session(
    session: StudySession,
    progress_before: Iterable[ProgressRecord],
    progress_after: Iterable[ProgressRecord],
) -> SessionResult:
    """Results screen data for a finished session."""
    seen_before = {p.item_id for p in progress_before if p.seen}
    after = list(progress_after)
    newly_seen = [p for p in after if p.seen and p.item_id not in seen_before]
    answered = session.correct_cards + session.incorrect_cards
    return SessionResult(
        session_id=session.id,
        total_cards=session.total_cards,
        correct_cards=session.correct_cards,
        incorrect_cards=session.incorrect_cards,
        accuracy_pct=percent(session.correct_cards, answered),
        time_spent_minutes=session.time_spent_minutes,
        cards_needing_review=sum(1 for p in after if p.needs_review),
        new_cards_learned=len(newly_seen),
        systems=list(session.systems),
        study_mode=session.study_mode,
    )


def _average_difficulty(records: list[ProgressRecord]) -> str:
    seen = [DIFFICULTY_SCORES.get(r.difficulty, 2) for r in records if r.seen]
    avg = sum(seen) / len(seen) if seen else 2
    if avg <= 1.5:
        return "easy"
    elif avg <= 2.5:
        return "medium"
    return "hard"


def get_system_performance(
    items: Iterable[StudyItem],
    progress: Iterable[ProgressRecord],
) -> list[SystemPerformance]:
    """Accuracy and average difficulty per body system, sorted by system."""
    items = list(items)
    by_item = {p.item_id: p for p in progress}
    results = []
    for system in sorted({i.system for i in items}):
        system_items = [i for i in items if i.system == system]
        records = [by_item[i.id] for i in system_items if i.id in by_item]
        correct = sum(r.correct_count for r in records)
        incorrect = sum(r.incorrect_count for r in records)
        results.append(SystemPerformance(
            system=system,
            total_cards=len(system_items),
            studied_cards=sum(1 for r in records if r.seen),
            accuracy_pct=percent(correct, correct + incorrect),
            average_difficulty=_average_difficulty(records),
        ))
    return results
