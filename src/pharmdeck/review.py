"""Due-card selection and study-session candidate filtering."""
from datetime import datetime
from typing import Iterable, Optional

from pharmdeck.models import STUDY_MODES, ProgressRecord, StudyItem


def is_due(record: ProgressRecord, now: datetime) -> bool:
    if record.needs_review:
        return True
    return record.seen and record.next_review_date <= now


def select_due(records: Iterable[ProgressRecord], now: Optional[datetime] = None) -> list[ProgressRecord]:
    """Records that are due for review, in input order."""
    now = now or datetime.now()
    return [r for r in records if is_due(r, now)]


def prioritize_due(records: Iterable[ProgressRecord], now: Optional[datetime] = None) -> list[ProgressRecord]:
    """Due records, most-missed first, then longest overdue."""
    due = select_due(records, now)
    return sorted(due, key=lambda r: (-r.incorrect_count, r.next_review_date))


def select_session_items(
    items: Iterable[StudyItem],
    progress: Iterable[ProgressRecord],
    mode: str,
    systems: Optional[Iterable[str]] = None,
    bookmarked_ids: Iterable[int] = (),
    now: Optional[datetime] = None,
) -> list[StudyItem]:
    """Candidate items for a study session.

    Args:
        items: The item catalog
        progress: The user's progress records
        mode: One of "all", "bookmarked", "unseen", "review"
        systems: Body-system tags to keep; None or empty keeps every system
        bookmarked_ids: Item ids the user bookmarked
        now: Reference time for the "review" mode

    Returns:
        Matching items in catalog order.
    """
    if mode not in STUDY_MODES:
        raise ValueError(f"Unknown study mode: {mode!r}")
    now = now or datetime.now()
    wanted = set(systems or ())
    candidates = [i for i in items if not wanted or i.system in wanted]
    by_item = {r.item_id: r for r in progress}

    if mode == "bookmarked":
        marked = set(bookmarked_ids)
        return [i for i in candidates if i.id in marked]
    if mode == "unseen":
        return [i for i in candidates if i.id not in by_item or not by_item[i.id].seen]
    if mode == "review":
        due_ids = {r.item_id for r in select_due(by_item.values(), now)}
        return [i for i in candidates if i.id in due_ids]
    return candidates
