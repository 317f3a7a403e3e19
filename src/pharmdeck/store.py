"""SQLite persistence for catalog items, progress, sessions and quiz history.

Every function takes the database path and, where data is per-user, an
opaque user id. The scheduling, statistics and achievement logic stays in the
pure modules; these functions only load, combine and save.
"""
import json
import logging
import random
from datetime import date, datetime
from typing import Optional

from pharmdeck.achievements import evaluate
from pharmdeck.db import get_connection
from pharmdeck.models import (
    AchievementReport, ProgressRecord, QuizScore, Statistics, StudyItem, StudySession,
)
from pharmdeck.review import prioritize_due
from pharmdeck.scheduler import update_progress
from pharmdeck.stats import compute_lifetime_statistics, get_system_performance

logger = logging.getLogger(__name__)

DEFAULT_USER_ID = "local-user"


# --- settings ---


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_int_setting(db_path: str, key: str, default: int) -> int:
    value = get_setting(db_path, key)
    try:
        return int(value) if value is not None else default
    except ValueError:
        logger.warning("Ignoring non-numeric setting %s=%r", key, value)
        return default


def get_current_user(db_path: str) -> str:
    return get_setting(db_path, "user_id", DEFAULT_USER_ID)


# --- row mapping ---


def _ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _item_from_row(row) -> StudyItem:
    return StudyItem(
        id=row["id"],
        name=row["name"],
        drug_class=row["drug_class"],
        system=row["system"],
        moa=row["moa"],
        uses=json.loads(row["uses"]),
        side_effects=json.loads(row["side_effects"]),
        mnemonic=row["mnemonic"],
        contraindications=json.loads(row["contraindications"]),
        dosage=row["dosage"],
    )


def _progress_from_row(row) -> ProgressRecord:
    return ProgressRecord(
        item_id=row["drug_id"],
        seen=bool(row["seen"]),
        correct_count=row["correct_count"],
        incorrect_count=row["incorrect_count"],
        last_seen=_ts(row["last_seen"]),
        difficulty=row["difficulty"],
        next_review_date=_ts(row["next_review_date"]),
        review_interval=row["review_interval"],
        ease_factor=row["ease_factor"],
        needs_review=bool(row["needs_review"]),
        streak_count=row["streak_count"],
    )


def _session_from_row(row) -> StudySession:
    return StudySession(
        id=row["id"],
        start_time=_ts(row["start_time"]),
        end_time=_ts(row["end_time"]),
        total_cards=row["total_cards"],
        correct_cards=row["correct_cards"],
        incorrect_cards=row["incorrect_cards"],
        systems=json.loads(row["systems"]),
        study_mode=row["study_mode"],
        time_spent_minutes=row["time_spent"],
    )


def _quiz_score_from_row(row) -> QuizScore:
    return QuizScore(
        score=row["score"],
        total_questions=row["total_questions"],
        completed_at=_ts(row["completed_at"]),
        system=row["system"],
        drug_class=row["drug_class"],
        time_taken_seconds=row["time_taken"],
    )


# --- catalog ---


def get_all_items(db_path: str, system: str | None = None) -> list[StudyItem]:
    conn = get_connection(db_path)
    if system:
        rows = conn.execute("SELECT * FROM drugs WHERE system = ? ORDER BY name", (system,)).fetchall()
    else:
        rows = conn.execute("SELECT * FROM drugs ORDER BY name").fetchall()
    conn.close()
    return [_item_from_row(r) for r in rows]


def get_item(db_path: str, item_id: int) -> StudyItem | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM drugs WHERE id = ?", (item_id,)).fetchone()
    conn.close()
    return _item_from_row(row) if row else None


# --- progress ---


def get_progress(db_path: str, user_id: str, item_id: int) -> ProgressRecord | None:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM progress WHERE user_id = ? AND drug_id = ?", (user_id, item_id)
    ).fetchone()
    conn.close()
    return _progress_from_row(row) if row else None


def get_all_progress(db_path: str, user_id: str) -> list[ProgressRecord]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM progress WHERE user_id = ? ORDER BY drug_id", (user_id,)).fetchall()
    conn.close()
    return [_progress_from_row(r) for r in rows]


def save_progress(db_path: str, user_id: str, record: ProgressRecord) -> None:
    """Insert or overwrite a progress row. Concurrent writers: last write wins."""
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO progress
        (user_id, drug_id, seen, correct_count, incorrect_count, last_seen, difficulty,
         next_review_date, review_interval, ease_factor, needs_review, streak_count)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(user_id, drug_id) DO UPDATE SET
            seen=excluded.seen, correct_count=excluded.correct_count,
            incorrect_count=excluded.incorrect_count, last_seen=excluded.last_seen,
            difficulty=excluded.difficulty, next_review_date=excluded.next_review_date,
            review_interval=excluded.review_interval, ease_factor=excluded.ease_factor,
            needs_review=excluded.needs_review, streak_count=excluded.streak_count""",
        (
            user_id, record.item_id, int(record.seen), record.correct_count,
            record.incorrect_count, record.last_seen.isoformat(), record.difficulty,
            record.next_review_date.isoformat(), record.review_interval,
            record.ease_factor, int(record.needs_review), record.streak_count,
        ),
    )
    conn.commit()
    conn.close()


def record_card_answer(
    db_path: str, user_id: str, item_id: int, correct: bool, now: datetime | None = None,
) -> ProgressRecord:
    """Apply an answer to an item's progress and persist the result."""
    if get_item(db_path, item_id) is None:
        raise LookupError(f"No drug with id {item_id}")
    current = get_progress(db_path, user_id, item_id)
    updated = update_progress(current, correct, now=now, item_id=item_id)
    save_progress(db_path, user_id, updated)
    logger.debug(
        "user %s item %s %s: interval=%d ease=%.2f",
        user_id, item_id, "correct" if correct else "incorrect",
        updated.review_interval, updated.ease_factor,
    )
    return updated


def get_due_items(
    db_path: str, user_id: str, now: datetime | None = None, limit: int | None = None,
) -> list[StudyItem]:
    """Items due for review, most-missed first."""
    due = prioritize_due(get_all_progress(db_path, user_id), now)
    items = {i.id: i for i in get_all_items(db_path)}
    result = [items[r.item_id] for r in due if r.item_id in items]
    return result[:limit] if limit is not None else result


def reset_progress(db_path: str, user_id: str) -> None:
    """Administrative bulk reset: wipe progress, sessions and quiz history for a user."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM progress WHERE user_id = ?", (user_id,))
    conn.execute("DELETE FROM study_sessions WHERE user_id = ?", (user_id,))
    conn.execute("DELETE FROM quiz_scores WHERE user_id = ?", (user_id,))
    conn.commit()
    conn.close()
    logger.info("Reset all progress for user %s", user_id)


# --- sessions ---


def save_session(db_path: str, user_id: str, session: StudySession) -> None:
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO study_sessions
        (id, user_id, start_time, end_time, total_cards, correct_cards, incorrect_cards,
         systems, study_mode, time_spent)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            end_time=excluded.end_time, total_cards=excluded.total_cards,
            correct_cards=excluded.correct_cards, incorrect_cards=excluded.incorrect_cards,
            time_spent=excluded.time_spent
        WHERE study_sessions.user_id = excluded.user_id""",
        (
            session.id, user_id, session.start_time.isoformat(),
            session.end_time.isoformat() if session.end_time else None,
            session.total_cards, session.correct_cards, session.incorrect_cards,
            json.dumps(session.systems), session.study_mode, session.time_spent_minutes,
        ),
    )
    conn.commit()
    conn.close()


def get_session(db_path: str, user_id: str, session_id: str) -> StudySession | None:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM study_sessions WHERE id = ? AND user_id = ?", (session_id, user_id)
    ).fetchone()
    conn.close()
    return _session_from_row(row) if row else None


def get_completed_sessions(db_path: str, user_id: str) -> list[StudySession]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM study_sessions WHERE user_id = ? AND end_time IS NOT NULL ORDER BY start_time",
        (user_id,),
    ).fetchall()
    conn.close()
    return [_session_from_row(r) for r in rows]


# --- quiz history ---


def save_quiz_score(db_path: str, user_id: str, quiz_score: QuizScore) -> None:
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO quiz_scores
        (user_id, score, total_questions, completed_at, system, drug_class, time_taken)
        VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (
            user_id, quiz_score.score, quiz_score.total_questions,
            quiz_score.completed_at.isoformat(), quiz_score.system,
            quiz_score.drug_class, quiz_score.time_taken_seconds,
        ),
    )
    conn.commit()
    conn.close()


def get_quiz_history(db_path: str, user_id: str) -> list[QuizScore]:
    """Quiz scores, newest first."""
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM quiz_scores WHERE user_id = ? ORDER BY completed_at DESC, id DESC", (user_id,)
    ).fetchall()
    conn.close()
    return [_quiz_score_from_row(r) for r in rows]


# --- bookmarks ---


def add_bookmark(db_path: str, user_id: str, item_id: int) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT OR IGNORE INTO bookmarks (user_id, drug_id, bookmarked_at) VALUES (?, ?, ?)",
        (user_id, item_id, datetime.now().isoformat()),
    )
    conn.commit()
    conn.close()


def remove_bookmark(db_path: str, user_id: str, item_id: int) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM bookmarks WHERE user_id = ? AND drug_id = ?", (user_id, item_id))
    conn.commit()
    conn.close()


def get_bookmarked_ids(db_path: str, user_id: str) -> set[int]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT drug_id FROM bookmarks WHERE user_id = ?", (user_id,)).fetchall()
    conn.close()
    return {r["drug_id"] for r in rows}


def is_bookmarked(db_path: str, user_id: str, item_id: int) -> bool:
    return item_id in get_bookmarked_ids(db_path, user_id)


# --- daily drug ---


def get_daily_item(
    db_path: str, user_id: str, today: date | None = None, rng: random.Random | None = None,
) -> StudyItem | None:
    """The drug of the day, picked once per user and date."""
    today = today or date.today()
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT drug_id FROM daily_drugs WHERE user_id = ? AND date = ?",
        (user_id, today.isoformat()),
    ).fetchone()
    if row is None:
        ids = [r["id"] for r in conn.execute("SELECT id FROM drugs").fetchall()]
        if not ids:
            conn.close()
            return None
        drug_id = (rng or random).choice(ids)
        conn.execute(
            "INSERT INTO daily_drugs (user_id, date, drug_id) VALUES (?, ?, ?)",
            (user_id, today.isoformat(), drug_id),
        )
        conn.commit()
    else:
        drug_id = row["drug_id"]
    conn.close()
    return get_item(db_path, drug_id)


# --- aggregates ---


def get_statistics(db_path: str, user_id: str, now: datetime | None = None) -> Statistics:
    return compute_lifetime_statistics(
        get_all_progress(db_path, user_id),
        get_completed_sessions(db_path, user_id),
        now,
    )


def get_achievement_report(
    db_path: str, user_id: str, now: datetime | None = None,
) -> tuple[Statistics, AchievementReport]:
    stats = get_statistics(db_path, user_id, now)
    performance = get_system_performance(get_all_items(db_path), get_all_progress(db_path, user_id))
    report = evaluate(
        stats,
        system_accuracies=[p.accuracy_pct for p in performance],
        quiz_scores=get_quiz_history(db_path, user_id),
    )
    return stats, report
