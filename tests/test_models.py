"""Tests for data model classes."""
from datetime import datetime

from pharmdeck.models import (
    AchievementReport, ProgressRecord, QuizQuestion, Statistics, StudyItem, StudySession,
)


def test_study_item_defaults():
    item = StudyItem(id=1, name="Atropine", drug_class="Antimuscarinic", system="ANS", moa="Blocks M receptors")
    assert item.uses == []
    assert item.side_effects == []
    assert item.contraindications == []
    assert item.mnemonic is None
    assert item.dosage is None


def test_progress_record_defaults():
    ts = datetime(2024, 1, 1)
    record = ProgressRecord(item_id=3, last_seen=ts, next_review_date=ts)
    assert record.seen is False
    assert record.difficulty == "medium"
    assert record.ease_factor == 2.5
    assert record.review_interval == 1
    assert record.needs_review is False
    assert record.streak_count == 0


def test_study_session_completion():
    session = StudySession(id="s", start_time=datetime(2024, 1, 1), total_cards=4)
    assert session.is_completed is False
    assert session.study_mode == "all"
    session.end_time = datetime(2024, 1, 1, 0, 5)
    assert session.is_completed is True


def test_statistics_default_to_zero():
    stats = Statistics()
    assert stats.total_studied == 0
    assert stats.average_accuracy_pct == 0
    assert stats.study_streak_days == 0


def test_quiz_question_default_type():
    q = QuizQuestion(id="x", item_id=1, question_text="?", options=["a"], correct_answer_index=0)
    assert q.type == "general"


def test_achievement_report_is_unlocked():
    report = AchievementReport(unlocked=["streak_3"])
    assert report.is_unlocked("streak_3")
    assert not report.is_unlocked("streak_7")
