# tests/test_achievements.py
from datetime import datetime

from pharmdeck.achievements import (
    ACHIEVEMENTS, evaluate, get_achievement_by_id, get_achievements_by_category,
    get_motivational_message, get_next_milestone, get_streak_emoji,
)
from pharmdeck.models import ACHIEVEMENT_CATEGORIES, QuizScore, Statistics


def quiz(score, total):
    return QuizScore(score=score, total_questions=total, completed_at=datetime(2024, 5, 1))


def test_catalog_shape():
    ids = [a.id for a in ACHIEVEMENTS]
    assert len(ids) == 17
    assert len(set(ids)) == 17
    assert all(a.category in ACHIEVEMENT_CATEGORIES for a in ACHIEVEMENTS)


def test_get_achievement_by_id():
    assert get_achievement_by_id("time_10h").requirement == 600
    assert get_achievement_by_id("nope") is None


def test_get_achievements_by_category():
    streaks = get_achievements_by_category("streak")
    assert [a.requirement for a in streaks] == [3, 7, 30, 100]


def test_empty_stats_unlock_nothing():
    report = evaluate(Statistics())
    assert report.unlocked == []
    assert set(report.progress) == {a.id for a in ACHIEVEMENTS}
    assert all(v == 0 for v in report.progress.values())


def test_streak_thirty_scenario():
    report = evaluate(Statistics(study_streak_days=30))
    assert report.is_unlocked("streak_3")
    assert report.is_unlocked("streak_7")
    assert report.is_unlocked("streak_30")
    assert not report.is_unlocked("streak_100")
    assert report.progress["streak_100"] == 30
    assert report.progress["streak_30"] == 100


def test_numeric_thresholds():
    stats = Statistics(
        average_accuracy_pct=90, total_studied=200, sessions_completed=10,
        total_time_spent_minutes=600,
    )
    report = evaluate(stats)
    for unlocked in ("accuracy_80", "accuracy_90", "cards_50", "cards_200", "sessions_10", "time_10h"):
        assert report.is_unlocked(unlocked)
    for locked in ("accuracy_95", "cards_500", "sessions_50", "time_50h"):
        assert not report.is_unlocked(locked)
    assert report.progress["cards_1000"] == 20
    assert report.progress["time_50h"] == 20


def test_unlocked_ids_follow_catalog_order():
    report = evaluate(Statistics(study_streak_days=8, total_studied=60))
    assert report.unlocked == ["streak_3", "streak_7", "cards_50"]


def test_perfect_quiz():
    assert evaluate(Statistics(), quiz_scores=[quiz(7, 10), quiz(5, 5)]).is_unlocked("quiz_perfect")
    report = evaluate(Statistics(), quiz_scores=[quiz(9, 10)])
    assert not report.is_unlocked("quiz_perfect")
    assert report.progress["quiz_perfect"] == 0


def test_perfect_quiz_needs_questions():
    assert not evaluate(Statistics(), quiz_scores=[quiz(0, 0)]).is_unlocked("quiz_perfect")


def test_system_mastery_uses_best_system():
    report = evaluate(Statistics(), system_accuracies=[40, 92, 70])
    assert report.is_unlocked("system_master")
    report = evaluate(Statistics(), system_accuracies=[45])
    assert not report.is_unlocked("system_master")
    assert report.progress["system_master"] == 50


def test_streak_messages():
    assert "Start" in get_motivational_message(0)
    assert "5 days strong" in get_motivational_message(5)
    assert "150" in get_motivational_message(150)
    assert get_streak_emoji(0) == "🌱"
    assert get_streak_emoji(100) == "👑"


def test_next_milestone():
    assert get_next_milestone(0)["milestone"] == 3
    assert get_next_milestone(7)["name"] == "Monthly Master"
    assert get_next_milestone(100) is None
