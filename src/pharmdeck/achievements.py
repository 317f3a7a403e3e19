"""Achievement catalog and unlock evaluation.

Unlock state is never stored: it is derived from the current statistics
every time `evaluate` runs.
"""
from typing import Iterable, Optional

from pharmdeck.models import Achievement, AchievementReport, QuizScore, Statistics

ACHIEVEMENTS = (
    # Streak
    Achievement("streak_3", "Getting Started", "Study for 3 consecutive days", "🔥", "streak", 3),
    Achievement("streak_7", "Week Warrior", "Study for 7 consecutive days", "⚡", "streak", 7),
    Achievement("streak_30", "Monthly Master", "Study for 30 consecutive days", "🏆", "streak", 30),
    Achievement("streak_100", "Century Scholar", "Study for 100 consecutive days", "👑", "streak", 100),
    # Accuracy
    Achievement("accuracy_80", "Sharp Mind", "Achieve 80% accuracy overall", "🎯", "accuracy", 80),
    Achievement("accuracy_90", "Precision Expert", "Achieve 90% accuracy overall", "🏹", "accuracy", 90),
    Achievement("accuracy_95", "Near Perfect", "Achieve 95% accuracy overall", "💎", "accuracy", 95),
    # Volume
    Achievement("cards_50", "Dedicated Learner", "Study 50 flashcards", "📚", "volume", 50),
    Achievement("cards_200", "Knowledge Seeker", "Study 200 flashcards", "🎓", "volume", 200),
    Achievement("cards_500", "Study Machine", "Study 500 flashcards", "🤖", "volume", 500),
    Achievement("cards_1000", "Master Scholar", "Study 1000 flashcards", "🧙", "volume", 1000),
    # Speed
    Achievement("quiz_perfect", "Perfect Score", "Get 100% on any quiz", "⭐", "speed", 100),
    Achievement("sessions_10", "Consistent Student", "Complete 10 study sessions", "📖", "speed", 10),
    Achievement("sessions_50", "Study Veteran", "Complete 50 study sessions", "🎖", "speed", 50),
    # Mastery
    Achievement("system_master", "System Master", "Achieve 90% accuracy in any system", "🏅", "mastery", 90),
    Achievement("time_10h", "Time Invested", "Study for 10 total hours", "⏰", "mastery", 600),
    Achievement("time_50h", "Dedicated Scholar", "Study for 50 total hours", "⌛", "mastery", 3000),
)

# Which Statistics field each numeric achievement is measured against.
_STAT_FIELDS = {
    "streak": "study_streak_days",
    "accuracy": "average_accuracy_pct",
    "volume": "total_studied",
    "sessions": "sessions_completed",
    "time": "total_time_spent_minutes",
}

STREAK_MILESTONES = (
    (3, "🔥", "Getting Started"),
    (7, "⚡", "Week Warrior"),
    (30, "🏆", "Monthly Master"),
    (100, "👑", "Century Scholar"),
)


def get_achievement_by_id(achievement_id: str) -> Optional[Achievement]:
    for achievement in ACHIEVEMENTS:
        if achievement.id == achievement_id:
            return achievement
    return None


def get_achievements_by_category(category: str) -> list[Achievement]:
    return [a for a in ACHIEVEMENTS if a.category == category]


def _stat_field(achievement: Achievement) -> Optional[str]:
    prefix = achievement.id.split("_")[0]
    if prefix == "cards":
        prefix = "volume"
    return _STAT_FIELDS.get(prefix)


def _has_perfect_quiz(quiz_scores: Iterable[QuizScore]) -> bool:
    return any(q.total_questions > 0 and q.score == q.total_questions for q in quiz_scores)


def _capped_progress(value: float, requirement: float) -> float:
    if requirement <= 0:
        return 100.0
    return min(100.0, max(0.0, value / requirement * 100))


def evaluate(
    stats: Statistics,
    system_accuracies: Iterable[float] = (),
    quiz_scores: Iterable[QuizScore] = (),
) -> AchievementReport:
    """Work out which achievements are unlocked and how close the rest are.

    Args:
        stats: Lifetime statistics
        system_accuracies: Accuracy percentage per body system
        quiz_scores: Quiz history

    Returns:
        AchievementReport with unlocked ids in catalog order and a 0-100
        progress value for every achievement.
    """
    best_system = max(system_accuracies, default=0)
    perfect_quiz = _has_perfect_quiz(quiz_scores)
    report = AchievementReport()

    for achievement in ACHIEVEMENTS:
        if achievement.id == "quiz_perfect":
            unlocked = perfect_quiz
            progress = 100.0 if unlocked else 0.0
        elif achievement.id == "system_master":
            unlocked = best_system >= achievement.requirement
            progress = _capped_progress(best_system, achievement.requirement)
        else:
            field_name = _stat_field(achievement)
            if field_name is None:
                continue
            value = getattr(stats, field_name)
            unlocked = value >= achievement.requirement
            progress = _capped_progress(value, achievement.requirement)

        if unlocked:
            report.unlocked.append(achievement.id)
        report.progress[achievement.id] = progress
    return report


def get_motivational_message(streak: int) -> str:
    if streak == 0:
        return "Start your learning journey today! 🚀"
    elif streak < 3:
        return "Great start! Keep going to build your streak! 🔥"
    elif streak < 7:
        return f"You're on fire! {streak} days strong! 🔥"
    elif streak < 30:
        return f"Amazing consistency! {streak} days of learning! ⚡"
    elif streak < 100:
        return f"Incredible dedication! {streak} days streak! 🏆"
    return f"Legendary scholar! {streak} days of mastery! 👑"


def get_streak_emoji(streak: int) -> str:
    if streak == 0:
        return "🌱"
    if streak < 3:
        return "🔥"
    if streak < 7:
        return "⚡"
    if streak < 30:
        return "🏆"
    if streak < 100:
        return "💎"
    return "👑"


def get_next_milestone(streak: int) -> Optional[dict]:
    """The next streak milestone above the current streak, or None past the last one."""
    for milestone, emoji, name in STREAK_MILESTONES:
        if milestone > streak:
            return {"milestone": milestone, "emoji": emoji, "name": name}
    return None
