"""Data classes for the study engine's value objects."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

DIFFICULTIES = ("easy", "medium", "hard")
STUDY_MODES = ("all", "bookmarked", "unseen", "review")
QUESTION_TYPES = ("moa", "uses", "side_effects", "general")
ACHIEVEMENT_CATEGORIES = ("streak", "accuracy", "volume", "speed", "mastery")


@dataclass
class StudyItem:
    id: int
    name: str
    drug_class: str
    system: str
    moa: str
    uses: list[str] = field(default_factory=list)
    side_effects: list[str] = field(default_factory=list)
    mnemonic: Optional[str] = None
    contraindications: list[str] = field(default_factory=list)
    dosage: Optional[str] = None


@dataclass
class ProgressRecord:
    item_id: int
    last_seen: datetime
    next_review_date: datetime
    seen: bool = False
    correct_count: int = 0
    incorrect_count: int = 0
    difficulty: str = "medium"
    review_interval: int = 1  # days
    ease_factor: float = 2.5
    needs_review: bool = False
    streak_count: int = 0


@dataclass
class StudySession:
    id: str
    start_time: datetime
    total_cards: int
    systems: list[str] = field(default_factory=list)
    study_mode: str = "all"
    end_time: Optional[datetime] = None
    correct_cards: int = 0
    incorrect_cards: int = 0
    time_spent_minutes: int = 0

    @property
    def is_completed(self) -> bool:
        return self.end_time is not None


@dataclass
class SessionResult:
    session_id: str
    total_cards: int
    correct_cards: int
    incorrect_cards: int
    accuracy_pct: int
    time_spent_minutes: int
    cards_needing_review: int
    new_cards_learned: int
    systems: list[str] = field(default_factory=list)
    study_mode: str = "all"


@dataclass
class Statistics:
    total_studied: int = 0
    total_correct: int = 0
    total_incorrect: int = 0
    average_accuracy_pct: int = 0
    study_streak_days: int = 0
    cards_needing_review: int = 0
    total_time_spent_minutes: int = 0
    sessions_completed: int = 0


@dataclass
class SystemPerformance:
    system: str
    total_cards: int
    studied_cards: int
    accuracy_pct: int
    average_difficulty: str = "medium"


@dataclass
class QuizScore:
    score: int
    total_questions: int
    completed_at: datetime
    system: Optional[str] = None
    drug_class: Optional[str] = None
    time_taken_seconds: Optional[int] = None


@dataclass
class QuizQuestion:
    id: str
    item_id: int
    question_text: str
    options: list[str]
    correct_answer_index: int
    type: str = "general"


@dataclass
class QuizResult:
    score: int
    total: int
    percentage: int
    correct_indices: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    category: str
    requirement: float


@dataclass
class AchievementReport:
    unlocked: list[str] = field(default_factory=list)
    progress: dict[str, float] = field(default_factory=dict)

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self.unlocked
