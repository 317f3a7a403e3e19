"""Multiple-choice quiz generation and scoring."""
import logging
import random
import time
from typing import Iterable, Optional, Sequence

from pharmdeck.models import QuizQuestion, QuizResult, StudyItem
from pharmdeck.stats import percent

logger = logging.getLogger(__name__)

QUESTION_KINDS = ("moa", "uses", "side_effects", "class", "system")
DISTRACTOR_COUNT = 3

QUESTION_TEXT = {
    "moa": "What is the mechanism of action of {name}?",
    "uses": "Which of the following is a clinical use of {name}?",
    "side_effects": "Which of the following is a side effect of {name}?",
    "class": "{name} belongs to which drug class?",
    "system": "{name} primarily affects which body system?",
}

# class and system questions are both reported as "general"
QUESTION_TYPE = {
    "moa": "moa",
    "uses": "uses",
    "side_effects": "side_effects",
    "class": "general",
    "system": "general",
}


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def _answers_for(kind: str, item: StudyItem, pool: Sequence[StudyItem], rng: random.Random):
    """Correct answer and candidate distractors for one kind, or None if the item can't support it."""
    others = [d for d in pool if d.id != item.id]

    if kind == "moa":
        if not item.moa:
            return None
        wrong = _unique(d.moa for d in others if d.moa != item.moa)
        return item.moa, wrong

    if kind in ("uses", "side_effects"):
        own = getattr(item, kind)
        if not own:
            return None
        correct = rng.choice(own)
        wrong = _unique(v for d in others for v in getattr(d, kind) if v not in own)
        return correct, wrong

    attr = "drug_class" if kind == "class" else "system"
    tag = getattr(item, attr)
    if not tag:
        return None
    wrong = _unique(getattr(d, attr) for d in others if getattr(d, attr) != tag)
    return tag, wrong


def _build_question(item: StudyItem, pool: Sequence[StudyItem], rng: random.Random) -> Optional[QuizQuestion]:
    first = rng.choice(QUESTION_KINDS)
    rest = [k for k in QUESTION_KINDS if k != first]
    rng.shuffle(rest)

    best = None
    for kind in [first] + rest:
        answers = _answers_for(kind, item, pool, rng)
        if answers is None:
            continue
        correct, wrong = answers
        distractors = rng.sample(wrong, min(DISTRACTOR_COUNT, len(wrong)))
        if best is None or len(distractors) > len(best[2]):
            best = (kind, correct, distractors)
        if len(distractors) == DISTRACTOR_COUNT:
            break

    if best is None:
        logger.debug("No question can be built for item %s", item.id)
        return None
    kind, correct, distractors = best
    if kind != first:
        logger.debug("Item %s: fell back from %s to %s questions", item.id, first, kind)

    options = [correct] + distractors
    rng.shuffle(options)
    return QuizQuestion(
        id=f"{kind}_{item.id}_{int(time.time() * 1000)}",
        item_id=item.id,
        question_text=QUESTION_TEXT[kind].format(name=item.name),
        options=options,
        correct_answer_index=options.index(correct),
        type=QUESTION_TYPE[kind],
    )


def generate_questions(
    pool: Iterable[StudyItem],
    count: int = 10,
    rng: Optional[random.Random] = None,
) -> list[QuizQuestion]:
    """Build up to `count` questions, one per distinct item in the pool.

    Each question has the correct answer and up to three distractors taken
    from other items. When the randomly drawn question kind can't produce
    three distractors for an item, the other kinds are tried before settling
    for fewer options.
    """
    rng = rng or random.Random()
    pool = list(pool)
    shuffled = pool[:]
    rng.shuffle(shuffled)

    questions = []
    used = set()
    for item in shuffled:
        if len(questions) >= count:
            break
        if item.id in used:
            continue
        used.add(item.id)
        question = _build_question(item, pool, rng)
        if question is not None:
            questions.append(question)
    return questions


def score(questions: Sequence[QuizQuestion], chosen_indices: Sequence[Optional[int]]) -> QuizResult:
    """Compare chosen option indices with the correct ones. Unanswered counts as wrong."""
    correct_indices = [q.correct_answer_index for q in questions]
    points = sum(
        1 for i, correct in enumerate(correct_indices)
        if i < len(chosen_indices) and chosen_indices[i] == correct
    )
    return QuizResult(
        score=points,
        total=len(questions),
        percentage=percent(points, len(questions)),
        correct_indices=correct_indices,
    )
