import random

import pytest
from unittest.mock import patch

from pharmdeck.app import (
    SessionExitRequested, cmd_achievements, cmd_bookmark, cmd_stats, cmd_study, pick_drill_cards,
    run_flashcard_session, run_quiz_session, session_int_prompt, session_prompt,
)
from pharmdeck.db import init_db
from pharmdeck.quiz import generate_questions
from pharmdeck.seed import seed_all
from pharmdeck.store import (
    get_all_items, get_all_progress, get_bookmarked_ids, get_completed_sessions, get_quiz_history,
    set_setting,
)

USER = "tester"


@pytest.fixture
def seeded_db(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    return tmp_db


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("pharmdeck.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("pharmdeck.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("pharmdeck.app.Prompt.ask", return_value="hello"):
        result = session_prompt("test prompt")
        assert result == "hello"


def test_session_prompt_accepts_exit_words_as_choices():
    with patch("pharmdeck.app.Prompt.ask", return_value="y") as ask:
        session_prompt("ok?", choices=["y", "n"])
    assert ask.call_args.kwargs["choices"] == ["y", "n", "q", "menu"]


def test_session_int_prompt_returns_normal_input():
    with patch("pharmdeck.app.Prompt.ask", return_value="3"):
        result = session_int_prompt("pick", choices=["1", "2", "3", "4"])
        assert result == 3


def test_run_flashcard_session_records_answers(seeded_db):
    items = get_all_items(seeded_db)[:2]
    # Card 1: reveal, knew it. Card 2: reveal, didn't.
    with patch("pharmdeck.app.Prompt.ask", side_effect=["", "y", "", "n"]):
        result = run_flashcard_session(seeded_db, USER, items)
    assert result.correct_cards == 1
    assert result.incorrect_cards == 1
    assert result.new_cards_learned == 2
    assert result.cards_needing_review == 1
    progress = {p.item_id: p for p in get_all_progress(seeded_db, USER)}
    assert progress[items[1].id].needs_review is True
    assert len(get_completed_sessions(seeded_db, USER)) == 1


def test_run_flashcard_session_exits_on_q(seeded_db):
    """First card answered, 'q' on the second reveal: progress kept, session closed."""
    items = get_all_items(seeded_db)[:2]
    with patch("pharmdeck.app.Prompt.ask", side_effect=["", "y", "q"]):
        with pytest.raises(SessionExitRequested):
            run_flashcard_session(seeded_db, USER, items)
    progress = get_all_progress(seeded_db, USER)
    assert [p.item_id for p in progress] == [items[0].id]
    [session] = get_completed_sessions(seeded_db, USER)
    assert session.correct_cards == 1


def test_run_flashcard_session_empty(seeded_db):
    assert run_flashcard_session(seeded_db, USER, []) is None


def test_run_quiz_session_saves_score(seeded_db):
    questions = generate_questions(get_all_items(seeded_db), 2)
    answers = [str(q.correct_answer_index + 1) for q in questions]
    with patch("pharmdeck.app.Prompt.ask", side_effect=answers):
        result = run_quiz_session(seeded_db, USER, questions)
    assert result.score == 2
    [saved] = get_quiz_history(seeded_db, USER)
    assert saved.score == 2
    assert saved.total_questions == 2


def test_run_quiz_session_exits_on_q(seeded_db):
    questions = generate_questions(get_all_items(seeded_db), 2)
    with patch("pharmdeck.app.Prompt.ask", side_effect=["1", "q"]):
        with pytest.raises(SessionExitRequested):
            run_quiz_session(seeded_db, USER, questions)
    assert get_quiz_history(seeded_db, USER) == []


def test_cmd_bookmark_toggles(seeded_db):
    with patch("pharmdeck.app.Prompt.ask", return_value="warfarin"):
        cmd_bookmark(seeded_db, USER)
    assert get_bookmarked_ids(seeded_db, USER) == {7}
    with patch("pharmdeck.app.Prompt.ask", return_value="Warfarin"):
        cmd_bookmark(seeded_db, USER)
    assert get_bookmarked_ids(seeded_db, USER) == set()


def test_dashboards_render_without_data(seeded_db):
    cmd_stats(seeded_db, USER)
    cmd_achievements(seeded_db, USER)


def drill_first_card(db_path, seed):
    with patch("pharmdeck.app.Prompt.ask", side_effect=["all", "0"]), \
            patch("pharmdeck.app.run_flashcard_session") as run:
        cmd_study(db_path, USER, rng=random.Random(seed))
    return run.call_args.args[2]


def test_cmd_study_shuffles_and_limits_cards(seeded_db):
    set_setting(seeded_db, "cards_per_session", "5")
    cards = drill_first_card(seeded_db, 1)
    expected = get_all_items(seeded_db)
    random.Random(1).shuffle(expected)
    assert [c.id for c in cards] == [c.id for c in expected[:5]]


def test_cmd_study_drills_start_on_different_cards(seeded_db):
    first_cards = {drill_first_card(seeded_db, seed)[0].id for seed in range(10)}
    assert len(first_cards) > 1


def test_pick_drill_cards_keeps_review_order(pool):
    assert pick_drill_cards(pool, "review", 3, rng=random.Random(0)) == pool[:3]


def test_pick_drill_cards_does_not_mutate_candidates(pool):
    original = list(pool)
    pick_drill_cards(pool, "all", 5, rng=random.Random(0))
    assert pool == original
