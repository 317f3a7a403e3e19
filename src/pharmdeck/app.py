"""Interactive CLI application."""
import logging
import os
import random
import time
from datetime import datetime

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from pharmdeck.achievements import (
    ACHIEVEMENTS, get_motivational_message, get_next_milestone, get_streak_emoji,
)
from pharmdeck.db import init_db, DEFAULT_DB_PATH
from pharmdeck.models import QuizScore, SessionResult, StudyItem
from pharmdeck.quiz import generate_questions, score
from pharmdeck.review import select_session_items
from pharmdeck.seed import seed_all, is_seeded
from pharmdeck.stats import (
    end_session, get_system_performance, record_answer, start_session, summarize_session,
)
from pharmdeck.store import (
    add_bookmark, get_achievement_report, get_all_items, get_all_progress,
    get_bookmarked_ids, get_current_user, get_daily_item, get_due_items,
    get_int_setting, get_statistics, is_bookmarked, record_card_answer,
    remove_bookmark, reset_progress, save_quiz_score, save_session,
)
from pharmdeck.systems import get_system_info, get_systems_with_metadata

console = Console()
logger = logging.getLogger(__name__)

MIN_QUIZ_POOL = 5
EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the user leaves a drill or quiz early."""


def setup_logging(level: str | None = None) -> None:
    level = level or os.environ.get("PHARMDECK_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def session_prompt(text: str, choices: list[str] | None = None, **kwargs) -> str:
    """Prompt inside a drill; 'q' or 'menu' abandons it."""
    if choices is not None:
        choices = list(choices) + [w for w in EXIT_WORDS if w not in choices]
    answer = Prompt.ask(text, choices=choices, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(text: str, choices: list[str]) -> int:
    return int(session_prompt(text, choices=choices))


def show_welcome():
    console.print(Panel(
        "[bold]Pharmacology Flashcards[/bold]\n[dim]Spaced repetition, quizzes and streaks[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("study", "Flashcard drill"),
        ("review", "Cards due for review"),
        ("quiz", "Multiple-choice quiz"),
        ("stats", "Statistics + system breakdown"),
        ("achievements", "Streak and achievements"),
        ("daily", "Drug of the day"),
        ("bookmark", "Bookmark or unbookmark a drug"),
        ("reset", "Erase all progress"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def render_card_back(item: StudyItem) -> str:
    lines = [f"[bold]Mechanism:[/bold] {item.moa}"]
    if item.uses:
        lines.append(f"[bold]Uses:[/bold] {', '.join(item.uses)}")
    if item.side_effects:
        lines.append(f"[bold]Side effects:[/bold] {', '.join(item.side_effects)}")
    if item.contraindications:
        lines.append(f"[bold]Contraindications:[/bold] {', '.join(item.contraindications)}")
    if item.dosage:
        lines.append(f"[bold]Dosage:[/bold] {item.dosage}")
    if item.mnemonic:
        lines.append(f"[dim]Mnemonic: {item.mnemonic}[/dim]")
    return "\n".join(lines)


def run_flashcard_session(
    db_path: str, user_id: str, items: list[StudyItem], mode: str = "all", systems: list[str] | None = None,
) -> SessionResult | None:
    if not items:
        console.print("[yellow]No flashcards to study right now![/yellow]")
        return None
    progress_before = get_all_progress(db_path, user_id)
    session = start_session(systems or [], mode, len(items))
    save_session(db_path, user_id, session)
    console.print(f"\n[bold]Flashcard Session[/bold] — {len(items)} cards [dim](q to stop)[/dim]\n")
    try:
        for i, item in enumerate(items, 1):
            info = get_system_info(item.system)
            console.print(Panel(
                f"[bold]{item.name}[/bold]\n{item.drug_class} · {info['icon']} {info['label']}",
                title=f"Card {i}/{len(items)}", border_style="cyan",
            ))
            session_prompt("[dim]Press Enter to reveal[/dim]", default="", show_default=False)
            console.print(Panel(render_card_back(item), border_style="green"))
            correct = session_prompt("Did you know it?", choices=["y", "n"]) == "y"
            record_card_answer(db_path, user_id, item.id, correct)
            session = record_answer(session, correct)
            save_session(db_path, user_id, session)
            console.print()
    finally:
        session = end_session(session)
        save_session(db_path, user_id, session)

    result = summarize_session(session, progress_before, get_all_progress(db_path, user_id))
    show_session_result(result)
    return result


def show_session_result(result: SessionResult) -> None:
    color = "green" if result.accuracy_pct >= 80 else "yellow" if result.accuracy_pct >= 60 else "red"
    console.print(Panel(
        f"Correct: [green]{result.correct_cards}[/green]  Incorrect: [red]{result.incorrect_cards}[/red]\n"
        f"Accuracy: [{color}]{result.accuracy_pct}%[/{color}]  Time: {result.time_spent_minutes} min\n"
        f"New cards learned: {result.new_cards_learned}  Cards needing review: {result.cards_needing_review}",
        title="Session Complete", border_style=color,
    ))


def run_quiz_session(db_path: str, user_id: str, questions: list, system: str | None = None):
    if not questions:
        console.print("[yellow]No questions available![/yellow]")
        return None
    chosen = []
    started = time.monotonic()
    console.print(f"\n[bold]Quiz[/bold] — {len(questions)} questions [dim](q to stop)[/dim]\n")
    for i, q in enumerate(questions, 1):
        console.print(f"[bold]Q{i}.[/bold] {q.question_text}\n")
        for n, option in enumerate(q.options, 1):
            console.print(f"  [cyan]{n})[/cyan] {option}")
        answer = session_int_prompt("\nYour answer", choices=[str(n) for n in range(1, len(q.options) + 1)])
        chosen.append(answer - 1)
        if answer - 1 == q.correct_answer_index:
            console.print("[green]Correct![/green]\n")
        else:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{q.options[q.correct_answer_index]}[/green]\n")

    result = score(questions, chosen)
    save_quiz_score(db_path, user_id, QuizScore(
        score=result.score,
        total_questions=result.total,
        completed_at=datetime.now(),
        system=system,
        time_taken_seconds=round(time.monotonic() - started),
    ))
    console.print(f"[bold]Score: {result.score}/{result.total} ({result.percentage}%)[/bold]\n")
    return result


def choose_system(items: list[StudyItem]) -> str | None:
    systems = get_systems_with_metadata(items)
    console.print("  [cyan]0[/cyan]) All systems")
    for n, s in enumerate(systems, 1):
        console.print(f"  [cyan]{n}[/cyan]) {s['icon']} {s['label']}")
    pick = Prompt.ask("Select system", choices=[str(n) for n in range(len(systems) + 1)], default="0")
    return None if pick == "0" else systems[int(pick) - 1]["key"]


def pick_drill_cards(candidates: list, mode: str, limit: int, rng: random.Random | None = None) -> list:
    """Shuffle every mode except review, whose due order is kept, then take the first limit."""
    cards = list(candidates)
    if mode != "review":
        (rng or random).shuffle(cards)
    return cards[:limit]


def cmd_study(db_path: str, user_id: str, rng: random.Random | None = None):
    console.print("\n[bold]Flashcard Drill[/bold]")
    items = get_all_items(db_path)
    mode = Prompt.ask("Study mode", choices=["all", "unseen", "bookmarked", "review"], default="all")
    system = choose_system(items)
    systems = [system] if system else []
    candidates = select_session_items(
        items, get_all_progress(db_path, user_id), mode,
        systems=systems, bookmarked_ids=get_bookmarked_ids(db_path, user_id),
    )
    limit = get_int_setting(db_path, "cards_per_session", 15)
    cards = pick_drill_cards(candidates, mode, limit, rng=rng)
    run_flashcard_session(db_path, user_id, cards, mode=mode, systems=systems)


def cmd_review(db_path: str, user_id: str):
    console.print("\n[bold]Review Due Cards[/bold]")
    limit = get_int_setting(db_path, "cards_per_session", 15)
    items = get_due_items(db_path, user_id, limit=limit)
    systems = sorted({i.system for i in items})
    run_flashcard_session(db_path, user_id, items, mode="review", systems=systems)


def cmd_quiz(db_path: str, user_id: str):
    console.print("\n[bold]Practice Quiz[/bold]")
    items = get_all_items(db_path)
    system = choose_system(items)
    pool = [i for i in items if system is None or i.system == system]
    if len(pool) < MIN_QUIZ_POOL:
        console.print("[yellow]Not enough drugs in that system for a quiz. Pick another one.[/yellow]")
        return
    count = get_int_setting(db_path, "quiz_length", 10)
    run_quiz_session(db_path, user_id, generate_questions(pool, count), system=system)


def cmd_stats(db_path: str, user_id: str):
    stats = get_statistics(db_path, user_id)
    console.print(Panel(
        f"Studied: [bold]{stats.total_studied}[/bold]  |  "
        f"Accuracy: [bold]{stats.average_accuracy_pct}%[/bold]  |  "
        f"Streak: [bold]{stats.study_streak_days}[/bold] days\n"
        f"Needing review: [bold]{stats.cards_needing_review}[/bold]  |  "
        f"Sessions: [bold]{stats.sessions_completed}[/bold]  |  "
        f"Time: [bold]{stats.total_time_spent_minutes}[/bold] min",
        title="Study Statistics", border_style="blue",
    ))
    table = Table(title="System Breakdown")
    table.add_column("System", style="cyan")
    table.add_column("Studied", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Difficulty")
    performance = get_system_performance(get_all_items(db_path), get_all_progress(db_path, user_id))
    for p in performance:
        color = "green" if p.accuracy_pct >= 80 else "yellow" if p.accuracy_pct >= 60 else "red"
        table.add_row(
            get_system_info(p.system)["label"],
            f"{p.studied_cards}/{p.total_cards}",
            f"[{color}]{p.accuracy_pct}%[/{color}]",
            p.average_difficulty,
        )
    console.print(table)

    studied = [p for p in performance if p.studied_cards]
    if studied:
        weakest = min(studied, key=lambda p: p.accuracy_pct)
        if weakest.accuracy_pct < 70:
            console.print(f"\n  [yellow]Recommendation: focus on {weakest.system} ({weakest.accuracy_pct}%)[/yellow]")


def cmd_achievements(db_path: str, user_id: str):
    stats, report = get_achievement_report(db_path, user_id)
    streak = stats.study_streak_days
    console.print(Panel(
        f"{get_streak_emoji(streak)} [bold]{streak} Day Streak[/bold]\n{get_motivational_message(streak)}",
        border_style="magenta",
    ))
    milestone = get_next_milestone(streak)
    if milestone:
        console.print(f"  Next: {milestone['emoji']} {milestone['name']} at {milestone['milestone']} days\n")

    table = Table(title=f"Achievements ({len(report.unlocked)}/{len(ACHIEVEMENTS)})")
    table.add_column("")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Progress", justify="right")
    for a in ACHIEVEMENTS:
        if report.is_unlocked(a.id):
            status = "[green]Unlocked[/green]"
        else:
            status = f"{report.progress.get(a.id, 0):.0f}%"
        table.add_row(a.icon, a.name, a.description, status)
    console.print(table)


def cmd_daily(db_path: str, user_id: str):
    item = get_daily_item(db_path, user_id)
    if item is None:
        console.print("[yellow]No drugs in the catalog.[/yellow]")
        return
    console.print(Panel(
        f"[bold]{item.name}[/bold] — {item.drug_class} ({item.system})\n\n{render_card_back(item)}",
        title="Drug of the Day", border_style="yellow",
    ))


def cmd_bookmark(db_path: str, user_id: str):
    items = get_all_items(db_path)
    name = Prompt.ask("Drug name").strip().lower()
    match = next((i for i in items if i.name.lower() == name), None)
    if match is None:
        console.print(f"[red]No drug named {name!r}[/red]")
        return
    if is_bookmarked(db_path, user_id, match.id):
        remove_bookmark(db_path, user_id, match.id)
        console.print(f"[dim]Removed bookmark: {match.name}[/dim]")
    else:
        add_bookmark(db_path, user_id, match.id)
        console.print(f"[green]Bookmarked {match.name}[/green]")


def cmd_reset(db_path: str, user_id: str):
    if Prompt.ask("Erase all progress, sessions and quiz scores?", choices=["y", "n"], default="n") == "y":
        reset_progress(db_path, user_id)
        console.print("[green]Progress reset.[/green]")


COMMANDS = {
    "study": cmd_study,
    "review": cmd_review,
    "quiz": cmd_quiz,
    "stats": cmd_stats,
    "achievements": cmd_achievements,
    "daily": cmd_daily,
    "bookmark": cmd_bookmark,
    "reset": cmd_reset,
}


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")
    user_id = get_current_user(db_path)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="study").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]Keep the streak going![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path, user_id)
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
