"""Database initialization and connection management."""
import os
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = os.environ.get(
    "PHARMDECK_DB", str(Path.home() / ".pharmdeck" / "pharmdeck.db")
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS drugs (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    drug_class TEXT NOT NULL,
    system TEXT NOT NULL,
    moa TEXT NOT NULL,
    uses TEXT NOT NULL DEFAULT '[]',
    side_effects TEXT NOT NULL DEFAULT '[]',
    mnemonic TEXT,
    contraindications TEXT NOT NULL DEFAULT '[]',
    dosage TEXT
);

CREATE TABLE IF NOT EXISTS progress (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    drug_id INTEGER NOT NULL REFERENCES drugs(id),
    seen INTEGER NOT NULL DEFAULT 0,
    correct_count INTEGER NOT NULL DEFAULT 0,
    incorrect_count INTEGER NOT NULL DEFAULT 0,
    last_seen TEXT NOT NULL,
    difficulty TEXT NOT NULL DEFAULT 'medium',
    next_review_date TEXT NOT NULL,
    review_interval INTEGER NOT NULL DEFAULT 1,
    ease_factor REAL NOT NULL DEFAULT 2.5,
    needs_review INTEGER NOT NULL DEFAULT 0,
    streak_count INTEGER NOT NULL DEFAULT 0,
    UNIQUE(user_id, drug_id)
);

CREATE TABLE IF NOT EXISTS study_sessions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT,
    total_cards INTEGER NOT NULL DEFAULT 0,
    correct_cards INTEGER NOT NULL DEFAULT 0,
    incorrect_cards INTEGER NOT NULL DEFAULT 0,
    systems TEXT NOT NULL DEFAULT '[]',
    study_mode TEXT NOT NULL DEFAULT 'all',
    time_spent INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS quiz_scores (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    score INTEGER NOT NULL,
    total_questions INTEGER NOT NULL,
    completed_at TEXT NOT NULL,
    system TEXT,
    drug_class TEXT,
    time_taken INTEGER
);

CREATE TABLE IF NOT EXISTS bookmarks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    drug_id INTEGER NOT NULL REFERENCES drugs(id),
    bookmarked_at TEXT NOT NULL,
    UNIQUE(user_id, drug_id)
);

CREATE TABLE IF NOT EXISTS daily_drugs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    drug_id INTEGER NOT NULL REFERENCES drugs(id),
    UNIQUE(user_id, date)
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
