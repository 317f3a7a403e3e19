from datetime import datetime

import pytest

from pharmdeck.models import ProgressRecord, StudyItem

NOW = datetime(2024, 5, 15, 12, 0, 0)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_pharmdeck.db")
    return db_path


@pytest.fixture
def now():
    return NOW


def make_item(item_id, **overrides):
    data = dict(
        id=item_id,
        name=f"Drug{item_id}",
        drug_class=f"Class{item_id}",
        system=f"System{item_id}",
        moa=f"Mechanism {item_id}",
        uses=[f"Use {item_id}a", f"Use {item_id}b"],
        side_effects=[f"Effect {item_id}a", f"Effect {item_id}b"],
    )
    data.update(overrides)
    return StudyItem(**data)


def make_record(item_id, **overrides):
    data = dict(item_id=item_id, last_seen=NOW, next_review_date=NOW)
    data.update(overrides)
    return ProgressRecord(**data)


@pytest.fixture
def pool():
    """Five items with fully distinct fields."""
    return [make_item(i) for i in range(1, 6)]
