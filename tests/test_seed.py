import json

import pytest

from pharmdeck.db import init_db, get_connection
from pharmdeck.seed import is_seeded, item_from_dict, load_items, seed_all, seed_items, DEFAULT_CATALOG


def test_bundled_catalog_loads():
    items = load_items(DEFAULT_CATALOG)
    assert len(items) == 14
    assert len({i.id for i in items}) == 14
    assert all(i.moa and i.uses and i.side_effects for i in items)


def test_seed_all(tmp_db):
    init_db(tmp_db)
    assert not is_seeded(tmp_db)
    seed_all(tmp_db)
    assert is_seeded(tmp_db)
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM drugs").fetchone()[0] == 14
    conn.close()


def test_seed_all_is_idempotent(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    seed_all(tmp_db)
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM drugs").fetchone()[0] == 14
    conn.close()


def test_seed_items_skips_existing_ids(tmp_db):
    init_db(tmp_db)
    items = load_items(DEFAULT_CATALOG)
    assert seed_items(tmp_db, items[:3]) == 3
    assert seed_items(tmp_db, items[:5]) == 2


def test_load_yaml_catalog(tmp_path):
    path = tmp_path / "drugs.yaml"
    path.write_text(
        "drugs:\n"
        "  - id: 1\n"
        "    name: Digoxin\n"
        "    class: Cardiac glycoside\n"
        "    system: CVS\n"
        "    moa: Inhibits Na/K ATPase\n"
        "    uses: [Heart failure, Atrial fibrillation]\n"
        "    side_effects: Visual disturbances\n"
    )
    [item] = load_items(path)
    assert item.drug_class == "Cardiac glycoside"
    assert item.uses == ["Heart failure", "Atrial fibrillation"]
    assert item.side_effects == ["Visual disturbances"]
    assert item.contraindications == []


def test_load_json_list_catalog(tmp_path):
    path = tmp_path / "drugs.json"
    path.write_text(json.dumps([
        {"id": 2, "name": "Heparin", "class": "Anticoagulant", "system": " Hematological ", "moa": "Activates antithrombin"},
    ]))
    [item] = load_items(path)
    assert item.system == "Hematological"


def test_load_unsupported_format(tmp_path):
    path = tmp_path / "drugs.csv"
    path.write_text("id,name\n")
    with pytest.raises(ValueError):
        load_items(path)


def test_item_missing_required_field():
    with pytest.raises(ValueError, match="moa"):
        item_from_dict({"id": 1, "name": "X", "class": "C", "system": "S"})
