"""Load the drug catalog and seed it into the database."""
import json
import logging
from pathlib import Path

from pharmdeck.db import get_connection
from pharmdeck.models import StudyItem
from pharmdeck.systems import normalize_tag

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"
DEFAULT_CATALOG = CONTENT_DIR / "drugs.json"

REQUIRED_FIELDS = ("id", "name", "class", "system", "moa")


def _as_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def item_from_dict(data: dict) -> StudyItem:
    """Build a StudyItem from a catalog entry (catalog field names, e.g. 'class')."""
    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
    if missing:
        raise ValueError(f"Catalog entry {data.get('name', '?')!r} is missing {', '.join(missing)}")
    return StudyItem(
        id=int(data["id"]),
        name=str(data["name"]).strip(),
        drug_class=normalize_tag(data["class"]),
        system=normalize_tag(data["system"]),
        moa=str(data["moa"]).strip(),
        uses=_as_list(data.get("uses")),
        side_effects=_as_list(data.get("side_effects")),
        mnemonic=data.get("mnemonic") or None,
        contraindications=_as_list(data.get("contraindications")),
        dosage=data.get("dosage") or None,
    )


def load_items(file_path) -> list[StudyItem]:
    """Read a catalog file (.json, .yaml or .yml) into StudyItems."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    else:
        raise ValueError(f"Unsupported catalog format: {suffix or path.name}")

    if isinstance(data, dict):
        data = data.get("drugs", [])
    items = [item_from_dict(entry) for entry in data or []]
    logger.debug("Loaded %d items from %s", len(items), path)
    return items


def is_seeded(db_path: str) -> bool:
    """Check whether the database already holds a drug catalog."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM drugs").fetchone()[0]
    conn.close()
    return count > 0


def seed_items(db_path: str, items: list[StudyItem]) -> int:
    """Insert items, skipping ids already present. Returns the number inserted."""
    conn = get_connection(db_path)
    inserted = 0
    for item in items:
        cursor = conn.execute(
            """INSERT OR IGNORE INTO drugs
            (id, name, drug_class, system, moa, uses, side_effects, mnemonic, contraindications, dosage)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                item.id, item.name, item.drug_class, item.system, item.moa,
                json.dumps(item.uses), json.dumps(item.side_effects), item.mnemonic,
                json.dumps(item.contraindications), item.dosage,
            ),
        )
        inserted += cursor.rowcount
    conn.commit()
    conn.close()
    logger.info("Seeded %d of %d catalog items", inserted, len(items))
    return inserted


def seed_all(db_path: str, catalog_path=None) -> None:
    """Seed the bundled catalog (or catalog_path) unless the database already has one."""
    if is_seeded(db_path):
        return
    seed_items(db_path, load_items(catalog_path or DEFAULT_CATALOG))
