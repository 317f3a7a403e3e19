"""Display metadata for body-system tags.

System tags are open strings discovered from the catalog. Known tags get a
label, icon and color; anything else falls back to its own name as label.
"""
from typing import Iterable

from pharmdeck.models import StudyItem

SYSTEM_METADATA = {
    "ANS": {"label": "Autonomic Nervous System", "icon": "🔗", "color": "#9f7aea"},
    "CNS": {"label": "Central Nervous System", "icon": "🧠", "color": "#805ad5"},
    "CVS": {"label": "Cardiovascular System", "icon": "❤️", "color": "#e53e3e"},
    "Renal": {"label": "Renal System / Diuretics", "icon": "🫘", "color": "#4299e1"},
    "Respiratory": {"label": "Respiratory System", "icon": "🫁", "color": "#38b2ac"},
    "GIT": {"label": "Gastrointestinal System", "icon": "🍽️", "color": "#d69e2e"},
    "Endocrine": {"label": "Endocrine System", "icon": "⚖️", "color": "#38a169"},
    "Reproductive": {"label": "Reproductive System", "icon": "🌸", "color": "#ed64a6"},
    "Hematological": {"label": "Hematological System", "icon": "🩸", "color": "#c53030"},
    "Immune": {"label": "Immune System / Immunomodulators", "icon": "🛡️", "color": "#48bb78"},
    "Musculoskeletal": {"label": "Musculoskeletal System", "icon": "🦴", "color": "#a0aec0"},
    "Antimicrobial": {"label": "Antimicrobial Drugs", "icon": "🦠", "color": "#3182ce"},
    "Antiparasitic": {"label": "Antiparasitic Drugs", "icon": "🪱", "color": "#f56500"},
    "Antiviral": {"label": "Antiviral Drugs", "icon": "🦠", "color": "#0bc5ea"},
    "Antifungal": {"label": "Antifungal Drugs", "icon": "🍄", "color": "#68d391"},
    "Anticancer": {"label": "Anticancer / Chemotherapy", "icon": "🎗️", "color": "#fc8181"},
    "Dermatological": {"label": "Skin and Mucous Membranes", "icon": "🧴", "color": "#fbb6ce"},
    "Vitamins": {"label": "Vitamins and Minerals", "icon": "💊", "color": "#fbd38d"},
    "Toxicology": {"label": "Toxicology / Antidotes", "icon": "☠️", "color": "#718096"},
    "Miscellaneous": {"label": "Miscellaneous / Others", "icon": "🔬", "color": "#a78bfa"},
    "Vaccines": {"label": "Vaccines & Diagnostic Agents", "icon": "💉", "color": "#4fd1c7"},
    # Older tag spellings still found in some catalogs
    "GI": {"label": "Gastrointestinal System", "icon": "🍽️", "color": "#d69e2e"},
    "Antibiotics": {"label": "Antimicrobial Drugs", "icon": "🦠", "color": "#3182ce"},
    "Hemo": {"label": "Hematological System", "icon": "🩸", "color": "#c53030"},
    "Cardio": {"label": "Cardiovascular System", "icon": "❤️", "color": "#e53e3e"},
}

DEFAULT_METADATA = {"label": "Unknown", "icon": "💊", "color": "#666"}


def normalize_tag(tag: str) -> str:
    """Strip surrounding whitespace; tags are otherwise compared exactly."""
    if not isinstance(tag, str) or not tag.strip():
        raise ValueError(f"Invalid system tag: {tag!r}")
    return tag.strip()


def get_unique_systems(items: Iterable[StudyItem]) -> list[str]:
    return sorted({i.system for i in items if i.system})


def get_system_info(system: str) -> dict:
    meta = SYSTEM_METADATA.get(system) or {**DEFAULT_METADATA, "label": system}
    return {"key": system, **meta}


def get_systems_with_metadata(items: Iterable[StudyItem]) -> list[dict]:
    return [get_system_info(s) for s in get_unique_systems(items)]


def is_valid_system(system: str, items: Iterable[StudyItem]) -> bool:
    return system in get_unique_systems(items)
