# tests/test_systems.py
import pytest

from pharmdeck.systems import (
    get_system_info, get_systems_with_metadata, get_unique_systems, is_valid_system, normalize_tag,
)
from conftest import make_item


def test_known_system_info():
    info = get_system_info("CVS")
    assert info["key"] == "CVS"
    assert info["label"] == "Cardiovascular System"


def test_unknown_system_uses_key_as_label():
    info = get_system_info("Ophthalmic")
    assert info["label"] == "Ophthalmic"
    assert info["icon"] == "💊"


def test_unique_systems_sorted():
    items = [make_item(1, system="Renal"), make_item(2, system="CNS"), make_item(3, system="Renal")]
    assert get_unique_systems(items) == ["CNS", "Renal"]
    assert [s["key"] for s in get_systems_with_metadata(items)] == ["CNS", "Renal"]
    assert is_valid_system("CNS", items)
    assert not is_valid_system("CVS", items)


def test_normalize_tag():
    assert normalize_tag("  CNS ") == "CNS"
    with pytest.raises(ValueError):
        normalize_tag("   ")
    with pytest.raises(ValueError):
        normalize_tag(None)
