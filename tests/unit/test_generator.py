from __future__ import annotations

import json
import random
from datetime import datetime, timezone

import pytest

from logbench.domain.models import ContentSize
from logbench.generator import (
    DOMAINS,
    EVENT_ACTIONS,
    LARGE_ARRAY_FIELDS,
    LARGE_NESTED_OBJECTS,
    MAX_ARRAY_ITEMS,
    NESTED_OBJECT_FIELDS,
    ContentGenerator,
)

SMALL_FIELDS = 9
MEDIUM_FIELDS = SMALL_FIELDS + 46
LARGE_FIELDS = MEDIUM_FIELDS + 500 + 200 + 100 + 50
FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _generator(seed: int = 7) -> ContentGenerator:
    return ContentGenerator(rng=random.Random(seed), clock=lambda: FIXED_NOW)


def _is_japanese(ch: str) -> bool:
    code = ord(ch)
    return 0x3040 <= code <= 0x30FF or 0x4E00 <= code <= 0x4E00 + 0x0FFF


def test_small_document_has_scalar_event_fields():
    doc = _generator().generate(ContentSize.SMALL)

    assert len(doc) == SMALL_FIELDS
    assert doc["timestamp"] == int(FIXED_NOW.timestamp())
    assert 100 <= doc["duration"] < 5100
    assert doc["session_id"].startswith("sess_")
    assert all(not isinstance(v, (dict, list)) for v in doc.values())


def test_field_sets_are_nested_supersets():
    gen = _generator()
    small = set(gen.generate("small"))
    medium = set(gen.generate("medium"))
    large = set(gen.generate("large"))

    assert small < medium < large
    assert len(medium) == MEDIUM_FIELDS
    assert len(large) == LARGE_FIELDS


def test_medium_free_text_is_multibyte():
    doc = _generator().generate(ContentSize.MEDIUM)

    assert 20 <= len(doc["description"]) < 120
    assert 10 <= len(doc["notes"]) < 60
    assert all(_is_japanese(ch) for ch in doc["description"])
    # Must survive a JSON round trip without mojibake.
    assert json.loads(json.dumps(doc, ensure_ascii=False))["notes"] == doc["notes"]


def test_large_document_nesting_and_arrays():
    doc = _generator().generate(ContentSize.LARGE)

    nested = [doc[f"nested_obj_{i}"] for i in range(LARGE_NESTED_OBJECTS)]
    assert all(len(obj) == NESTED_OBJECT_FIELDS for obj in nested)
    assert set(nested[0]) == {f"nested_field_{j}" for j in range(NESTED_OBJECT_FIELDS)}

    for i in range(LARGE_ARRAY_FIELDS):
        items = doc[f"array_field_{i}"]
        assert 1 <= len(items) <= MAX_ARRAY_ITEMS
        assert all(item.startswith(f"array_item_{i}_") for item in items)


def test_same_seed_reproduces_documents():
    first = _generator(seed=99)
    second = _generator(seed=99)

    assert first.generate("medium") == second.generate("medium")
    assert first.uuid4() == second.uuid4()


def test_uuid4_is_version_4():
    assert _generator().uuid4().version == 4


def test_identity_helpers_draw_from_catalogs():
    gen = _generator()
    assert gen.random_domain() in DOMAINS
    assert gen.random_action() in EVENT_ACTIONS


def test_unknown_size_is_rejected():
    with pytest.raises(ValueError):
        _generator().generate("huge")
