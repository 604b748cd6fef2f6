"""Tests for core/content_catalog.py"""

import json
from pathlib import Path

import pytest

from conftest import make_content, make_student
from core.content import ContentType
from core.content_catalog import ContentCatalog
from core.exceptions import CatalogError
from core.student_model import AgeGroup

SAMPLE_DATA = Path(__file__).parent.parent / "data" / "content"


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


@pytest.fixture
def catalog_dir(tmp_path):
    write_json(tmp_path / "mathematics" / "numbers.json", {"content": [
        {"id": "count", "type": "game", "difficulty": 900, "age_group": "3-5",
         "learning_objectives": [{"skill": "counting"}]},
        {"id": "add", "type": "quiz", "difficulty": 1200, "prerequisites": ["counting"],
         "learning_objectives": [{"skill": "addition", "description": "Add within 10"}]},
        {"id": "sub", "type": "challenge", "difficulty": 1350, "prerequisites": ["addition"],
         "learning_objectives": [{"skill": "subtraction"}]},
    ]})
    write_json(tmp_path / "english" / "phonics.json", {
        "id": "sounds", "type": "lesson", "difficulty": 1000,
        "learning_objectives": [{"skill": "phonics"}],
        "metadata": {"has_narration": True},
    })
    return tmp_path


def test_loads_content_per_subject(catalog_dir):
    catalog = ContentCatalog(str(catalog_dir))

    assert len(catalog.get_all_content()) == 4
    assert [c.id for c in catalog.get_content_for_subject("mathematics")] == ["count", "add", "sub"]
    assert [c.id for c in catalog.get_content_for_subject("english")] == ["sounds"]
    assert catalog.get_content_for_subject("science") == []
    assert len(catalog.get_content_for_subject(None)) == 4

    sounds = catalog.get_content("sounds")
    assert sounds.subject == "english"
    assert sounds.type == ContentType.LESSON
    assert sounds.age_group is None
    assert sounds.metadata.has_narration
    assert catalog.get_content("count").age_group == AgeGroup.PRESCHOOL


def test_missing_directory_gives_empty_catalog(tmp_path):
    catalog = ContentCatalog(str(tmp_path / "nowhere"))
    assert catalog.get_all_content() == []
    assert catalog.get_stats()["total_content"] == 0


def test_skill_prerequisites_are_transitive(catalog_dir):
    catalog = ContentCatalog(str(catalog_dir))

    assert catalog.get_skill_prerequisites("subtraction") == {"addition", "counting"}
    assert catalog.get_skill_prerequisites("counting") == set()
    assert catalog.get_skill_prerequisites("unknown") == set()


def test_learning_path_skips_skills_already_past_novice(catalog_dir):
    catalog = ContentCatalog(str(catalog_dir))

    beginner = make_student()
    assert catalog.get_learning_path("subtraction", beginner) == ["counting", "addition", "subtraction"]

    counter = make_student({"counting": (1250, 0.6)})
    assert catalog.get_learning_path("subtraction", counter) == ["addition", "subtraction"]

    assert catalog.get_learning_path("juggling", beginner) == ["juggling"]


def test_cyclic_prerequisites_rejected(catalog_dir):
    catalog = ContentCatalog(str(catalog_dir))

    with pytest.raises(CatalogError):
        catalog.add_content(make_content("loop", 1000, prerequisites=["subtraction"], objectives=["counting"]))


def test_malformed_file_raises(tmp_path):
    bad = tmp_path / "mathematics" / "broken.json"
    bad.parent.mkdir(parents=True)
    bad.write_text("{not json")

    with pytest.raises(CatalogError):
        ContentCatalog(str(tmp_path))


@pytest.mark.parametrize("data", [
    [{"id": "count", "type": "game", "difficulty": 900}],
    {"content": None},
    {"content": ["count"]},
    "just a string",
])
def test_wrong_file_shape_raises(tmp_path, data):
    write_json(tmp_path / "mathematics" / "x.json", data)

    with pytest.raises(CatalogError):
        ContentCatalog(str(tmp_path))


def test_stats(catalog_dir):
    stats = ContentCatalog(str(catalog_dir)).get_stats()

    assert stats["total_content"] == 4
    assert stats["total_skills"] == 4
    assert stats["total_edges"] == 2
    assert stats["content_per_subject"] == {"english": 1, "mathematics": 3}
    assert stats["max_depth"] == 2


def test_bundled_sample_catalog_loads():
    catalog = ContentCatalog(str(SAMPLE_DATA))

    assert set(catalog.subjects) == {"english", "mathematics"}
    assert catalog.get_skill_prerequisites("subtraction") == {"addition", "counting"}
