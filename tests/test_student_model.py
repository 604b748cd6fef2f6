"""Tests for core/student_model.py"""

import json
import math

import pytest

from conftest import NOW, make_student
from core.exceptions import InvalidPerformanceError
from core.student_model import (
    AgeGroup,
    LearningStyle,
    MasteryLevel,
    PerformanceRecord,
    SkillLevel,
    StudentModel,
    classify_mastery,
)


@pytest.mark.parametrize("rating,confidence,expected", [
    (1600, 0.8, MasteryLevel.ADVANCED),
    (1599, 0.8, MasteryLevel.PROFICIENT),
    (1700, 0.79, MasteryLevel.PROFICIENT),
    (1400, 0.6, MasteryLevel.PROFICIENT),
    (1399, 0.95, MasteryLevel.DEVELOPING),
    (1200, 0.4, MasteryLevel.DEVELOPING),
    (1200, 0.39, MasteryLevel.NOVICE),
    (1199, 0.9, MasteryLevel.NOVICE),
])
def test_classify_mastery_boundaries(rating, confidence, expected):
    assert classify_mastery(rating, confidence) == expected


def test_mastery_rank_order():
    ranks = [level.rank for level in
             (MasteryLevel.NOVICE, MasteryLevel.DEVELOPING, MasteryLevel.PROFICIENT, MasteryLevel.ADVANCED)]
    assert ranks == [0, 1, 2, 3]


def test_new_student_has_default_zpd():
    student = StudentModel(student_id="kid")

    assert student.skill_levels == {}
    assert student.performance_history == []
    assert student.current_zpd.lower_bound == pytest.approx(840)
    assert student.current_zpd.upper_bound == pytest.approx(1560)
    assert student.current_zpd.optimal_difficulty == pytest.approx(1320)
    assert student.current_zpd.recommended_skills == []


def test_success_rate():
    assert SkillLevel(skill="a", subject="m").success_rate == 0.0
    level = SkillLevel(skill="a", subject="m", total_attempts=4, successful_attempts=3)
    assert level.success_rate == 0.75


def test_recent_content_types_skips_untyped():
    student = StudentModel(student_id="kid")
    for content_type in ["game", None, "quiz", "story"]:
        student.performance_history.append(PerformanceRecord(
            skill="a", subject="m", correct=True, response_time=1000, hints_used=0,
            content_difficulty=1200, content_type=content_type,
        ))

    assert student.recent_content_types() == ["game", "quiz", "story"]
    assert student.recent_content_types(limit=2) == ["quiz", "story"]


@pytest.mark.parametrize("changes", [
    {"skill": ""},
    {"response_time": -1},
    {"hints_used": -2},
    {"content_difficulty": math.nan},
])
def test_performance_record_validation(changes):
    fields = dict(skill="addition", subject="mathematics", correct=True,
                  response_time=1000, hints_used=0, content_difficulty=1200)
    fields.update(changes)

    with pytest.raises(InvalidPerformanceError):
        PerformanceRecord(**fields).validate()


def test_student_model_survives_json_round_trip():
    student = make_student({"addition": (1350, 0.7), "phonics": (1100, 0.45, "english")},
                           age_group=AgeGroup.PRESCHOOL, style=LearningStyle.AUDITORY)
    student.performance_history.append(PerformanceRecord(
        skill="addition", subject="mathematics", correct=False, response_time=31000,
        hints_used=2, content_difficulty=1400, content_type="quiz", content_id="q-1",
        timestamp=NOW,
    ))
    student.current_zpd.recommended_skills = ["addition"]

    restored = StudentModel.from_dict(json.loads(json.dumps(student.to_dict())))

    assert restored == student
    assert restored.age_group is AgeGroup.PRESCHOOL
    assert restored.skill_levels["addition"].mastery_level is MasteryLevel.DEVELOPING
