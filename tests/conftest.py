"""Shared fixtures for the adaptive learning tests."""

import contextlib

import pytest

from core.adaptive_engine import AdaptiveLearningEngine
from core.content import Content, ContentMetadata, ContentType, LearningObjective
from core.student_model import AgeGroup, LearningStyle, SkillLevel, StudentModel, classify_mastery

NOW = 1_700_000_000.0


class FakeRedis:
    """Dict-backed stand-in for the handful of redis.Redis calls StudentStore makes."""

    def __init__(self):
        self.data = {}
        self.locks = []

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def exists(self, key):
        return int(key in self.data)

    def lock(self, name, timeout=None):
        self.locks.append(name)
        return contextlib.nullcontext()


@pytest.fixture
def engine():
    return AdaptiveLearningEngine()


@pytest.fixture
def fake_redis():
    return FakeRedis()


def make_content(content_id, difficulty, subject="mathematics", type=ContentType.LESSON,
                 age_group=AgeGroup.EARLY, prerequisites=None, objectives=None,
                 duration=10, **metadata):
    return Content(
        id=content_id,
        subject=subject,
        type=type,
        difficulty=difficulty,
        age_group=age_group,
        prerequisites=list(prerequisites or []),
        learning_objectives=[LearningObjective(skill=s) for s in (objectives or [])],
        estimated_duration=duration,
        metadata=ContentMetadata(**metadata),
    )


def make_student(skills=None, age_group=AgeGroup.EARLY, style=LearningStyle.MIXED):
    """skills: {name: (rating, confidence)} or {name: (rating, confidence, subject)}"""
    student = StudentModel(student_id="kid-1", age_group=age_group, learning_style=style,
                           created_at=NOW, updated_at=NOW)
    for name, values in (skills or {}).items():
        rating, confidence = values[0], values[1]
        subject = values[2] if len(values) > 2 else "mathematics"
        student.skill_levels[name] = SkillLevel(
            skill=name,
            subject=subject,
            current_rating=rating,
            confidence=confidence,
            last_assessed=NOW,
            mastery_level=classify_mastery(rating, confidence),
            total_attempts=1,
            successful_attempts=1,
        )
    return student
