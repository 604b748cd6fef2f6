"""
Student Model - Elo-rated skill levels and performance history.

Features:
    - Per-skill Elo rating with a confidence estimate
    - Mastery tiers derived from rating + confidence
    - Bounded performance history (most recent records only)
    - Zone of Proximal Development snapshot
    - Dict serialization (for Redis storage / API payloads)
"""

import math
import time
from enum import Enum
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from .exceptions import InvalidPerformanceError


DEFAULT_RATING = 1200.0
DEFAULT_CONFIDENCE = 0.5


class AgeGroup(str, Enum):
    PRESCHOOL = "3-5"
    EARLY = "6-8"
    OLDER = "9+"


class LearningStyle(str, Enum):
    VISUAL = "visual"
    AUDITORY = "auditory"
    KINESTHETIC = "kinesthetic"
    MIXED = "mixed"


class MasteryLevel(str, Enum):
    NOVICE = "novice"
    DEVELOPING = "developing"
    PROFICIENT = "proficient"
    ADVANCED = "advanced"

    @property
    def rank(self) -> int:
        """Position in the novice -> advanced ladder (0-based)."""
        return _MASTERY_ORDER.index(self)


_MASTERY_ORDER = [
    MasteryLevel.NOVICE,
    MasteryLevel.DEVELOPING,
    MasteryLevel.PROFICIENT,
    MasteryLevel.ADVANCED,
]

# (min rating, min confidence, level), checked top to bottom
MASTERY_THRESHOLDS = [
    (1600, 0.8, MasteryLevel.ADVANCED),
    (1400, 0.6, MasteryLevel.PROFICIENT),
    (1200, 0.4, MasteryLevel.DEVELOPING),
]


def classify_mastery(rating: float, confidence: float) -> MasteryLevel:
    """
    Map an (Elo rating, confidence) pair to a mastery tier.

    The first threshold that both values reach wins; anything below
    the lowest rung is novice.
    """
    for min_rating, min_confidence, level in MASTERY_THRESHOLDS:
        if rating >= min_rating and confidence >= min_confidence:
            return level
    return MasteryLevel.NOVICE


@dataclass
class SkillLevel:
    """Rating state for a single skill."""
    skill: str
    subject: str
    current_rating: float = DEFAULT_RATING
    confidence: float = DEFAULT_CONFIDENCE  # [0.3, 0.95] once updated
    last_assessed: float = 0.0  # Unix timestamp
    mastery_level: MasteryLevel = MasteryLevel.NOVICE
    total_attempts: int = 0
    successful_attempts: int = 0

    @property
    def success_rate(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return self.successful_attempts / self.total_attempts

    def to_dict(self) -> dict:
        return {
            "skill": self.skill,
            "subject": self.subject,
            "current_rating": self.current_rating,
            "confidence": self.confidence,
            "last_assessed": self.last_assessed,
            "mastery_level": self.mastery_level.value,
            "total_attempts": self.total_attempts,
            "successful_attempts": self.successful_attempts,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SkillLevel":
        return cls(
            skill=data["skill"],
            subject=data.get("subject", ""),
            current_rating=float(data.get("current_rating", DEFAULT_RATING)),
            confidence=float(data.get("confidence", DEFAULT_CONFIDENCE)),
            last_assessed=float(data.get("last_assessed", 0.0)),
            mastery_level=MasteryLevel(data.get("mastery_level", "novice")),
            total_attempts=int(data.get("total_attempts", 0)),
            successful_attempts=int(data.get("successful_attempts", 0)),
        )


@dataclass
class PerformanceRecord:
    """Record of one answered question / played item."""
    skill: str
    subject: str
    correct: bool
    response_time: float  # Milliseconds
    hints_used: int
    content_difficulty: float  # Same scale as SkillLevel.current_rating
    content_type: Optional[str] = None  # "game", "quiz", "story", ...
    content_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def validate(self):
        """Raise InvalidPerformanceError if the record breaks the input contract."""
        if not self.skill:
            raise InvalidPerformanceError("Performance record has no skill")
        if self.response_time < 0:
            raise InvalidPerformanceError(
                f"response_time must be >= 0, got {self.response_time}")
        if self.hints_used < 0:
            raise InvalidPerformanceError(
                f"hints_used must be >= 0, got {self.hints_used}")
        if not math.isfinite(self.content_difficulty):
            raise InvalidPerformanceError(
                f"content_difficulty must be finite, got {self.content_difficulty}")

    def to_dict(self) -> dict:
        return {
            "skill": self.skill,
            "subject": self.subject,
            "correct": self.correct,
            "response_time": self.response_time,
            "hints_used": self.hints_used,
            "content_difficulty": self.content_difficulty,
            "content_type": self.content_type,
            "content_id": self.content_id,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PerformanceRecord":
        return cls(
            skill=data["skill"],
            subject=data.get("subject", ""),
            correct=bool(data["correct"]),
            response_time=float(data.get("response_time", 0.0)),
            hints_used=int(data.get("hints_used", 0)),
            content_difficulty=float(data.get("content_difficulty", DEFAULT_RATING)),
            content_type=data.get("content_type"),
            content_id=data.get("content_id"),
            timestamp=float(data.get("timestamp", 0.0)),
        )


@dataclass
class ZoneOfProximalDevelopment:
    """Difficulty band around the learner's composite ability."""
    lower_bound: float
    upper_bound: float
    optimal_difficulty: float
    recommended_skills: List[str] = field(default_factory=list)

    def contains(self, difficulty: float) -> bool:
        return self.lower_bound <= difficulty <= self.upper_bound

    def to_dict(self) -> dict:
        return {
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "optimal_difficulty": self.optimal_difficulty,
            "recommended_skills": list(self.recommended_skills),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ZoneOfProximalDevelopment":
        return cls(
            lower_bound=float(data["lower_bound"]),
            upper_bound=float(data["upper_bound"]),
            optimal_difficulty=float(data["optimal_difficulty"]),
            recommended_skills=list(data.get("recommended_skills", [])),
        )


def default_zpd() -> ZoneOfProximalDevelopment:
    """ZPD of a learner with no rated skills (ability = 1200)."""
    return ZoneOfProximalDevelopment(
        lower_bound=DEFAULT_RATING * 0.7,
        upper_bound=DEFAULT_RATING * 1.3,
        optimal_difficulty=DEFAULT_RATING * 1.1,
    )


@dataclass
class StudentModel:
    """
    Everything the engine knows about one learner.

    The caller owns this object: the engine mutates it in place and
    hands it back, persistence happens elsewhere.
    """
    student_id: str
    age_group: AgeGroup = AgeGroup.EARLY
    learning_style: LearningStyle = LearningStyle.MIXED
    skill_levels: Dict[str, SkillLevel] = field(default_factory=dict)
    performance_history: List[PerformanceRecord] = field(default_factory=list)
    current_zpd: ZoneOfProximalDevelopment = field(default_factory=default_zpd)
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    def get_skill(self, skill: str) -> Optional[SkillLevel]:
        return self.skill_levels.get(skill)

    def recent_content_types(self, limit: int = 10) -> List[str]:
        """Content types of the last `limit` records, skipping untyped ones."""
        return [
            r.content_type for r in self.performance_history[-limit:]
            if r.content_type
        ]

    # ==================== Serialization ====================

    def to_dict(self) -> dict:
        """Serialize model state to dict (for Redis storage)."""
        return {
            "student_id": self.student_id,
            "age_group": self.age_group.value,
            "learning_style": self.learning_style.value,
            "skill_levels": {
                skill: level.to_dict() for skill, level in self.skill_levels.items()
            },
            "performance_history": [r.to_dict() for r in self.performance_history],
            "current_zpd": self.current_zpd.to_dict(),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StudentModel":
        """Deserialize model from dict."""
        zpd_data = data.get("current_zpd")
        return cls(
            student_id=data["student_id"],
            age_group=AgeGroup(data.get("age_group", AgeGroup.EARLY.value)),
            learning_style=LearningStyle(data.get("learning_style", LearningStyle.MIXED.value)),
            skill_levels={
                skill: SkillLevel.from_dict(level)
                for skill, level in data.get("skill_levels", {}).items()
            },
            performance_history=[
                PerformanceRecord.from_dict(r) for r in data.get("performance_history", [])
            ],
            current_zpd=ZoneOfProximalDevelopment.from_dict(zpd_data) if zpd_data else default_zpd(),
            created_at=float(data.get("created_at", 0.0)),
            updated_at=float(data.get("updated_at", 0.0)),
        )
