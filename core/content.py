"""
Learning content and request/response types for the adaptive engine.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Set, Union
from dataclasses import dataclass, field

from .student_model import AgeGroup, ZoneOfProximalDevelopment


class ContentType(str, Enum):
    GAME = "game"
    LESSON = "lesson"
    QUIZ = "quiz"
    CHALLENGE = "challenge"
    STORY = "story"


@dataclass
class ContentMetadata:
    """Presentation flags used for learning-style matching."""
    visual_elements: Optional[List[str]] = None  # None when the item declares no visuals
    has_audio: bool = False
    has_narration: bool = False
    interactive: bool = False

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ContentMetadata":
        data = data or {}
        visuals = data.get("visual_elements")
        return cls(
            visual_elements=None if visuals is None else list(visuals),
            has_audio=bool(data.get("has_audio", False)),
            has_narration=bool(data.get("has_narration", False)),
            interactive=bool(data.get("interactive", False)),
        )

    def to_dict(self) -> dict:
        return {
            "visual_elements": None if self.visual_elements is None else list(self.visual_elements),
            "has_audio": self.has_audio,
            "has_narration": self.has_narration,
            "interactive": self.interactive,
        }


@dataclass
class LearningObjective:
    skill: str
    description: str = ""
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "LearningObjective":
        return cls(skill=data["skill"], description=data.get("description", ""), id=data.get("id"))

    def to_dict(self) -> dict:
        return {"id": self.id, "skill": self.skill, "description": self.description}


@dataclass
class Content:
    """A candidate learning item from the catalog (read-only to the engine)."""
    id: str
    subject: str
    type: ContentType
    difficulty: float  # Elo scale, same as SkillLevel.current_rating
    age_group: Optional[AgeGroup] = None  # None = suitable for every age
    prerequisites: List[str] = field(default_factory=list)
    learning_objectives: List[LearningObjective] = field(default_factory=list)
    estimated_duration: float = 10.0  # Minutes
    metadata: ContentMetadata = field(default_factory=ContentMetadata)
    title: str = ""

    @property
    def objective_skills(self) -> List[str]:
        return [obj.skill for obj in self.learning_objectives]

    @classmethod
    def from_dict(cls, data: dict) -> "Content":
        age_group = data.get("age_group")
        return cls(
            id=data["id"],
            subject=data["subject"],
            type=ContentType(data["type"]),
            difficulty=float(data["difficulty"]),
            age_group=AgeGroup(age_group) if age_group else None,
            prerequisites=list(data.get("prerequisites", [])),
            learning_objectives=[
                LearningObjective.from_dict(obj) for obj in data.get("learning_objectives", [])
            ],
            estimated_duration=float(data.get("estimated_duration", 10.0)),
            metadata=ContentMetadata.from_dict(data.get("metadata")),
            title=data.get("title", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subject": self.subject,
            "type": self.type.value,
            "difficulty": self.difficulty,
            "age_group": self.age_group.value if self.age_group else None,
            "prerequisites": list(self.prerequisites),
            "learning_objectives": [obj.to_dict() for obj in self.learning_objectives],
            "estimated_duration": self.estimated_duration,
            "metadata": self.metadata.to_dict(),
            "title": self.title,
        }


def _current_time_of_day() -> str:
    return datetime.now().strftime("%H:%M")


@dataclass
class LearningContext:
    """Per-request context supplied by the caller."""
    subject: Optional[str] = None
    recent_performance: List[Union[Content, str]] = field(default_factory=list)
    time_of_day: str = field(default_factory=_current_time_of_day)  # "HH:MM"

    def recent_content_ids(self) -> Set[str]:
        return {
            item.id if isinstance(item, Content) else str(item)
            for item in self.recent_performance
        }

    def hour(self) -> Optional[int]:
        """Hour component of time_of_day, or None if it can't be parsed."""
        try:
            hour = int(self.time_of_day.split(":")[0])
        except (AttributeError, ValueError):
            return None
        return hour if 0 <= hour <= 23 else None


@dataclass
class ContentScore:
    """Per-component ranking score for one candidate."""
    content: Content
    difficulty_match: float = 0.0
    subject_relevance: float = 0.0
    recency_penalty: float = 0.0
    objective_alignment: float = 0.0
    time_of_day: float = 0.0
    engagement: float = 0.0

    @property
    def raw(self) -> float:
        return (
            self.difficulty_match
            + self.subject_relevance
            + self.recency_penalty
            + self.objective_alignment
            + self.time_of_day
            + self.engagement
        )

    @property
    def total(self) -> float:
        return max(0.0, self.raw)


@dataclass
class AdaptiveResponse:
    recommended_content: Content
    difficulty: float
    estimated_success_probability: float
    reasoning: str
    alternative_options: List[Content]
    ability: float
    zpd: ZoneOfProximalDevelopment

    def to_dict(self) -> dict:
        return {
            "recommended_content": self.recommended_content.to_dict(),
            "difficulty": self.difficulty,
            "estimated_success_probability": self.estimated_success_probability,
            "reasoning": self.reasoning,
            "alternative_options": [c.to_dict() for c in self.alternative_options],
            "ability": self.ability,
            "zpd": self.zpd.to_dict(),
        }
