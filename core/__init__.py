"""
Core module - Elo-based adaptive learning engine and its data model.

Components:
    - student_model: Skill levels, performance records, ZPD, mastery tiers
    - content: Learning content, request context and engine responses
    - adaptive_engine: Content recommendation + student model updates
    - content_catalog: JSON-backed content provider with skill prerequisites
    - exceptions: Error hierarchy
"""

from .student_model import (
    AgeGroup,
    LearningStyle,
    MasteryLevel,
    SkillLevel,
    PerformanceRecord,
    ZoneOfProximalDevelopment,
    StudentModel,
    classify_mastery,
)
from .content import (
    ContentType,
    ContentMetadata,
    LearningObjective,
    Content,
    LearningContext,
    ContentScore,
    AdaptiveResponse,
)
from .adaptive_engine import AdaptiveLearningEngine
from .content_catalog import ContentCatalog
from .exceptions import (
    AdaptiveLearningError,
    NoEligibleContentError,
    InvalidPerformanceError,
    CatalogError,
)

__all__ = [
    "AgeGroup",
    "LearningStyle",
    "MasteryLevel",
    "SkillLevel",
    "PerformanceRecord",
    "ZoneOfProximalDevelopment",
    "StudentModel",
    "classify_mastery",
    "ContentType",
    "ContentMetadata",
    "LearningObjective",
    "Content",
    "LearningContext",
    "ContentScore",
    "AdaptiveResponse",
    "AdaptiveLearningEngine",
    "ContentCatalog",
    "AdaptiveLearningError",
    "NoEligibleContentError",
    "InvalidPerformanceError",
    "CatalogError",
]
