"""
FastAPI Backend for the adaptive learning engine

Endpoints:
    GET    /                                        - Health check
    POST   /students                                - Create (or reset) a student model
    GET    /students/{id}                           - Full student model
    DELETE /students/{id}                           - Delete a student model
    POST   /students/{id}/recommendation            - Next content recommendation
    POST   /students/{id}/performance               - Record a performance observation
    GET    /students/{id}/learning-path/{skill}     - Prerequisite-first practice path
    GET    /catalog/stats                           - Content catalog statistics
"""

import os
import sys
import uuid
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.adaptive_engine import AdaptiveLearningEngine
from core.content import LearningContext
from core.content_catalog import ContentCatalog
from core.exceptions import InvalidPerformanceError, NoEligibleContentError
from core.student_model import AgeGroup, LearningStyle, PerformanceRecord, StudentModel
from redis_store import StudentStore

load_dotenv()

logger.remove()
logger.add(sys.stderr, level=os.getenv("LOG_LEVEL", "INFO"))

# ==================== Initialize ====================

app = FastAPI(
    title="Stealth Learning Engine API",
    description="Elo-based adaptive content selection for young learners",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Shared components
engine = AdaptiveLearningEngine()
catalog = ContentCatalog(os.getenv("CONTENT_DATA_DIR", "data/content"))
store = StudentStore()


# ==================== Request/Response Models ====================

class CreateStudentRequest(BaseModel):
    student_id: Optional[str] = None  # Auto-generate if not provided
    age_group: AgeGroup = AgeGroup.EARLY
    learning_style: LearningStyle = LearningStyle.MIXED


class RecommendationRequest(BaseModel):
    subject: Optional[str] = None
    recent_content_ids: List[str] = Field(default_factory=list)
    time_of_day: Optional[str] = None  # "HH:MM", server local time if omitted


class PerformanceRequest(BaseModel):
    skill: str
    subject: str
    correct: bool
    response_time: float  # Milliseconds
    hints_used: int = 0
    content_difficulty: float
    content_type: Optional[str] = None
    content_id: Optional[str] = None


class RecommendationResponse(BaseModel):
    student_id: str
    recommended_content: dict
    difficulty: float
    estimated_success_probability: float
    reasoning: str
    alternative_options: list
    ability: float
    zpd: dict


class PerformanceResponse(BaseModel):
    student_id: str
    student: dict
    skill: dict
    current_zpd: dict
    history_length: int


# ==================== Helper Functions ====================

def load_student_or_404(student_id: str) -> StudentModel:
    student = store.get_student(student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found. Create the student first.")
    return student


# ==================== Endpoints ====================

@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "content_items": len(catalog.content)}


@app.post("/students")
def create_student(request: CreateStudentRequest):
    """Create a fresh student model (replaces any existing one with the same id)."""
    student_id = request.student_id or str(uuid.uuid4())[:8]
    student = store.create_student(student_id, request.age_group, request.learning_style)
    return student.to_dict()


@app.get("/students/{student_id}")
def get_student(student_id: str):
    student = load_student_or_404(student_id)
    return {
        **student.to_dict(),
        "skills": engine.skill_summary(student),
    }


@app.delete("/students/{student_id}")
def delete_student(student_id: str):
    store.delete_student(student_id)
    return {"status": "deleted", "student_id": student_id}


@app.post("/students/{student_id}/recommendation", response_model=RecommendationResponse)
def recommend(student_id: str, request: RecommendationRequest):
    """
    Recommend the next content item from the catalog.

    409 when nothing in the catalog fits the learner's current band.
    """
    student = load_student_or_404(student_id)

    context = LearningContext(
        subject=request.subject,
        recent_performance=list(request.recent_content_ids),
    )
    if request.time_of_day:
        context.time_of_day = request.time_of_day

    available = catalog.get_content_for_subject(request.subject)

    try:
        response = engine.calculate_next_content(student, available, context)
    except NoEligibleContentError as e:
        logger.info(f"No eligible content for {student_id}: {e}")
        raise HTTPException(status_code=409, detail=str(e))

    return RecommendationResponse(student_id=student_id, **response.to_dict())


@app.post("/students/{student_id}/performance", response_model=PerformanceResponse)
def record_performance(student_id: str, request: PerformanceRequest):
    """Update the student model with one observed attempt."""
    record = PerformanceRecord(
        skill=request.skill,
        subject=request.subject,
        correct=request.correct,
        response_time=request.response_time,
        hints_used=request.hints_used,
        content_difficulty=request.content_difficulty,
        content_type=request.content_type,
        content_id=request.content_id,
    )

    with store.student_lock(student_id):
        student = load_student_or_404(student_id)
        try:
            student = engine.update_student_model(student, record)
        except InvalidPerformanceError as e:
            raise HTTPException(status_code=400, detail=str(e))
        store.save_student(student)

    return PerformanceResponse(
        student_id=student_id,
        student=student.to_dict(),
        skill=student.skill_levels[request.skill].to_dict(),
        current_zpd=student.current_zpd.to_dict(),
        history_length=len(student.performance_history),
    )


@app.get("/students/{student_id}/learning-path/{skill}")
def learning_path(student_id: str, skill: str):
    student = load_student_or_404(student_id)
    return {"student_id": student_id, "target_skill": skill,
            "path": catalog.get_learning_path(skill, student)}


@app.get("/catalog/stats")
def catalog_stats():
    return catalog.get_stats()


# ==================== Run Server ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)
