"""
Redis Store - Student model persistence.

Key Structure:
    student:{student_id}:model -> String (JSON of StudentModel.to_dict())
    student:{student_id}:lock  -> Lock (serializes updates per student)
"""

import os
import json
import redis
from typing import Optional
from dotenv import load_dotenv
from loguru import logger

from core.student_model import AgeGroup, LearningStyle, StudentModel

# Load environment variables from .env
load_dotenv()


class StudentStore:
    # Seconds a per-student lock may be held before Redis expires it
    LOCK_TIMEOUT = 10

    def __init__(self, client: Optional[redis.Redis] = None):
        """Connect to Redis using environment variables (or use the given client)."""
        self.client = client or redis.Redis(
            host=os.getenv("REDIS_HOST", "localhost"),
            port=int(os.getenv("REDIS_PORT", 6379)),
            password=os.getenv("REDIS_PASSWORD", None),
            db=int(os.getenv("REDIS_DB", 0)),
            decode_responses=True  # Return strings instead of bytes
        )

    # ==================== Key Builders ====================

    def _model_key(self, student_id: str) -> str:
        """Redis key for the serialized student model."""
        return f"student:{student_id}:model"

    def _lock_key(self, student_id: str) -> str:
        """Redis key for the per-student update lock."""
        return f"student:{student_id}:lock"

    # ==================== Student Management ====================

    def create_student(self, student_id: str, age_group: AgeGroup = AgeGroup.EARLY,
                       learning_style: LearningStyle = LearningStyle.MIXED) -> StudentModel:
        """
        Create and store a fresh student model, replacing any existing one.

        Args:
            student_id: Unique student identifier
            age_group: Age band used for content filtering
            learning_style: Preferred presentation style

        Returns:
            The new StudentModel
        """
        student = StudentModel(
            student_id=student_id,
            age_group=AgeGroup(age_group),
            learning_style=LearningStyle(learning_style),
        )
        self.save_student(student)
        logger.info(f"Created student model {student_id}")
        return student

    def get_student(self, student_id: str) -> Optional[StudentModel]:
        """
        Load a student model.

        Returns:
            StudentModel, or None if not found
        """
        raw = self.client.get(self._model_key(student_id))
        if raw is None:
            return None
        return StudentModel.from_dict(json.loads(raw))

    def get_or_create_student(self, student_id: str, age_group: AgeGroup = AgeGroup.EARLY,
                              learning_style: LearningStyle = LearningStyle.MIXED) -> StudentModel:
        student = self.get_student(student_id)
        if student is None:
            student = self.create_student(student_id, age_group, learning_style)
        return student

    def save_student(self, student: StudentModel):
        """Persist the full model (overwrites)."""
        self.client.set(self._model_key(student.student_id), json.dumps(student.to_dict()))
        logger.debug(
            f"Saved student model {student.student_id} "
            f"({len(student.skill_levels)} skills, {len(student.performance_history)} records)"
        )

    def delete_student(self, student_id: str):
        """Delete a student's model. The lock key is left to expire on its own."""
        self.client.delete(self._model_key(student_id))

    def exists(self, student_id: str) -> bool:
        return bool(self.client.exists(self._model_key(student_id)))

    # ==================== Locking ====================

    def student_lock(self, student_id: str):
        """
        Lock guarding load -> update -> save for one student.

        Usage:
            with store.student_lock(student_id):
                ...
        """
        return self.client.lock(self._lock_key(student_id), timeout=self.LOCK_TIMEOUT)
