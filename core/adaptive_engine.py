"""
Adaptive Learning Engine - Elo-based content selection and skill updates.

Features:
    - Composite ability from per-skill Elo ratings (confidence + recency weighted)
    - Zone of Proximal Development (ZPD) difficulty band
    - Prerequisite / age / learning-style aware content ranking
    - Elo rating, confidence and mastery updates from performance records
"""

import math
import time
from typing import Dict, List, Optional

from loguru import logger

from .content import AdaptiveResponse, Content, ContentScore, ContentType, LearningContext
from .exceptions import NoEligibleContentError
from .student_model import (
    AgeGroup,
    DEFAULT_CONFIDENCE,
    DEFAULT_RATING,
    LearningStyle,
    MasteryLevel,
    PerformanceRecord,
    SkillLevel,
    StudentModel,
    ZoneOfProximalDevelopment,
    classify_mastery,
)


SECONDS_PER_DAY = 86400


# ==================== Learning Style Affinity ====================

def _visual_affinity(content: Content) -> int:
    return 2 if content.type == ContentType.GAME or content.metadata.visual_elements is not None else 0


def _auditory_affinity(content: Content) -> int:
    return 2 if content.metadata.has_audio or content.metadata.has_narration else 0


def _kinesthetic_affinity(content: Content) -> int:
    return 2 if content.type == ContentType.GAME or content.metadata.interactive else 0


def _mixed_affinity(content: Content) -> int:
    return 1


STYLE_AFFINITY = {
    LearningStyle.VISUAL: _visual_affinity,
    LearningStyle.AUDITORY: _auditory_affinity,
    LearningStyle.KINESTHETIC: _kinesthetic_affinity,
    LearningStyle.MIXED: _mixed_affinity,
}


class AdaptiveLearningEngine:
    """
    Elo-rating based adaptive algorithm for personalized learning.

    Holds only tuning constants, so one instance can be shared freely.
    All state lives in the StudentModel passed to each call. Callers must
    serialize calls that touch the same StudentModel.

    Elo expectation:
        E = 1 / (1 + 10 ** ((difficulty - rating) / 400))
    """

    # Elo
    K_FACTOR = 32
    ELO_SCALE = 400

    # Zone of Proximal Development
    ZPD_RANGE = 0.3  # +/-30% around composite ability
    OPTIMAL_STRETCH = 1.1  # Slightly above current ability

    # Confidence
    MIN_CONFIDENCE = 0.3
    MAX_CONFIDENCE = 0.95
    CONFIDENCE_STEP = 0.1
    FAST_RESPONSE_CONFIDENCE_BONUS = 0.05

    # Performance scoring
    HINT_DECAY = 0.9
    FAST_RESPONSE_MS = 5000
    SLOW_RESPONSE_MS = 30000
    FAST_BONUS = 1.1
    SLOW_PENALTY = 0.9

    # History / recency
    MAX_HISTORY = 100
    RECENCY_DECAY_DAYS = 30
    ENGAGEMENT_WINDOW = 10

    # Content scoring weights
    DIFFICULTY_WEIGHT = 40
    SUBJECT_BONUS = 20
    RECENCY_PENALTY = 30
    OBJECTIVE_WEIGHT = 20
    TIME_OF_DAY_WEIGHT = 10
    ENGAGEMENT_WEIGHT = 10
    MAX_ALTERNATIVES = 3

    # ==================== Recommendation ====================

    def calculate_next_content(self, student: StudentModel, available_content: List[Content],
                               context: LearningContext,
                               now: Optional[float] = None) -> AdaptiveResponse:
        """
        Pick the next content item for a student.

        Raises:
            NoEligibleContentError: nothing in `available_content` passes the
                ZPD, prerequisite and age filters.
        """
        now = time.time() if now is None else now

        ability = self.calculate_composite_ability(student, context.subject, now=now)
        zpd = self.calculate_zpd(student, ability)

        eligible = [
            c for c in available_content
            if zpd.contains(c.difficulty)
            and self.meets_prerequisites(c, student)
            and self.matches_age_group(c, student)
        ]
        if not eligible:
            raise NoEligibleContentError(
                zpd.lower_bound, zpd.upper_bound, len(available_content), ability
            )

        styled = self.apply_learning_style(eligible, student.learning_style)
        ranked = self.rank_content(styled, student, context, zpd)

        selected = ranked[0].content
        probability = self.calculate_success_probability(ability, selected.difficulty)

        logger.debug(
            f"Recommending {selected.id} (difficulty {selected.difficulty:.0f}, "
            f"score {ranked[0].total:.1f}) for {student.student_id}; "
            f"ability {ability:.0f}, {len(eligible)}/{len(available_content)} eligible"
        )

        return AdaptiveResponse(
            recommended_content=selected,
            difficulty=selected.difficulty,
            estimated_success_probability=probability,
            reasoning=self.generate_reasoning(selected, zpd, ability, probability, student),
            alternative_options=[s.content for s in ranked[1:1 + self.MAX_ALTERNATIVES]],
            ability=ability,
            zpd=zpd,
        )

    # ==================== Model Update ====================

    def update_student_model(self, student: StudentModel, performance: PerformanceRecord,
                             now: Optional[float] = None) -> StudentModel:
        """
        Fold one performance observation into the student model.

        A skill seen for the first time is only registered (rating 1200,
        confidence 0.5, novice); the Elo update starts from the second
        observation onwards.
        """
        performance.validate()
        now = time.time() if now is None else now

        score = self.calculate_performance_score(
            performance.correct, performance.response_time, performance.hints_used
        )

        current = student.skill_levels.get(performance.skill)
        if current is None:
            student.skill_levels[performance.skill] = SkillLevel(
                skill=performance.skill,
                subject=performance.subject,
                current_rating=DEFAULT_RATING,
                confidence=DEFAULT_CONFIDENCE,
                last_assessed=now,
                mastery_level=MasteryLevel.NOVICE,
                total_attempts=1,
                successful_attempts=1 if performance.correct else 0,
            )
            return student

        new_rating = self.update_elo_rating(
            current.current_rating, performance.content_difficulty, score
        )
        new_confidence = self.update_confidence(
            current.confidence, score, performance.response_time
        )

        logger.debug(
            f"{student.student_id}/{performance.skill}: rating "
            f"{current.current_rating:.1f} -> {new_rating:.1f}, confidence "
            f"{current.confidence:.2f} -> {new_confidence:.2f}"
        )

        current.current_rating = new_rating
        current.confidence = new_confidence
        current.mastery_level = classify_mastery(new_rating, new_confidence)
        current.last_assessed = now
        current.total_attempts += 1
        if performance.correct:
            current.successful_attempts += 1

        student.performance_history.append(performance)
        if len(student.performance_history) > self.MAX_HISTORY:
            student.performance_history = student.performance_history[-self.MAX_HISTORY:]

        student.current_zpd = self.calculate_zpd(
            student, self.calculate_composite_ability(student, now=now)
        )
        student.updated_at = now

        return student

    # ==================== Ability & ZPD ====================

    def calculate_composite_ability(self, student: StudentModel, subject: Optional[str] = None,
                                    now: Optional[float] = None) -> float:
        """
        Confidence- and recency-weighted mean of skill ratings.

        Falls back to the default rating when no skill carries weight.
        """
        now = time.time() if now is None else now
        total_rating = 0.0
        total_weight = 0.0

        for level in student.skill_levels.values():
            if subject and level.subject != subject:
                continue
            weight = level.confidence * self.recency_weight(level.last_assessed, now)
            total_rating += level.current_rating * weight
            total_weight += weight

        return total_rating / total_weight if total_weight > 0 else DEFAULT_RATING

    def recency_weight(self, last_assessed: float, now: float) -> float:
        """weight = exp(-days / 30)"""
        days_since = (now - last_assessed) / SECONDS_PER_DAY
        return math.exp(-days_since / self.RECENCY_DECAY_DAYS)

    def calculate_zpd(self, student: StudentModel, ability: float) -> ZoneOfProximalDevelopment:
        return ZoneOfProximalDevelopment(
            lower_bound=ability * (1 - self.ZPD_RANGE),
            upper_bound=ability * (1 + self.ZPD_RANGE),
            optimal_difficulty=ability * self.OPTIMAL_STRETCH,
            recommended_skills=self.get_recommended_skills(student),
        )

    def get_recommended_skills(self, student: StudentModel) -> List[str]:
        """Developing (or nearly developing) skills, most confident first."""
        candidates = [
            level for level in student.skill_levels.values()
            if level.mastery_level == MasteryLevel.DEVELOPING
            or (level.mastery_level == MasteryLevel.NOVICE and level.confidence > 0.4)
        ]
        candidates.sort(key=lambda level: level.confidence, reverse=True)
        return [level.skill for level in candidates]

    # ==================== Filtering ====================

    def meets_prerequisites(self, content: Content, student: StudentModel) -> bool:
        for prereq in content.prerequisites:
            level = student.skill_levels.get(prereq)
            if level is None or level.mastery_level == MasteryLevel.NOVICE:
                return False
        return True

    def matches_age_group(self, content: Content, student: StudentModel) -> bool:
        return content.age_group is None or content.age_group == student.age_group

    def apply_learning_style(self, content: List[Content],
                             learning_style: LearningStyle) -> List[Content]:
        """Stable sort by learning-style affinity, best match first."""
        affinity = STYLE_AFFINITY[LearningStyle(learning_style)]
        return sorted(content, key=affinity, reverse=True)

    # ==================== Scoring ====================

    def rank_content(self, content: List[Content], student: StudentModel,
                     context: LearningContext,
                     zpd: ZoneOfProximalDevelopment) -> List[ContentScore]:
        """Score every item; ties keep their incoming order."""
        scored = [self.score_content(c, student, context, zpd) for c in content]
        return sorted(scored, key=lambda s: s.total, reverse=True)

    def score_content(self, content: Content, student: StudentModel,
                      context: LearningContext,
                      zpd: ZoneOfProximalDevelopment) -> ContentScore:
        score = ContentScore(content=content)

        optimal = zpd.optimal_difficulty
        if optimal > 0:
            match = 1 - abs(content.difficulty - optimal) / optimal
            score.difficulty_match = match * self.DIFFICULTY_WEIGHT

        if context.subject is not None and content.subject == context.subject:
            score.subject_relevance = self.SUBJECT_BONUS

        if content.id in context.recent_content_ids():
            score.recency_penalty = -self.RECENCY_PENALTY

        score.objective_alignment = (
            self.objective_alignment(content, zpd.recommended_skills) * self.OBJECTIVE_WEIGHT
        )
        score.time_of_day = self.time_of_day_score(content, context) * self.TIME_OF_DAY_WEIGHT
        score.engagement = self.predict_engagement(content, student) * self.ENGAGEMENT_WEIGHT

        return score

    def objective_alignment(self, content: Content, recommended_skills: List[str]) -> float:
        if not content.learning_objectives or not recommended_skills:
            return 0.0
        matching = sum(1 for skill in content.objective_skills if skill in recommended_skills)
        return matching / max(len(content.learning_objectives), len(recommended_skills))

    def time_of_day_score(self, content: Content, context: LearningContext) -> float:
        """
        Morning favours quizzes and challenges, afternoon is neutral,
        evening favours games and stories.
        """
        hour = context.hour()
        if hour is None:
            return 0.5
        if hour < 12:
            return 1.0 if content.type in (ContentType.QUIZ, ContentType.CHALLENGE) else 0.5
        if hour < 17:
            return 0.8
        return 1.0 if content.type in (ContentType.GAME, ContentType.STORY) else 0.5

    def predict_engagement(self, content: Content, student: StudentModel) -> float:
        engagement = 0.5

        if content.age_group == student.age_group:
            engagement += 0.2

        recent_types = student.recent_content_types(self.ENGAGEMENT_WINDOW)
        if content.type.value not in recent_types:
            engagement += 0.2

        # Short activities for the youngest group
        if student.age_group == AgeGroup.PRESCHOOL and content.estimated_duration <= 5:
            engagement += 0.1

        return min(1.0, engagement)

    # ==================== Elo & Confidence ====================

    def expected_score(self, rating: float, difficulty: float) -> float:
        return 1.0 / (1.0 + 10 ** ((difficulty - rating) / self.ELO_SCALE))

    def calculate_success_probability(self, ability: float, difficulty: float) -> float:
        return self.expected_score(ability, difficulty)

    def update_elo_rating(self, rating: float, difficulty: float, performance: float) -> float:
        return rating + self.K_FACTOR * (performance - self.expected_score(rating, difficulty))

    def calculate_performance_score(self, correct: bool, response_time: float,
                                    hints_used: int) -> float:
        """
        Outcome in [0, 1]: 10% off per hint, a bonus for quick correct
        answers, a penalty for very slow ones.
        """
        score = 1.0 if correct else 0.0
        score *= self.HINT_DECAY ** hints_used

        if correct and response_time < self.FAST_RESPONSE_MS:
            score *= self.FAST_BONUS
        elif response_time > self.SLOW_RESPONSE_MS:
            score *= self.SLOW_PENALTY

        return max(0.0, min(1.0, score))

    def update_confidence(self, confidence: float, performance: float,
                          response_time: float) -> float:
        change = (performance - 0.5) * self.CONFIDENCE_STEP
        if response_time < self.FAST_RESPONSE_MS:
            change += self.FAST_RESPONSE_CONFIDENCE_BONUS
        return max(self.MIN_CONFIDENCE, min(self.MAX_CONFIDENCE, confidence + change))

    # ==================== Reasoning ====================

    def generate_reasoning(self, content: Content, zpd: ZoneOfProximalDevelopment,
                           ability: float, probability: float,
                           student: StudentModel) -> str:
        reasons = []

        if abs(content.difficulty - ability) < 100:
            reasons.append("perfectly matched to current skill level")
        elif content.difficulty > ability:
            reasons.append("provides appropriate challenge")
        else:
            reasons.append("reinforces foundational skills")

        if probability > 0.7:
            reasons.append("high likelihood of success")
        elif probability > 0.5:
            reasons.append("balanced difficulty")
        else:
            reasons.append("challenging but achievable")

        targets = [s for s in content.objective_skills if s in zpd.recommended_skills]
        if targets:
            reasons.append(f"targets recommended skills: {', '.join(targets)}")

        if content.age_group == student.age_group:
            reasons.append("age-appropriate content")

        return f"Selected because it {', '.join(reasons)}."

    # ==================== Summaries ====================

    def skill_summary(self, student: StudentModel) -> Dict[str, dict]:
        """Rating, confidence and mastery per skill (for dashboards / API)."""
        return {
            skill: {
                "rating": round(level.current_rating, 1),
                "confidence": round(level.confidence, 3),
                "mastery_level": level.mastery_level.value,
                "success_rate": level.success_rate,
            }
            for skill, level in student.skill_levels.items()
        }
