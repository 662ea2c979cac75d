"""
Question strategy engine: role-based question selection, difficulty scaling,
follow-up logic and topic coverage.
Questions come from the question_templates table with the built-in bank as fallback.
"""

import logging
import re
from typing import List, Optional

from app.interview.data.interview_repository import QuestionTemplateRepository
from app.interview.models import (
    DEFAULT_PHASE_ORDER,
    DifficultyLevel,
    InterviewPhase,
    InterviewRole,
    InterviewState,
    NextQuestion,
    QuestionTemplate,
)
from app.interview.questioning.question_bank import (
    CODE_FOLLOW_UPS,
    CODING_COMPETENCIES,
    CODING_INTRO,
    CODING_SLOT_ORDER,
    CUSTOM_QUESTION_COMPETENCIES,
    DEFAULT_CODING_PROBLEMS,
    DEFAULT_COMPETENCIES,
    DEMO_QUESTIONS,
    FALLBACK_TEXT_BY_PHASE,
)

logger = logging.getLogger(__name__)

FOLLOW_SUFFIX = "-follow"
DIFFICULTY_ORDER = [DifficultyLevel.EASY, DifficultyLevel.MEDIUM, DifficultyLevel.HARD]

# Normalized answer scores that move the preferred difficulty up or down
DIFFICULTY_STEP_UP_SCORE = 0.8
DIFFICULTY_STEP_DOWN_SCORE = 0.4


def role_label(role: InterviewRole) -> str:
    return role.value.replace("_", " ")


def _strip_follow(question_id: str) -> str:
    return re.sub(f"{FOLLOW_SUFFIX}$", "", question_id)


class QuestionStrategyEngine:
    """
    Selects the next question for an interview state.
    """

    def __init__(self, template_repository: Optional[QuestionTemplateRepository] = None):
        self.template_repository = template_repository

    # ───────────────────────── phases ─────────────────────────

    @staticmethod
    def get_phase_order() -> List[InterviewPhase]:
        return list(DEFAULT_PHASE_ORDER)

    def next_phase(self, current: InterviewPhase) -> Optional[InterviewPhase]:
        order = self.get_phase_order()
        i = order.index(current)
        return order[i + 1] if i < len(order) - 1 else None

    # ───────────────────────── difficulty ─────────────────────

    @staticmethod
    def adjust_difficulty(current: DifficultyLevel, normalized_score: float) -> DifficultyLevel:
        """
        Moves the difficulty one step up after a strong answer and one step
        down after a weak one.
        """
        i = DIFFICULTY_ORDER.index(current)
        if normalized_score >= DIFFICULTY_STEP_UP_SCORE:
            return DIFFICULTY_ORDER[min(i + 1, len(DIFFICULTY_ORDER) - 1)]
        if normalized_score < DIFFICULTY_STEP_DOWN_SCORE:
            return DIFFICULTY_ORDER[max(i - 1, 0)]
        return current

    # ───────────────────────── question sources ───────────────

    def fallback_question_for(self, role: InterviewRole, phase: InterviewPhase) -> NextQuestion:
        """Generic question for a phase when no template exists."""
        return NextQuestion(
            question_text=FALLBACK_TEXT_BY_PHASE[phase].format(role_label=role_label(role)),
            question_id=f"fallback-{role.value}-{phase.value}",
            phase=phase,
            difficulty=(DifficultyLevel.EASY
                        if phase in (InterviewPhase.INTRO, InterviewPhase.WRAP_UP)
                        else DifficultyLevel.MEDIUM),
            competency_ids=list(DEFAULT_COMPETENCIES),
        )

    async def get_questions_for_role_and_phase(self, role: InterviewRole,
                                               phase: InterviewPhase) -> List[QuestionTemplate]:
        """Loads templates from the database; falls back to the built-in bank."""
        if self.template_repository:
            try:
                templates = await self.template_repository.list_for_strategy(role, phase)
                if templates:
                    return templates
            except Exception as e:
                logger.warning(f"Could not load question templates for {role.value}/{phase.value}: {e}")
        return [q for q in DEMO_QUESTIONS if q.role == role and q.phase == phase]

    @staticmethod
    def _prefer_difficulty(pool: list, difficulty: DifficultyLevel):
        by_difficulty = [q for q in pool if q.difficulty == difficulty]
        return (by_difficulty or pool)[0]

    def _custom_question(self, state: InterviewState, phase: InterviewPhase) -> Optional[NextQuestion]:
        """First uncovered verbal custom question, preferring the current difficulty."""
        verbal = [q for q in state.custom_questions if not q.is_coding_question]
        uncovered = [
            (f"custom-{idx}", q) for idx, q in enumerate(verbal)
            if not state.is_covered(f"custom-{idx}")
        ]
        if not uncovered:
            return None

        same_level = [item for item in uncovered if item[1].difficulty == state.current_difficulty]
        question_id, custom = (same_level or uncovered)[0]
        return NextQuestion(
            question_text=custom.text,
            question_id=question_id,
            phase=phase,
            difficulty=custom.difficulty,
            competency_ids=list(CUSTOM_QUESTION_COMPETENCIES),
        )

    def _coding_question(self, state: InterviewState) -> Optional[NextQuestion]:
        """
        Walks the coding slots (problem, follow-up, problem, ...) and returns
        the first uncovered one. Recruiter coding questions replace the
        default problems only when at least three were given.
        """
        custom_coding = [q for q in state.custom_questions if q.is_coding_question]
        pool = custom_coding[:3] if len(custom_coding) >= 3 else DEFAULT_CODING_PROBLEMS

        for slot in CODING_SLOT_ORDER:
            if state.is_covered(slot):
                continue
            problem_index = int(_strip_follow(slot).replace("coding-", ""))

            if slot.endswith(FOLLOW_SUFFIX):
                return NextQuestion(
                    question_text=CODE_FOLLOW_UPS[problem_index] if problem_index < len(CODE_FOLLOW_UPS)
                    else CODE_FOLLOW_UPS[0],
                    question_id=slot,
                    phase=InterviewPhase.CODING,
                    difficulty=state.current_difficulty,
                    competency_ids=list(CODING_COMPETENCIES),
                    is_follow_up=True,
                )

            if problem_index >= len(pool):
                continue
            problem = pool[problem_index]
            is_first_coding = problem_index == 0
            return NextQuestion(
                question_text=(CODING_INTRO + problem.text) if is_first_coding else problem.text,
                question_id=slot,
                phase=InterviewPhase.CODING,
                difficulty=problem.difficulty,
                competency_ids=list(CODING_COMPETENCIES),
                is_coding_question=True,
                starter_code=problem.starter_code,
                language=problem.language,
            )
        return None

    def _follow_up_question(self, state: InterviewState, phase: InterviewPhase,
                            candidates: List[QuestionTemplate]) -> Optional[NextQuestion]:
        """Follow-up to the last asked question, if that question defines one."""
        last_ai = state.last_ai_turn()
        last_question_id = last_ai.question_id if last_ai else None
        if not last_question_id:
            return None

        all_for_follow_up = candidates + [q for q in DEMO_QUESTIONS if q.role == state.role]
        last_question = next(
            (q for q in all_for_follow_up
             if q.id == last_question_id or last_question_id == q.id + FOLLOW_SUFFIX),
            None,
        )
        if not last_question or not last_question.follow_up_prompt:
            return None

        follow_up_id = last_question.id + FOLLOW_SUFFIX
        if state.is_covered(follow_up_id):
            return None
        return NextQuestion(
            question_text=last_question.text,
            question_id=follow_up_id,
            phase=phase,
            difficulty=last_question.difficulty,
            competency_ids=last_question.competency_ids,
            is_follow_up=True,
            is_coding_question=last_question.is_coding_question,
            starter_code=last_question.starter_code,
            language=last_question.language,
        )

    # ───────────────────────── public API ─────────────────────

    async def get_next_question(self, state: InterviewState, request_follow_up: bool = False,
                                force_next_phase: bool = False) -> Optional[NextQuestion]:
        """
        Selects the next question.

        Args:
            state: Current interview state
            request_follow_up: Ask a follow-up to the last question if it has one
            force_next_phase: Move one phase forward before selecting

        Returns:
            The next question, or None when the interview is over
        """
        phase = state.phase

        if phase == InterviewPhase.CODING and state.role != InterviewRole.TECHNICAL:
            return None

        if force_next_phase:
            next_phase = self.next_phase(phase)
            if next_phase:
                phase = next_phase
                if phase == InterviewPhase.CODING and state.role != InterviewRole.TECHNICAL:
                    return None

        if phase == InterviewPhase.TECHNICAL and state.custom_questions:
            custom = self._custom_question(state, phase)
            if custom:
                return custom

        if phase == InterviewPhase.CODING:
            return self._coding_question(state)

        candidates = await self.get_questions_for_role_and_phase(state.role, phase)

        if request_follow_up:
            follow_up = self._follow_up_question(state, phase, candidates)
            if follow_up:
                return follow_up

        if candidates:
            uncovered = [q for q in candidates if not state.is_covered(q.id)]
            if uncovered:
                choice = self._prefer_difficulty(uncovered, state.current_difficulty)
                return NextQuestion(
                    question_text=choice.text,
                    question_id=choice.id,
                    phase=phase,
                    difficulty=choice.difficulty,
                    competency_ids=choice.competency_ids,
                    is_coding_question=choice.is_coding_question,
                    starter_code=choice.starter_code,
                    language=choice.language,
                )
        else:
            fallback = self.fallback_question_for(state.role, phase)
            if not state.is_covered(fallback.question_id):
                return fallback

        # Every question of this phase has been covered: move on
        next_phase = self.next_phase(phase)
        if next_phase is None:
            return None
        logger.info(f"Phase {phase.value} covered for {state.interview_id}, moving to {next_phase.value}")
        return await self.get_next_question(state.copy_with(phase=next_phase))

    async def get_first_question(self, role: InterviewRole) -> NextQuestion:
        """The opening intro question for a role."""
        intro_list = await self.get_questions_for_role_and_phase(role, InterviewPhase.INTRO)
        if not intro_list:
            return self.fallback_question_for(role, InterviewPhase.INTRO)
        intro = intro_list[0]
        return NextQuestion(
            question_text=intro.text,
            question_id=intro.id,
            phase=InterviewPhase.INTRO,
            difficulty=DifficultyLevel.EASY,
            competency_ids=intro.competency_ids,
            is_coding_question=intro.is_coding_question,
            starter_code=intro.starter_code,
            language=intro.language,
        )

    @staticmethod
    def get_competency_ids_for_question_id(question_id: str) -> List[str]:
        """Competencies an answer to the given question is scored against."""
        if question_id.startswith("coding-"):
            return list(CODING_COMPETENCIES)
        base_id = _strip_follow(question_id)
        for lookup_id in (question_id, base_id):
            for q in DEMO_QUESTIONS:
                if q.id == lookup_id:
                    return list(q.competency_ids)
        if question_id.startswith("custom-"):
            return list(CUSTOM_QUESTION_COMPETENCIES)
        return list(DEFAULT_COMPETENCIES)
