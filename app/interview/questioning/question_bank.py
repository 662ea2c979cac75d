"""
Built-in question bank.
Used when no admin-added templates exist for a role/phase, and as the
lookup table for follow-up prompts and competencies.
"""

from typing import Dict, List

from app.interview.models import (
    DifficultyLevel,
    InterviewPhase,
    InterviewRole,
    QuestionTemplate,
    ScheduledCustomQuestion,
)

DEMO_QUESTIONS: List[QuestionTemplate] = [
    QuestionTemplate(
        id="intro-1", role=InterviewRole.TECHNICAL, phase=InterviewPhase.INTRO,
        difficulty=DifficultyLevel.EASY,
        text="Hello! Thank you for joining today. Can you tell me a bit about your background "
             "and what drew you to this role?",
        competency_ids=["communication"],
    ),
    QuestionTemplate(
        id="tech-1", role=InterviewRole.TECHNICAL, phase=InterviewPhase.TECHNICAL,
        difficulty=DifficultyLevel.MEDIUM,
        text="Describe a technical challenge you recently solved. What was your approach and outcome?",
        competency_ids=["problem_solving", "technical_depth"],
    ),
    QuestionTemplate(
        id="tech-2", role=InterviewRole.TECHNICAL, phase=InterviewPhase.TECHNICAL,
        difficulty=DifficultyLevel.MEDIUM,
        text="How do you balance shipping quickly with maintaining code quality?",
        competency_ids=["technical_depth", "judgment"],
    ),
    QuestionTemplate(
        id="tech-follow", role=InterviewRole.TECHNICAL, phase=InterviewPhase.TECHNICAL,
        difficulty=DifficultyLevel.MEDIUM,
        text="Could you go into more detail about the trade-offs you considered?",
        competency_ids=["technical_depth"],
        follow_up_prompt="When answer is vague on trade-offs",
    ),
    QuestionTemplate(
        id="beh-1", role=InterviewRole.TECHNICAL, phase=InterviewPhase.BEHAVIORAL,
        difficulty=DifficultyLevel.MEDIUM,
        text="Tell me about a time you had to collaborate with a difficult stakeholder. "
             "How did you handle it?",
        competency_ids=["collaboration", "communication"],
    ),
    QuestionTemplate(
        id="wrap-1", role=InterviewRole.TECHNICAL, phase=InterviewPhase.WRAP_UP,
        difficulty=DifficultyLevel.EASY,
        text="Do you have any questions for us about the role or the team?",
        competency_ids=["engagement"],
    ),
]

# Generic questions when neither the database nor the demo bank has one
FALLBACK_TEXT_BY_PHASE: Dict[InterviewPhase, str] = {
    InterviewPhase.INTRO: "Tell me a bit about your background and what interests you about this {role_label} role.",
    InterviewPhase.TECHNICAL: "Walk me through a recent challenge you faced and how you solved it.",
    InterviewPhase.BEHAVIORAL: "Tell me about a time you handled a difficult situation with a teammate or stakeholder.",
    InterviewPhase.WRAP_UP: "Do you have any questions for me about the role or team?",
    InterviewPhase.CODING: "Please solve the following coding problem.",
}

DEFAULT_CODING_PROBLEMS: List[ScheduledCustomQuestion] = [
    ScheduledCustomQuestion(
        text="Implement a function that reverses a string. Handle empty and single-character strings.",
        difficulty=DifficultyLevel.EASY,
        is_coding_question=True,
        language="python",
        starter_code="def reverse_string(s: str) -> str:\n    # your code here\n    return s\n",
    ),
    ScheduledCustomQuestion(
        text="Write a function that checks if a string is a palindrome. "
             "Ignore case and non-alphanumeric characters.",
        difficulty=DifficultyLevel.MEDIUM,
        is_coding_question=True,
        language="python",
        starter_code="def is_palindrome(s: str) -> bool:\n    # your code here\n    return False\n",
    ),
    ScheduledCustomQuestion(
        text="Given an array of numbers, return the two indices whose values sum to a target. "
             "Assume exactly one solution exists.",
        difficulty=DifficultyLevel.MEDIUM,
        is_coding_question=True,
        language="python",
        starter_code="def two_sum(nums: list[int], target: int) -> list[int]:\n    # your code here\n    return []\n",
    ),
]

CODE_FOLLOW_UPS: List[str] = [
    "What is the time complexity of your solution? Can you explain your approach?",
    "How would you test this solution? What edge cases did you consider?",
    "How would you improve or refactor this code for production?",
]

CODING_SLOT_ORDER: List[str] = [
    "coding-0", "coding-0-follow",
    "coding-1", "coding-1-follow",
    "coding-2", "coding-2-follow",
]

CODING_INTRO = (
    "Great, we're done with the verbal part. Please switch to the **Code** tab - "
    "you'll have 3 problems to solve. Here's the first one:\n\n"
)

CODING_COMPETENCIES = ["technical_depth", "problem_solving"]
CUSTOM_QUESTION_COMPETENCIES = ["communication", "technical_depth"]
DEFAULT_COMPETENCIES = ["communication"]
