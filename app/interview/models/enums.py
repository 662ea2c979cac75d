"""
Enumerations shared by the interview engine.
Values are the wire/storage strings used in session state and reports.
"""

from enum import Enum
from typing import Type, TypeVar
import logging

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class InterviewPhase(Enum):
    """Interview stage. Default order: intro, technical, behavioral, wrap_up, coding."""
    INTRO = "intro"
    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    WRAP_UP = "wrap_up"
    CODING = "coding"


class InterviewRole(Enum):
    """Role type the candidate is interviewed for."""
    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    SALES = "sales"
    CUSTOMER_SUCCESS = "customer_success"


class DifficultyLevel(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TurnRole(Enum):
    """Speaker of a turn."""
    AI = "ai"
    CANDIDATE = "candidate"


class Recommendation(Enum):
    """Final hiring recommendation in a recruiter report."""
    STRONG_HIRE = "strong_hire"
    HIRE = "hire"
    BORDERLINE = "borderline"
    NO_HIRE = "no_hire"


DEFAULT_PHASE_ORDER = [
    InterviewPhase.INTRO,
    InterviewPhase.TECHNICAL,
    InterviewPhase.BEHAVIORAL,
    InterviewPhase.WRAP_UP,
    InterviewPhase.CODING,
]


def parse_enum(enum_cls: Type[E], value, default: E) -> E:
    """
    Converts a stored value into an enum member.

    Args:
        enum_cls: Target enum class
        value: Raw value (string, enum member or None)
        default: Member returned when the value is missing or unknown

    Returns:
        The matching enum member or the default
    """
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(f"Invalid {enum_cls.__name__} value: {value}. Defaulting to {default.value}.")
        return default
