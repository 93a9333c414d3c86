"""
Question category definitions.

Each category pairs a set of keyword patterns with a context importance
(1-10, higher means the subject's context matters more for the answer)
and a short instruction that frames the prompt sent to the model.
Categories overlap on purpose; the classifier ranks them, it does not
make them mutually exclusive.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any


class CategoryId(str, Enum):
    """Built-in question categories, in declaration order."""

    MEDICAL = "medical"
    DAILY_CARE = "daily_care"
    EMOTIONAL = "emotional"
    MEMORY = "memory"
    SAFETY = "safety"
    GENERAL_KNOWLEDGE = "general_knowledge"
    CURRENT_EVENTS = "current_events"
    DAILY_LIFE = "daily_life"


@dataclass(frozen=True)
class Category:
    """A labeled bucket of keyword patterns."""

    identifier: str
    patterns: tuple[re.Pattern, ...]
    context_importance: int

    def __post_init__(self) -> None:
        if not 1 <= self.context_importance <= 10:
            raise ValueError(
                f"context_importance for {self.identifier!r} must be in [1, 10], "
                f"got {self.context_importance}"
            )
        if not self.patterns:
            raise ValueError(f"Category {self.identifier!r} needs at least one pattern")

    def matches(self, text: str) -> bool:
        """True if any pattern group occurs anywhere in the text."""
        return any(pattern.search(text) for pattern in self.patterns)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for the API."""
        return {
            "identifier": self.identifier,
            "context_importance": self.context_importance,
            "instruction": INSTRUCTION_TEMPLATES.get(self.identifier),
        }


def _patterns(*alternations: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(alternation, re.IGNORECASE) for alternation in alternations)


# ============================================================================
# Category Definitions
# ============================================================================

CATEGORY_RULES: tuple[Category, ...] = (
    Category(
        identifier=CategoryId.MEDICAL.value,
        patterns=_patterns(
            r"medication|medicine|drug|treatment|therapy|prescription|dose|side effect|clinical|symptom|diagnosis",
            r"disease|condition|disorder|syndrome|doctor|nurse|hospital|clinic|medical|healthcare",
            r"test|scan|exam|blood|urine|sample|specimen|result|report|referral|specialist",
        ),
        context_importance=10,
    ),
    Category(
        identifier=CategoryId.DAILY_CARE.value,
        patterns=_patterns(
            r"bath|shower|dress|groom|toilet|hygiene|eat|drink|meal|food|diet|nutrition",
            r"sleep|rest|bed|chair|sit|stand|walk|move|transfer|mobility|exercise|activity",
            r"clean|tidy|housekeeping|laundry|dishes|cooking|shopping|errand",
        ),
        context_importance=7,
    ),
    Category(
        identifier=CategoryId.EMOTIONAL.value,
        patterns=_patterns(
            r"feel|feeling|emotion|mood|happy|sad|angry|upset|anxious|worried|scared|afraid",
            r"stress|depression|anxiety|grief|loss|cope|coping|support|comfort|reassure",
            r"lonely|alone|isolated|connect|relationship|family|friend|social|community",
        ),
        context_importance=8,
    ),
    Category(
        identifier=CategoryId.MEMORY.value,
        patterns=_patterns(
            r"remember|forget|memory|recall|recognize|familiar|confusion|disoriented|lost",
            r"time|date|day|month|year|season|clock|calendar|schedule|appointment|reminder",
            r"name|face|place|event|story|past|history|childhood|young|earlier",
        ),
        context_importance=9,
    ),
    Category(
        identifier=CategoryId.SAFETY.value,
        patterns=_patterns(
            r"safe|safety|danger|risk|hazard|accident|injury|fall|burn|cut|wound",
            r"wander|lost|escape|leave|door|lock|alarm|alert|monitor|supervision",
            r"fire|smoke|heat|cold|weather|emergency|help|assistance|aid|support",
        ),
        context_importance=9,
    ),
    Category(
        identifier=CategoryId.GENERAL_KNOWLEDGE.value,
        patterns=_patterns(
            r"what is|what are|who is|who are|where is|where are|when is|when was|how does|why does",
            r"explain|describe|define|meaning|definition|concept|fact|information|knowledge|learn",
            r"history|science|math|art|literature|geography|technology|sports|entertainment",
        ),
        context_importance=3,
    ),
    Category(
        identifier=CategoryId.CURRENT_EVENTS.value,
        patterns=_patterns(
            r"news|current|recent|latest|today|yesterday|this week|this month|this year",
            r"politics|election|government|president|minister|leader|official|policy",
            r"event|happening|incident|occurrence|situation|development|update|bulletin",
        ),
        context_importance=2,
    ),
    Category(
        identifier=CategoryId.DAILY_LIFE.value,
        patterns=_patterns(
            r"weather|forecast|temperature|rain|snow|sun|cloud|storm|humidity",
            r"time|date|day|month|year|hour|minute|second|schedule|calendar|appointment",
            r"recipe|cook|bake|food|meal|ingredient|instruction|step|preparation",
        ),
        context_importance=1,
    ),
)


# One framing per category, placed ahead of the question in the prompt.
INSTRUCTION_TEMPLATES: dict[str, str] = {
    CategoryId.MEDICAL.value: (
        "As a healthcare information assistant, provide accurate, evidence-based "
        "general health information in answer to the question below. State clearly "
        "that this is not medical advice and that consulting the care recipient's "
        "healthcare professionals is important."
    ),
    CategoryId.MEMORY.value: (
        "Memory challenges are a key concern here. Give clear, simple and practical "
        "guidance for the question below. Use concrete examples and avoid abstract concepts."
    ),
    CategoryId.EMOTIONAL.value: (
        "Respond with empathy and validation to the emotional concern below. "
        "Acknowledge feelings first, then offer gentle guidance."
    ),
    CategoryId.DAILY_CARE.value: (
        "Provide practical, step-by-step guidance for the daily care question below. "
        "Focus on simplicity and safety."
    ),
    CategoryId.SAFETY.value: (
        "The question below is about safety. Prioritise caregiver and patient safety "
        "with clear, actionable, unambiguous steps."
    ),
    CategoryId.GENERAL_KNOWLEDGE.value: (
        "The question below is a general knowledge question. Give an informative, "
        "accurate answer with relevant facts and context."
    ),
    CategoryId.CURRENT_EVENTS.value: (
        "The question below relates to current events. You do not have real-time data, "
        "so acknowledge that limitation while giving general information."
    ),
    CategoryId.DAILY_LIFE.value: (
        "The question below is a practical daily life question. Give helpful, "
        "actionable information."
    ),
}


def get_category(identifier: str) -> Category | None:
    """Look up a built-in category by identifier."""
    for category in CATEGORY_RULES:
        if category.identifier == identifier:
            return category
    return None


def get_instruction(identifier: str) -> str | None:
    """Instruction template for a category, or None when it has none."""
    return INSTRUCTION_TEMPLATES.get(identifier)
