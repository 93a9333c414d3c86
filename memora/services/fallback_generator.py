"""
Deterministic fallback answers.

Used whenever the model endpoint is unavailable or fails. Answers are
chosen by keyword rules, first match wins:

1. Reference scenario: nighttime confusion about going to work, for the
   canonical case of Pam and her daughter Laurel.
2. Domain topic: medication safety or communication techniques, when
   case context is present and the diagnosis domain is referenced.
3. Topic guidance: memory, medication, family, activities.
4. Default capability statement.

No randomness, no network, and no input can make it raise.
"""

import re

from memora.config.logging_config import get_logger

logger = get_logger(__name__)


def _any(*alternatives: str) -> re.Pattern:
    return re.compile("|".join(alternatives), re.IGNORECASE)


SCENARIO_QUESTION = _any(r"night", r"confus", r"\bwork", r"wak(e|es|ing)\b", r"getting ready")
SCENARIO_SUBJECT = re.compile(r"\bpam\b", re.IGNORECASE)
SCENARIO_WORK = _any(r"\bwork", r"getting ready", r"retired")
SCENARIO_NIGHT = _any(r"night", r"\b2 ?a\.?m\b")
STRATEGY = _any(r"strateg", r"approach", r"technique", r"method", r"best way", r"compare", r"options?\b")

MEDICATION = _any(r"medication", r"medicine", r"\bpills?\b", r"\bdrugs?\b", r"prescri", r"\bdos(e|es|age|ing)\b")
DIAGNOSIS_DOMAIN = _any(r"alzheimer", r"dementia", r"memory loss", r"cognitive")
COMMUNICATION = _any(r"communicat", r"\btalk", r"\bspeak", r"conversation")

MEMORY_TOPIC = _any(r"memory", r"forget", r"remember")
FAMILY_TOPIC = _any(r"family", r"photo", r"picture", r"relative")
ACTIVITY_TOPIC = _any(r"activit", r"exercise", r"routine", r"\btasks?\b")

MEDICAL_DISCLAIMER = (
    "This is general information, not medical advice. Please check with the "
    "prescribing doctor or pharmacist before acting on it."
)

# ============================================================================
# Reference scenario
# ============================================================================

SCENARIO_STRATEGY_ANSWER = """For Pam's nighttime confusion about going to work, here are three approaches Laurel could take:

1. Validation and Redirection (Recommended)
Acknowledge what Pam is feeling and gently turn her attention to something calming.
Example: "I see you're getting ready. It's still nighttime though. Let's have some tea and rest until morning."
Why it works: it respects her sense of purpose and avoids an argument she cannot win.

2. Environmental Cues (Recommended)
Let the surroundings show that it is night rather than telling her she is wrong.
Example: "Let me open the curtains so you can see it's dark outside. We still have time to sleep."
Why it works: seeing the dark outside orients her without confrontation.

3. Reality Orientation (Not recommended)
Directly correcting the misconception.
Example: "Mom, you're retired and need to go back to sleep. It's the middle of the night."
Why to avoid it: being told she retired years ago can feel like hearing bad news for the first time, which risks distress, embarrassment and agitation at 2 a.m.

Validation and redirection, supported by environmental cues, is usually the gentlest combination. If these episodes become frequent, mention them to Pam's GP, since sleep disruption can have treatable causes."""

SCENARIO_EXAMPLE_ANSWER = """Here is something Laurel could say when Pam is getting ready for work in the middle of the night:

"I see you're getting ready. It's still nighttime though. Let's have some tea and rest until morning."

Why this helps: it acknowledges Pam's feelings and sense of responsibility instead of correcting her, which avoids the distress of being told she is retired. Offering a calm, familiar activity such as tea gives her something to do with the energy behind the worry, and "rest until morning" leaves room for her to go back to bed without feeling she has failed at anything. Keep your voice soft, keep the lights low, and avoid arguing about whether she still works."""

# ============================================================================
# Domain topics
# ============================================================================

MEDICATION_SAFETY_ANSWER = f"""I don't have the specific prescription details for this person, so I can only offer general medication safety guidance for someone living with dementia:

- Give medications exactly as prescribed. Never adjust the dosage or timing on your own.
- Use a pill organiser or a written chart, and tick off each dose as it is given.
- Watch for side effects such as increased confusion, dizziness, drowsiness, nausea or changes in appetite, and note when they happen.
- Keep an up-to-date list of every medication, including vitamins and over-the-counter products, and bring it to appointments.
- Store medications securely so they cannot be taken by mistake.
- Consult the doctor or pharmacist before starting, stopping or changing any medication.

{MEDICAL_DISCLAIMER}"""

COMMUNICATION_TECHNIQUES = (
    "Approach from the front, say who you are, and make gentle eye contact.",
    "Use short, simple sentences and ask one question at a time.",
    "Speak slowly and calmly, with a warm tone of voice.",
    "Offer simple choices rather than open-ended questions.",
    "Give plenty of time to respond, and avoid interrupting.",
    "Avoid arguing or correcting; respond to the feeling behind the words.",
    "Use non-verbal cues such as smiling, pointing or a reassuring touch.",
    "Reduce background noise and distractions during conversations.",
    "Repeat or rephrase information patiently when needed.",
    "Focus on what the person can still do, and praise their efforts.",
)

COMMUNICATION_ANSWER = (
    "Communication techniques that often help when caring for someone with dementia:\n\n"
    + "\n".join(f"{number}. {technique}" for number, technique in enumerate(COMMUNICATION_TECHNIQUES, start=1))
)

# ============================================================================
# Topic guidance
# ============================================================================

TOPIC_ANSWERS: dict[str, str] = {
    "memory": (
        "Memory loss that disrupts daily life can be a symptom of Alzheimer's disease. "
        "It is normal to occasionally forget names or appointments and remember them later. "
        "A regular routine, reminder notes and breaking tasks into small steps can all help, "
        "as can mental exercise such as puzzles, reading and learning new skills."
    ),
    "medication": (
        "It's important to take medications as prescribed. Alarms or a pill organiser can help "
        "keep to the schedule, and a written list of all medications and their timing is useful "
        "to share at appointments. Always consult the doctor before making any change.\n\n"
        f"{MEDICAL_DISCLAIMER}"
    ),
    "family": (
        "Family photos can help stimulate memories and provide emotional comfort. A labelled photo "
        "album helps identify people and recall special events, and sharing stories about family "
        "members keeps those connections alive."
    ),
    "activities": (
        "Familiar activities the person enjoys help maintain skills and give a sense of accomplishment. "
        "Gentle physical activity such as walking can lift mood, and social activities support both "
        "thinking and emotional well-being."
    ),
}

DEFAULT_ANSWER = (
    "I can help with questions about dementia care, including memory changes, daily routines, "
    "communication, medication safety, emotional support and challenging behaviours such as "
    "nighttime confusion. I'm working without a live AI model right now, so my answers are general. "
    "If you share more detail about the situation, such as the person's stage, what happened and "
    "what you have already tried, I can point you to more specific strategies."
)


def _is_reference_scenario(question: str, context: str) -> bool:
    if not SCENARIO_QUESTION.search(question) or MEDICATION.search(question):
        return False
    return bool(
        SCENARIO_SUBJECT.search(context)
        and SCENARIO_WORK.search(context)
        and SCENARIO_NIGHT.search(context)
    )


def _topic_answer(question: str) -> str | None:
    # Medication first so every medication answer carries the disclaimer
    if MEDICATION.search(question):
        return TOPIC_ANSWERS["medication"]
    if MEMORY_TOPIC.search(question):
        return TOPIC_ANSWERS["memory"]
    if FAMILY_TOPIC.search(question):
        return TOPIC_ANSWERS["family"]
    if ACTIVITY_TOPIC.search(question):
        return TOPIC_ANSWERS["activities"]
    return None


def fallback(question: str | None, context: str | None = None) -> str:
    """
    Produce a deterministic answer without calling any external service.

    Args:
        question: The user's question.
        context: Optional flattened case context (profile, narrative, notes).

    Returns:
        A non-empty answer.
    """
    question = question if isinstance(question, str) else ""
    context = context if isinstance(context, str) else ""

    if context and _is_reference_scenario(question, context):
        branch = "scenario_strategies" if STRATEGY.search(question) else "scenario_example"
        logger.info("Fallback answer selected", branch=branch)
        return SCENARIO_STRATEGY_ANSWER if branch == "scenario_strategies" else SCENARIO_EXAMPLE_ANSWER

    if context and (DIAGNOSIS_DOMAIN.search(question) or DIAGNOSIS_DOMAIN.search(context)):
        if MEDICATION.search(question):
            logger.info("Fallback answer selected", branch="medication_safety")
            return MEDICATION_SAFETY_ANSWER
        if COMMUNICATION.search(question):
            logger.info("Fallback answer selected", branch="communication")
            return COMMUNICATION_ANSWER

    topic = _topic_answer(question)
    if topic is not None:
        logger.info("Fallback answer selected", branch="topic")
        return topic

    logger.info("Fallback answer selected", branch="default")
    return DEFAULT_ANSWER
