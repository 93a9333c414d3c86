"""
Suggested questions for a care recipient.

Scans the case narrative for recognisable care scenarios and fills
question templates with the subject's name and stage. Used for the
follow-up questions returned with every answer.
"""

import re

from memora.models.models import CareStage, SuggestionCategory

GENERIC_SCENARIO = "care challenges"

# (scenario label, patterns that must all match the case text)
SCENARIO_RULES: tuple[tuple[str, tuple[re.Pattern, ...]], ...] = (
    ("nighttime issues", (re.compile(r"night", re.I), re.compile(r"sleep|bed|awake", re.I))),
    ("confusion or disorientation", (re.compile(r"confus|forget|memory", re.I),)),
    ("eating difficulties", (re.compile(r"meal|eat|food", re.I),)),
    ("personal hygiene", (re.compile(r"bath|shower|hygiene", re.I),)),
    ("agitation", (re.compile(r"agitat|angry|upset", re.I),)),
)

NIGHT_WORK_CASE = (re.compile(r"night", re.I), re.compile(r"work|getting ready", re.I))

MAX_SUGGESTIONS = 5


def extract_care_scenarios(case_text: str | None) -> list[str]:
    """Scenario labels found in the case text, or the generic label."""
    if not case_text:
        return [GENERIC_SCENARIO]
    scenarios = [
        label
        for label, patterns in SCENARIO_RULES
        if all(pattern.search(case_text) for pattern in patterns)
    ]
    return scenarios or [GENERIC_SCENARIO]


def _case_specific(name: str, case_text: str) -> list[str]:
    if all(pattern.search(case_text) for pattern in NIGHT_WORK_CASE):
        return [
            f"What would you, as {name}'s caregiver, say to minimize distress when they wake up at night thinking they need to go to work?",
            f"What environmental cues could help reorient {name} during nighttime confusion episodes?",
            f"How should I respond to {name} when they insist on going to work in the middle of the night?",
            f"What validation techniques would work best for {name}'s confusion about needing to go to work?",
            f"Should I explicitly tell {name} they're retired when they're preparing for work at night?",
        ]
    return [
        f"What is the best approach to help {name} with daily activities?",
        f"How can we improve {name}'s sleep quality based on the symptoms described?",
        f"What techniques could help manage {name}'s anxiety mentioned in the case study?",
        f"How should we address {name}'s difficulty with taking medication?",
        f"What memory aids would be most helpful for {name}?",
    ]


def suggest_questions(
    subject_name: str,
    stage: CareStage,
    case_text: str | None = None,
    category: SuggestionCategory = SuggestionCategory.CASE_SPECIFIC,
) -> list[str]:
    """
    Build up to five suggested questions.

    Args:
        subject_name: Name of the care recipient.
        stage: Their care stage.
        case_text: Optional case narrative.
        category: Family of questions to generate.

    Returns:
        List of question strings.
    """
    name = subject_name.strip() or "your loved one"
    scenarios = extract_care_scenarios(case_text)
    second = scenarios[1] if len(scenarios) > 1 else scenarios[0]

    if category == SuggestionCategory.CASE_SPECIFIC:
        questions = _case_specific(name, case_text or "")
    elif category == SuggestionCategory.CAREGIVING_STRATEGIES:
        questions = [
            f"What would be a person-centered approach to help {name} during episodes of {scenarios[0]}?",
            f"Compare validation therapy versus reality orientation for {name} when dealing with {second}.",
            f"What redirection techniques might work well for {name} during periods of agitation?",
            f"How can I balance honesty and compassion when {name} asks questions about their condition?",
            f"What's the best way to respond when {name} asks repetitive questions or becomes fixated on a topic?",
        ]
    elif category == SuggestionCategory.COGNITIVE:
        questions = [
            f"What cognitive exercises are most appropriate for {name} at the {stage.value} stage?",
            f"How can we track {name}'s cognitive changes over time?",
            f"What memory techniques might help {name} with daily tasks?",
            f"How should family members respond when {name} is confused about time or place?",
            f"What signs of cognitive change should we monitor in {name}?",
        ]
    elif category == SuggestionCategory.DAILY:
        questions = [
            f"What daily routine would work best for {name}?",
            f"How can we make {name}'s home safer and more navigable?",
            f"What level of assistance does {name} need with personal hygiene at this stage?",
            f"How can we help {name} maintain independence with meals?",
            f"What activities can {name} still enjoy independently?",
        ]
    elif category == SuggestionCategory.MEDICAL:
        questions = [
            f"What medications are typically prescribed for patients like {name}?",
            f"How should we monitor {name} for medication side effects?",
            f"What symptoms should prompt an immediate call to {name}'s doctor?",
            f"How often should {name} have follow-up medical appointments?",
            f"What complementary therapies might benefit {name}?",
        ]
    else:
        questions = [
            f"How can family members best support {name}'s emotional wellbeing?",
            f"What might be causing {name}'s recent anxiety or agitation?",
            f"How can we help {name} cope with awareness of memory loss?",
            f"What social activities would be appropriate for {name} at this stage?",
            f"How can we recognize depression in {name}?",
        ]

    return questions[:MAX_SUGGESTIONS]
