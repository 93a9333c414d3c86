"""
Prompt assembly.

Builds the text sent to the model from the question and its layered
context. Block order is fixed:

    instruction -> question -> subject profile -> case blocks -> history

Blocks are separated by a blank line. The question is always included
verbatim; with no category, no context and no history the prompt is
exactly the question.
"""

from collections.abc import Sequence
from datetime import date

from memora.models.models import ConversationTurn, SubjectProfile
from memora.services.category_rules import get_instruction
from memora.services.classifier import ClassificationResult
from memora.services.conversation import DEFAULT_HISTORY_WINDOW

BLOCK_SEPARATOR = "\n\n"

PROFILE_HEADER = "Patient Profile:"
CASE_NARRATIVE_HEADER = "Case Narrative:"
CASE_FILE_HEADER = "Case File Notes (from uploaded documents):"
HISTORY_HEADER = "Recent conversation:"


def render_subject_profile(profile: SubjectProfile, today: date | None = None) -> str:
    """Profile block: name, age, diagnosis, stage and narrative, one per line."""
    age = profile.effective_age(today)
    lines = [
        PROFILE_HEADER,
        f"Name: {profile.name}",
        f"Age: {age if age is not None else 'unknown'}",
        f"Diagnosis: {profile.diagnosis or 'not specified'}",
        f"Stage: {profile.stage.value}",
    ]
    if profile.case_narrative:
        lines.append(f"Case narrative: {profile.case_narrative}")
    return "\n".join(lines)


def render_history(
    history: Sequence[ConversationTurn],
    window: int = DEFAULT_HISTORY_WINDOW,
) -> str | None:
    """History block with the last ``window`` turns, oldest first."""
    if window <= 0 or not history:
        return None
    recent = history[-window:]
    lines = [HISTORY_HEADER]
    lines.extend(f"{turn.role.value}: {turn.content}" for turn in recent)
    return "\n".join(lines)


def compose_prompt(
    question: str,
    classification: ClassificationResult | None = None,
    subject_profile: SubjectProfile | None = None,
    case_text: str | None = None,
    case_file_digest: str | None = None,
    history: Sequence[ConversationTurn] = (),
    history_window: int = DEFAULT_HISTORY_WINDOW,
    today: date | None = None,
) -> str:
    """
    Compose the prompt envelope for the model.

    Args:
        question: The user's question, included verbatim.
        classification: Ranked categories; only the top one frames the prompt.
        subject_profile: Optional care recipient profile.
        case_text: Optional caller-supplied case narrative.
        case_file_digest: Optional digest of case-file notes.
        history: Conversation so far, oldest first.
        history_window: How many of the latest turns to replay.
        today: Reference date for age computation.

    Returns:
        The composed prompt string.
    """
    blocks: list[str] = []

    if classification is not None and classification.top is not None:
        instruction = get_instruction(classification.top.identifier)
        if instruction:
            blocks.append(instruction)

    blocks.append(question)

    if subject_profile is not None:
        blocks.append(render_subject_profile(subject_profile, today))

    narrative = case_text.strip() if case_text else ""
    if narrative and not (subject_profile and subject_profile.case_narrative == narrative):
        blocks.append(f"{CASE_NARRATIVE_HEADER}\n{narrative}")

    digest = case_file_digest.strip() if case_file_digest else ""
    if digest:
        blocks.append(f"{CASE_FILE_HEADER}\n{digest}")

    history_block = render_history(history, history_window)
    if history_block:
        blocks.append(history_block)

    return BLOCK_SEPARATOR.join(blocks)


def build_fallback_context(
    subject_profile: SubjectProfile | None = None,
    case_text: str | None = None,
    case_file_digest: str | None = None,
) -> str | None:
    """Flatten the case context for the fallback generator."""
    parts: list[str] = []
    if subject_profile is not None:
        parts.append(f"{subject_profile.name} has {subject_profile.diagnosis or 'an unspecified condition'} "
                     f"({subject_profile.stage.value} stage).")
        if subject_profile.case_narrative:
            parts.append(subject_profile.case_narrative)
    for extra in (case_text, case_file_digest):
        if extra and extra.strip() and extra.strip() not in parts:
            parts.append(extra.strip())
    return "\n".join(parts) if parts else None
