#!/usr/bin/env python3
"""
Interactive caregiver chat in the terminal.

Usage:
    python -m memora.scripts.chat_session
    python -m memora.scripts.chat_session --scenario

Uses LLM_API_KEY when set, otherwise answers come from the fallback
generator. ``--scenario`` loads the nighttime confusion case study.
"""

import argparse
import asyncio
import sys

from memora.config.config import get_settings
from memora.config.logging_config import configure_logging
from memora.models.models import AssistantRequest, CareStage, SubjectProfile
from memora.services.assistant_service import AssistantService
from memora.services.conversation import ConversationLog

NIGHTTIME_CONFUSION_CASE = (
    "Pam is a 73-year-old woman who lives at home with her daughter Laurel, age 40. "
    "Pam was diagnosed with Alzheimer's disease by her GP when she was 68. Pam's Alzheimer's "
    "disease has gradually affected her memory and ability to do daily tasks. When Laurel is at "
    "work, a home health aide assists Pam with various tasks. For the past couple of years, Pam "
    "has relied on Laurel to remind her and prompt her for many things.\n\n"
    "One night, Laurel is awakened at 2 a.m. by her mother Pam anxiously getting ready for work "
    "(even though she retired 7 years ago). Laurel goes to her mother to talk with her and try "
    "to get her to go back to bed."
)

EXIT_WORDS = ("exit", "quit", "bye", "q")


def build_scenario_subject() -> SubjectProfile:
    """Profile for the nighttime confusion case study."""
    return SubjectProfile(
        subject_id="scenario-pam",
        name="Pam",
        age=73,
        diagnosis="Alzheimer's disease",
        stage=CareStage.MODERATE,
        case_narrative=NIGHTTIME_CONFUSION_CASE,
    )


async def run(subject: SubjectProfile | None) -> None:
    settings = get_settings()
    service = AssistantService(settings)
    log = ConversationLog()
    credential = settings.llm_api_key or None

    print("\n" + "=" * 60)
    print("  Memora - caregiver assistant")
    print("  General information only, not medical advice.")
    if not credential:
        print("  No LLM_API_KEY set: using offline answers.")
    print("=" * 60 + "\n")

    if subject is not None:
        print(f"Memora: I'm ready to answer questions about {subject.name}'s condition and care.\n")

    try:
        while True:
            try:
                question = input("You: ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\n\nGoodbye!")
                break

            if not question:
                continue
            if question.lower() in EXIT_WORDS:
                print("\nMemora: Take care of yourself too. Goodbye!")
                break

            request = AssistantRequest(question=question, subject=subject, history=list(log.turns))
            response = await service.answer(request, credential)
            log.record_exchange(question, response.answer)

            print(f"\nMemora ({response.source.value}): {response.answer}\n")
            if response.follow_up_questions:
                print("  You could also ask:")
                for suggestion in response.follow_up_questions:
                    print(f"   - {suggestion}")
                print()
    finally:
        await service.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with the caregiver assistant.")
    parser.add_argument(
        "--scenario",
        action="store_true",
        help="Load the nighttime confusion case study as the subject",
    )
    args = parser.parse_args()

    configure_logging()
    subject = build_scenario_subject() if args.scenario else None

    try:
        asyncio.run(run(subject))
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
