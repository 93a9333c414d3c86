"""
Pattern-based question classifier.

Matches a question against the category rule set and ranks every
matching category by context importance. Ties keep declaration order.
An empty result is valid and means "use the question as-is".
"""

from collections.abc import Iterable
from dataclasses import dataclass

from memora.config.logging_config import get_logger
from memora.services.category_rules import CATEGORY_RULES, Category

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    """Matched categories, highest context importance first."""

    categories: tuple[Category, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.categories

    @property
    def top(self) -> Category | None:
        """The highest ranked category, if any matched."""
        return self.categories[0] if self.categories else None

    @property
    def identifiers(self) -> list[str]:
        return [category.identifier for category in self.categories]

    def __len__(self) -> int:
        return len(self.categories)


def classify(
    question: str | None,
    rules: Iterable[Category] = CATEGORY_RULES,
) -> ClassificationResult:
    """
    Classify a question against a rule set.

    Args:
        question: Free-text question. None or empty yields an empty result.
        rules: Categories in declaration order.

    Returns:
        ClassificationResult sorted by context importance, descending.
    """
    if not question:
        return ClassificationResult()

    matched = [category for category in rules if category.matches(question)]
    # sorted() is stable, so equal importances keep declaration order
    ranked = tuple(sorted(matched, key=lambda category: -category.context_importance))

    logger.debug(
        "Question classified",
        categories=[category.identifier for category in ranked],
    )
    return ClassificationResult(categories=ranked)
