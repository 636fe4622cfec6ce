"""Keyword-scoring category matcher"""

import re
from typing import Dict, Sequence

from carteira_gateway.domain.models import FALLBACK_CATEGORY, Category

EXACT_MATCH_SCORE = 100
WORD_MATCH_SCORE = 50
SUBSTRING_MATCH_SCORE = 10


def score_category(description: str, category: Category) -> int:
    """
    Score one category's keywords against an already lower-cased description.

    - exact equality: +100 and stop scoring this category
    - word-boundary match: +50
    - substring containment: +10
    Scores of different keywords accumulate.
    """
    score = 0
    for raw_keyword in category.keywords:
        keyword = raw_keyword.strip().lower()
        if not keyword:
            continue

        if description == keyword:
            score += EXACT_MATCH_SCORE
            break

        if re.search(rf"\b{re.escape(keyword)}\b", description):
            score += WORD_MATCH_SCORE
        elif keyword in description:
            score += SUBSTRING_MATCH_SCORE

    return score


def score_categories(description: str, categories: Sequence[Category]) -> Dict[int, int]:
    """Scores for every non-reserved category, keyed by category id"""
    text = description.strip().lower()
    return {category.id: score_category(text, category) for category in categories if not category.reserved}


def match_category(description: str, categories: Sequence[Category]) -> int:
    """
    Pick the category id that best fits a description.

    Ties go to the category that comes first in `categories` (the store lists
    them by name). With no positive score the answer is "Outros", or the last
    category supplied when "Outros" is missing.

    Raises:
        ValueError: if categories is empty
    """
    if not categories:
        raise ValueError("No categories to match against")

    scores = score_categories(description, categories)

    best_id = None
    best_score = 0
    for category in categories:
        score = scores.get(category.id, 0)
        if score > best_score:
            best_id, best_score = category.id, score

    if best_id is not None:
        return best_id

    fallback = next((c for c in categories if c.name == FALLBACK_CATEGORY), categories[-1])
    return fallback.id
