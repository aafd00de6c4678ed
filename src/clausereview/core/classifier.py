"""Keyword/synonym prefilter ranking rule categories for a chunk of text"""

import json
import logging
from pathlib import Path

import yaml

from clausereview.core.models import PlaybookRule


logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 2
SYNONYM_WEIGHT = 3
DEFAULT_CATEGORY = "GENERAL"
MAX_CATEGORIES = 20


def _hits(lower_text: str, terms: list[str]) -> int:
    """Count configured terms occurring as substrings of lower_text; blank terms never match."""
    return sum(1 for t in terms if t.strip() and t.lower() in lower_text)


def score_categories(
    text: str,
    rules: list[PlaybookRule],
    keyword_weight: int = KEYWORD_WEIGHT,
    synonym_weight: int = SYNONYM_WEIGHT,
    default_category: str = DEFAULT_CATEGORY,
    ) -> dict[str, int]:
    """Return positive category scores in first-encountered order."""
    lower_text = text.lower()
    scores: dict[str, int] = {}
    for rule in rules:
        score = (
            keyword_weight * _hits(lower_text, rule.signal_keywords)
            + synonym_weight * _hits(lower_text, rule.synonyms)
        )
        if score > 0:
            category = rule.category or default_category
            scores[category] = scores.get(category, 0) + score
    return scores


def rank_categories(
    text: str,
    rules: list[PlaybookRule],
    limit: int = MAX_CATEGORIES,
    keyword_weight: int = KEYWORD_WEIGHT,
    synonym_weight: int = SYNONYM_WEIGHT,
    default_category: str = DEFAULT_CATEGORY,
    ) -> list[str]:
    """Return up to limit categories ordered by score descending; ties keep first-encountered order."""
    scores = score_categories(text, rules, keyword_weight, synonym_weight, default_category)
    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    logger.debug("Prefilter scored %d categories from %d rules", len(scores), len(rules))
    return [category for category, _ in ranked[:limit]]


def load_rules(path: Path) -> list[PlaybookRule]:
    """Load a rule catalogue from YAML or JSON: a list of rules or a mapping with a 'rules' list."""
    raw_text = path.read_text(encoding='utf-8')
    try:
        data = json.loads(raw_text) if path.suffix.lower() == '.json' else yaml.safe_load(raw_text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Invalid rules file {path}: {e}") from e
    if isinstance(data, dict):
        data = data.get('rules')
    if not isinstance(data, list):
        raise ValueError(f"Invalid rules file {path}: expected a list of rules")
    return [PlaybookRule.model_validate(r) for r in data]
