"""Unit tests for core/classifier.py"""

import json

import pytest

from clausereview.core.classifier import load_rules, rank_categories, score_categories
from clausereview.core.models import PlaybookRule


def test_keyword_and_synonym_weights_add():
    """One keyword hit and one synonym hit score 2 + 3."""
    rules = [PlaybookRule(category="LIABILITY", signal_keywords=["indemnify"], synonyms=["hold harmless"])]
    text = "Supplier shall INDEMNIFY and hold harmless the Customer."
    assert score_categories(text, rules) == {"LIABILITY": 5}


def test_zero_score_rule_excluded():
    rules = [
        PlaybookRule(category="LIABILITY", signal_keywords=["indemnify"]),
        PlaybookRule(category="PAYMENT", signal_keywords=["invoice"]),
    ]
    assert rank_categories("Each party shall indemnify the other.", rules) == ["LIABILITY"]


def test_category_supplied_by_another_rule_still_ranked():
    rules = [
        PlaybookRule(category="TERM", signal_keywords=["renewal"]),
        PlaybookRule(category="TERM", synonyms=["term of this agreement"]),
    ]
    assert score_categories("The term of this agreement is one year.", rules) == {"TERM": 3}


def test_missing_category_uses_default_bucket():
    rules = [PlaybookRule(signal_keywords=["notice"])]
    assert rank_categories("Written notice is required.", rules) == ["GENERAL"]


def test_ranked_by_score_with_stable_ties():
    rules = [
        PlaybookRule(category="A", signal_keywords=["alpha"]),
        PlaybookRule(category="B", synonyms=["beta"]),
        PlaybookRule(category="C", signal_keywords=["gamma"]),
    ]
    assert rank_categories("alpha beta gamma", rules) == ["B", "A", "C"]


def test_limit_applies():
    rules = [PlaybookRule(category=f"C{i}", signal_keywords=[f"w{i}"]) for i in range(30)]
    text = " ".join(f"w{i}" for i in range(30))
    assert len(rank_categories(text, rules)) == 20
    assert rank_categories(text, rules, limit=3) == ["C0", "C1", "C2"]


def test_custom_weights():
    rules = [PlaybookRule(category="X", signal_keywords=["a1"], synonyms=["b1"])]
    assert score_categories("a1 b1", rules, keyword_weight=10, synonym_weight=1) == {"X": 11}


def test_blank_terms_ignored():
    rules = [PlaybookRule(category="X", signal_keywords=["", "  "])]
    assert rank_categories("anything", rules) == []


def test_empty_text_ranks_nothing():
    assert rank_categories("", [PlaybookRule(category="X", signal_keywords=["a"])]) == []


def test_load_rules_yaml_mapping(tmp_path):
    f = tmp_path / "rules.yaml"
    f.write_text("rules:\n  - id: r1\n    category: PAYMENT\n    signal_keywords: [invoice]\n")
    rules = load_rules(f)
    assert rules[0].category == "PAYMENT"
    assert rules[0].signal_keywords == ["invoice"]


def test_load_rules_json_list(tmp_path):
    f = tmp_path / "rules.json"
    f.write_text(json.dumps([{"id": "r1", "synonyms": ["late fee"]}]))
    assert load_rules(f)[0].synonyms == ["late fee"]


def test_load_rules_rejects_non_list(tmp_path):
    f = tmp_path / "rules.yaml"
    f.write_text("just a string\n")
    with pytest.raises(ValueError, match="expected a list"):
        load_rules(f)
