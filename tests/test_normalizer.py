"""
Tests for identifier normalization and stats keys
"""
import pytest

from app.utils.normalizer import (
    build_stats_key,
    normalize,
    normalize_rank,
    normalize_region,
    normalize_role,
)


def test_alias_lookup():
    assert normalize("khazix") == "Khazix"


def test_already_canonical_is_unchanged():
    assert normalize("Ahri") == "Ahri"


def test_unknown_champion_is_capitalized():
    assert normalize("notachampion") == "Notachampion"


@pytest.mark.parametrize("raw,expected", [
    ("KHAZIX", "Khazix"),
    ("drmundo", "DrMundo"),
    ("JarvanIV", "JarvanIV"),
    ("wukong", "MonkeyKing"),
    ("missFortune", "MissFortune"),
])
def test_aliases_ignore_input_casing(raw, expected):
    assert normalize(raw) == expected


def test_default_rule_keeps_rest_of_input():
    """Only the first letter changes for non-aliased ids"""
    assert normalize("leBlanc") == "LeBlanc"


def test_whitespace_and_empty():
    assert normalize("  ahri ") == "Ahri"
    assert normalize("") == ""
    assert normalize(None) == ""


@pytest.mark.parametrize("raw,expected", [
    ("mid", "MIDDLE"),
    ("Bot", "BOTTOM"),
    ("adc", "BOTTOM"),
    ("support", "UTILITY"),
    ("jungle", "JUNGLE"),
    ("", "TOP"),
    ("nonsense", "TOP"),
])
def test_normalize_role(raw, expected):
    assert normalize_role(raw) == expected


def test_rank_and_region_casing():
    assert normalize_rank(" gold ") == "GOLD"
    assert normalize_region("EUW") == "euw"


def test_stats_key_is_case_insensitive():
    assert build_stats_key("gold", "NA") == build_stats_key("GOLD", "na")
    assert build_stats_key("GOLD", "na", role="mid", champion_id="KHAZIX") == \
        build_stats_key("gold", "NA", role="MIDDLE", champion_id="khazix")


def test_stats_key_format():
    assert build_stats_key("GOLD", "na") == "stats:latest:gold:na:*:*"
    assert build_stats_key("GOLD", "na", role="support", champion_id="wukong", patch="14.1.1") == \
        "stats:14.1.1:gold:na:utility:monkeyking"


def test_stats_key_distinguishes_patches():
    assert build_stats_key("GOLD", "na", patch="14.1.1") != build_stats_key("GOLD", "na", patch="14.2.1")
