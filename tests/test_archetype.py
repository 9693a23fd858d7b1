import pytest

from factories import anime, rated
from malwrapped import archetype


def test_below_minimum_rated_is_not_applicable():
    entries = rated([8] * 9)
    # Scored but without a community mean: does not count toward the minimum.
    entries.append(anime("No mean", score=8))
    result = archetype.classify(entries, entries)
    assert not result.applicable
    assert result.value is None


def test_generous():
    entries = rated([9] * 10)
    result = archetype.classify(entries, entries)
    assert result.value.key == "generous"
    assert result.value.mean_score == 9
    assert result.value.rated_count == 10


def test_harsh_critic_beats_contrarian():
    entries = rated([4] * 10)
    profile = archetype.rating_profile(entries, entries)
    keys = [k for k, _ in archetype.score_candidates(profile)]
    assert "contrarian" in keys
    assert archetype.classify(entries, entries).value.key == "harsh_critic"


def test_perfectionist():
    entries = rated(
        [10, 10, 10, 1, 1, 7, 7, 7, 8, 8],
        means=[9.0, 9.0, 9.0, 2.0, 2.0, 7.0, 7.0, 7.0, 8.0, 8.0],
    )
    profile = archetype.rating_profile(entries, entries)
    assert profile["very_high"] + profile["very_low"] == pytest.approx(0.5)
    assert archetype.pick_archetype(profile) == "perfectionist"


def test_completionist():
    entries = rated([7] * 20, means=[7.0] * 20)
    result = archetype.classify(entries, entries)
    assert result.value.key == "completionist"


def test_completionist_needs_twenty_entries():
    entries = rated([7] * 19, means=[7.0] * 19)
    assert archetype.classify(entries, entries).value.key == "community_voice"


def test_wild_card_when_nothing_qualifies():
    entries = rated([9, 9, 9, 9, 6, 6, 6, 6, 5, 5])
    result = archetype.classify(entries, entries)
    assert result.applicable
    assert result.value.key == "wild_card"
    assert result.value.name == "The Wild Card"


def test_equal_scores_keep_earlier_candidate(monkeypatch):
    monkeypatch.setattr(archetype, "CANDIDATES", [
        ("contrarian", lambda p: 2.0),
        ("generous", lambda p: 2.0),
    ])
    assert archetype.pick_archetype({}) == "contrarian"
