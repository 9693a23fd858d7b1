from collections import Counter

from factories import anime
from malwrapped import badges


def _keys(outcome):
    return [b.key for b in outcome.value]


def test_no_badges_is_an_empty_tuple():
    result = badges.evaluate(badges.BadgeContext(selected_year="all"))
    assert result.applicable
    assert result.value == ()


def test_six_qualifying_badges_are_capped_at_four():
    ctx = badges.BadgeContext(
        selected_year=2024,
        hidden_gem_count=30,
        distinct_genres=25,
        completed_in_scope=260,
        planned_total=40,
        top_studio=("Madhouse", 8),
        earliest_year=2024,
    )
    assert len(badges.score_badges(ctx)) == 6

    result = badges.evaluate(ctx)
    assert _keys(result) == ["hunter", "archivist", "strategist", "loyalist"]
    for badge in result.value:
        assert not hasattr(badge, "score")
        assert badge.description


def test_explorer_reports_authors_when_wider():
    ctx = badges.BadgeContext(selected_year="all", distinct_genres=12, distinct_authors=21)
    (badge,) = badges.evaluate(ctx).value
    assert badge.key == "explorer"
    assert "21 different authors" in badge.description


def test_sprinter_picks_longest_quick_finish():
    entries = (
        anime("Short", episodes=12, start="2024-03-01", finish="2024-03-02"),
        anime("Long", episodes=64, start="2024-03-01", finish="2024-03-04"),
        anime("Slow", episodes=100, start="2024-03-01", finish="2024-03-20"),
        anime("Ongoing", status="watching", episodes=200, start="2024-03-01", finish="2024-03-01"),
    )
    assert badges.sprint_candidate(entries) is entries[1]
    result = badges.evaluate(badges.BadgeContext(selected_year=2024, scoped_entries=entries))
    assert _keys(result) == ["sprinter"]
    assert "Long" in result.value[0].description


def test_loyalist_needs_four_works():
    ctx = badges.BadgeContext(selected_year="all", top_studio=("Bones", 3), top_author=("CLAMP", 4))
    (badge,) = badges.evaluate(ctx).value
    assert badge.key == "loyalist"
    assert "CLAMP" in badge.description


def test_guardian_share_path_needs_ten_entries():
    nine = tuple(anime(f"E{i}") for i in range(9))
    ctx = badges.BadgeContext(selected_year="all", scoped_entries=nine, genre_counts=Counter({"Action": 5}))
    assert badges.evaluate(ctx).value == ()

    ten = tuple(anime(f"E{i}") for i in range(10))
    ctx = badges.BadgeContext(selected_year="all", scoped_entries=ten, genre_counts=Counter({"Action": 5}))
    assert _keys(badges.evaluate(ctx)) == ["guardian"]


def test_guardian_count_path():
    ctx = badges.BadgeContext(selected_year="all", genre_counts=Counter({"Romance": 40}))
    assert _keys(badges.evaluate(ctx)) == ["guardian"]


def test_rookie_only_for_first_year():
    ctx = badges.BadgeContext(selected_year=2023, earliest_year=2022, completed_lifetime=3)
    assert badges.evaluate(ctx).value == ()
    ctx = badges.BadgeContext(selected_year=2022, earliest_year=2022, completed_lifetime=3)
    assert _keys(badges.evaluate(ctx)) == ["rookie"]
    ctx = badges.BadgeContext(selected_year="all", earliest_year=2022, completed_lifetime=3)
    assert badges.evaluate(ctx).value == ()
