from factories import anime, manga
from malwrapped import comparison


def test_delta_growth():
    d = comparison.delta(15, 10)
    assert (d.delta, d.growth_pct) == (5, 50)
    assert comparison.delta(3, 0).growth_pct == 0
    assert comparison.delta(0, 4).growth_pct == -100


def test_compare_years():
    anime_list = [
        anime("A", episodes=12, finish="2024-01-10"),
        anime("B", episodes=24, finish="2024-03-10"),
        anime("C", episodes=10, finish="2023-05-01"),
    ]
    manga_list = [manga("M", chapters=30, finish="2023-07-07")]
    result = comparison.compare_years(anime_list, manga_list, 2024)
    value = result.value
    assert value.previous_year == 2023
    assert (value.anime.current, value.anime.previous) == (2, 1)
    assert value.episodes.delta == 26
    assert value.manga.growth_pct == -100
    assert value.chapters.previous == 30


def test_all_time_has_no_comparison():
    assert not comparison.compare_years([], [], "all").applicable
