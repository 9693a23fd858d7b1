"""Immutable insight model returned by :func:`malwrapped.engine.aggregate`."""

from dataclasses import asdict, dataclass, field

from malwrapped.outcome import Evaluated, NotApplicable


@dataclass(frozen=True)
class RankedName:
    name: str
    count: int
    id: int | None = None


@dataclass(frozen=True)
class Share:
    name: str
    count: int
    percentage: int


@dataclass(frozen=True)
class StatusCount:
    status: str
    count: int


@dataclass(frozen=True)
class WorkSummary:
    id: int | None
    title: str
    score: int
    mean: float
    popularity: int
    picture: str | None = None


@dataclass(frozen=True)
class MediaSummary:
    """Per-list block (anime or manga) for the selected year."""

    total: int = 0
    completed: int = 0
    in_progress: int = 0
    planned_total: int = 0
    status_counts: tuple[StatusCount, ...] = ()
    units: int = 0
    volumes: int = 0
    top_genres: tuple[RankedName, ...] = ()
    distinct_genres: int = 0
    top_creators: tuple[RankedName, ...] = ()
    distinct_creators: int = 0
    top_rated: tuple[WorkSummary, ...] = ()
    hidden_gems: tuple[WorkSummary, ...] = ()
    rare_gems: tuple[WorkSummary, ...] = ()
    hidden_gem_count: int = 0
    demographics: tuple[Share, ...] = ()
    planned: tuple[str, ...] = ()


@dataclass(frozen=True)
class WatchTime:
    total_minutes: int = 0
    days: int = 0
    hours: int = 0


@dataclass(frozen=True)
class Archetype:
    key: str
    name: str
    description: str
    mean_score: float
    rated_count: int


@dataclass(frozen=True)
class Badge:
    key: str
    name: str
    description: str


@dataclass(frozen=True)
class Milestone:
    threshold: int
    lifetime_completed: int
    reached_on: str | None = None


@dataclass(frozen=True)
class Streak:
    length: int = 0
    start: str | None = None
    end: str | None = None


@dataclass(frozen=True)
class CharacterTwin:
    name: str
    anime_id: int | None
    source_title: str
    genres: tuple[str, ...]
    matched_genres: tuple[str, ...] = ()


@dataclass(frozen=True)
class Delta:
    current: int
    previous: int
    delta: int
    growth_pct: int


@dataclass(frozen=True)
class YearComparison:
    previous_year: int
    anime: Delta
    episodes: Delta
    manga: Delta
    chapters: Delta


@dataclass
class PortraitSlots:
    """Enrichment results filled in after construction, keyed to one model."""

    character: str | None = None
    authors: dict = field(default_factory=dict)


@dataclass(frozen=True)
class InsightModel:
    selected_year: object
    anime: MediaSummary
    manga: MediaSummary
    watch_time: WatchTime
    seasons: tuple[Share, ...]
    archetype: Evaluated | NotApplicable
    badges: Evaluated | NotApplicable
    milestone: Evaluated | NotApplicable
    streak: Evaluated | NotApplicable
    character_twin: Evaluated | NotApplicable
    year_comparison: Evaluated | NotApplicable
    generation: int = field(default=0, compare=False)
    portraits: PortraitSlots = field(default_factory=PortraitSlots, compare=False)

    @property
    def total_anime(self) -> int:
        return self.anime.total

    @property
    def total_manga(self) -> int:
        return self.manga.total

    @property
    def streak_length(self) -> int:
        return self.streak.value.length if self.streak.applicable else 0

    def to_dict(self) -> dict:
        return asdict(self)
