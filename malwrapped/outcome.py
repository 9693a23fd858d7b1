"""Tagged results for passes that may not apply to a given input.

A pass either produced a value (``Evaluated``) or had nothing to say
(``NotApplicable``), so consumers never have to read meaning into ``None``.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable


@dataclass(frozen=True)
class Evaluated:
    value: Any
    source: str | None = None
    status: str = "evaluated"

    @property
    def applicable(self) -> bool:
        return True


@dataclass(frozen=True)
class NotApplicable:
    reason: str
    status: str = "not_applicable"

    @property
    def applicable(self) -> bool:
        return False

    @property
    def value(self):
        return None


Outcome = Evaluated | NotApplicable


def first_available(
    steps: Iterable[tuple[str, Callable[[], Any]]],
    reason: str = "no candidate available",
) -> Outcome:
    """Walk ``(source, producer)`` pairs in order and keep the first non-None value.

    Producers are only called until one yields something, so later steps may
    be expensive.
    """
    for source, produce in steps:
        value = produce()
        if value is not None:
            return Evaluated(value, source=source)
    return NotApplicable(reason)
