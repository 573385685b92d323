"""
Result aggregation for votings.

Results are derived on every read from the per-option counters; nothing
here is stored. Percentages are rounded half-up independently, so they
need not add up to exactly 100.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol


class CountedOption(Protocol):
    id: str
    votes_count: int
    position: int


@dataclass(frozen=True)
class OptionTally:
    option_id: str
    votes_count: int
    percentage: int


@dataclass(frozen=True)
class VotingTally:
    total_votes: int
    options: list[OptionTally]
    winner: Optional[OptionTally]

    def for_option(self, option_id: str) -> OptionTally:
        for option in self.options:
            if option.option_id == option_id:
                return option
        raise KeyError(option_id)


def percentage_of(count: int, total: int) -> int:
    """
    ``round(count / total * 100)`` with halves rounded up; 0 when total is 0.

    Integer arithmetic: floor((200 * count + total) / (2 * total)).
    """
    if total <= 0:
        return 0
    return (200 * count + total) // (2 * total)


def pick_winner(options: list[OptionTally]) -> Optional[OptionTally]:
    """First option holding the highest count; ties go to the earlier option."""
    winner: Optional[OptionTally] = None
    for option in options:
        if winner is None or option.votes_count > winner.votes_count:
            winner = option
    return winner


def tally_options(options: Iterable[CountedOption]) -> VotingTally:
    """
    Compute totals, percentages and the winner.

    Options are ordered by creation position (then id) before anything is
    computed, so the winner does not depend on the order rows came back in.
    """
    ordered = sorted(options, key=lambda o: (o.position, str(o.id)))
    total = sum(o.votes_count or 0 for o in ordered)

    tallies = [
        OptionTally(
            option_id=str(o.id),
            votes_count=o.votes_count or 0,
            percentage=percentage_of(o.votes_count or 0, total),
        )
        for o in ordered
    ]
    return VotingTally(total_votes=total, options=tallies, winner=pick_winner(tallies))
