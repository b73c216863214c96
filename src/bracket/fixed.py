"""
Fixed size brackets: the four team playoff and the best-of-3 series.

Their shape never changes, so results live in named slots instead of an
indexed tree.
"""
import logging
from typing import List, Optional

from bracket.errors import InsufficientParticipants, InvalidWinner, StaleMatchReference
from bracket.models import BestOfThreeState, Participant, Team, TeamBracketState

logger = logging.getLogger(__name__)

TEAM_BRACKET_SIZE = 4
STAGES = ('semi1', 'semi2', 'final')
BEST_OF = 3


class TeamBracket:
    """
    Two semifinals (teams 0 v 1 and 2 v 3) feeding a final.

    The final is open as soon as a semifinal winner exists; declaring the
    champion before both semifinals are in is left to the caller.
    """

    def __init__(self, teams: List[Team]):
        if len(teams) != TEAM_BRACKET_SIZE:
            raise InsufficientParticipants(
                f"A team bracket needs exactly {TEAM_BRACKET_SIZE} teams ({len(teams)} given)"
            )
        self.teams = list(teams)
        self.state = TeamBracketState()

    @property
    def champion(self) -> Optional[Team]:
        return self.state.champion

    def entrants(self, stage: str) -> List[Team]:
        """Teams that can win the given stage."""
        if stage == 'semi1':
            return self.teams[0:2]
        if stage == 'semi2':
            return self.teams[2:4]
        if stage == 'final':
            return [t for t in (self.state.semifinal1_winner, self.state.semifinal2_winner) if t]
        raise StaleMatchReference(f"Unknown stage '{stage}', expected one of {', '.join(STAGES)}")

    def advance(self, stage: str, team: Team) -> TeamBracketState:
        candidates = self.entrants(stage)
        if team not in candidates:
            raise InvalidWinner(f"{team} cannot win stage '{stage}'")
        team = candidates[candidates.index(team)]

        if stage == 'final':
            self.state.champion = team
            return self.state

        if stage == 'semi1':
            previous = self.state.semifinal1_winner
            self.state.semifinal1_winner = team
        else:
            previous = self.state.semifinal2_winner
            self.state.semifinal2_winner = team

        # A champion who no longer reached the final is cleared
        if previous is not None and previous != team and self.state.champion == previous:
            logger.debug("Clearing champion %s after %s changed", previous, stage)
            self.state.champion = None
        return self.state

    def reset(self) -> TeamBracketState:
        self.state = TeamBracketState()
        return self.state

    def rename_team(self, team_id, name: str) -> Team:
        """Give a team a new name without touching the results."""
        for team in self.teams:
            if team.id == team_id:
                team.rename(name)
                return team
        raise StaleMatchReference(f"No team with id {team_id!r} in this bracket")


class BestOfThree:
    """Two entrants, three games, first to two wins takes the series."""

    def __init__(self, entrants: List[Participant]):
        if len(entrants) != 2:
            raise InsufficientParticipants(
                f"A best-of-3 series needs exactly 2 entrants ({len(entrants)} given)"
            )
        if entrants[0] == entrants[1]:
            raise InsufficientParticipants("A best-of-3 series needs two different entrants")
        self.entrants = list(entrants)
        self.state = BestOfThreeState()

    def _check_match_number(self, match_number: int):
        if not 1 <= match_number <= BEST_OF:
            raise StaleMatchReference(f"Match number must be between 1 and {BEST_OF}, got {match_number}")

    def record(self, match_number: int, winner: Participant) -> BestOfThreeState:
        self._check_match_number(match_number)
        if winner not in self.entrants:
            raise InvalidWinner(f"{winner} is not playing in this series")
        winner = self.entrants[self.entrants.index(winner)]
        setattr(self.state, f"match{match_number}_winner", winner)
        return self.state

    def clear(self, match_number: int) -> BestOfThreeState:
        self._check_match_number(match_number)
        setattr(self.state, f"match{match_number}_winner", None)
        return self.state

    def wins(self, entrant: Participant) -> int:
        return sum(1 for w in self.state.winners() if w is not None and w == entrant)

    @property
    def champion(self) -> Optional[Participant]:
        # Counted from the recorded games on every read
        for entrant in self.entrants:
            if self.wins(entrant) >= 2:
                return entrant
        return None

    def reset(self) -> BestOfThreeState:
        self.state = BestOfThreeState()
        return self.state
