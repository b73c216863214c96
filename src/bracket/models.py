from typing import List, Optional


class Participant:
    """A seeded entrant. Identity is the id; name and image are display data."""

    def __init__(self, id, name, image=None):
        self._id = id
        self._name = name
        self._image = image

    @property
    def id(self):
        return self._id

    @property
    def name(self):
        return self._name

    @property
    def image(self):
        return self._image

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return self._id == other._id

    def __hash__(self):
        return hash(self._id)

    def __repr__(self):
        return f"Participant(id={self._id}, name={self._name})"


class Team(Participant):
    def __init__(self, id, name, color=None, members=None):
        super().__init__(id, name)
        self.color = color
        self.members = members if members else []

    def rename(self, name):
        if not name:
            raise ValueError("A team needs a name")
        self._name = name

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, members={len(self.members)})"


class Match:
    def __init__(self, round_index: int, match_index: int, slot1=None, slot2=None):
        self.id = f"W{round_index + 1}-M{match_index + 1}"
        self.round_index = round_index
        self.match_index = match_index
        self.slot1 = slot1
        self.slot2 = slot2
        self.winner = None
        self.is_bye = False

    @property
    def participants(self) -> List[Participant]:
        return [p for p in (self.slot1, self.slot2) if p is not None]

    @property
    def is_ready(self) -> bool:
        return self.slot1 is not None and self.slot2 is not None

    def has_participant(self, participant) -> bool:
        return participant is not None and participant in self.participants

    def __repr__(self):
        return (f"Match(id={self.id}, slot1={self.slot1}, slot2={self.slot2}, "
                f"winner={self.winner})")


class PlayInInfo:
    def __init__(self, active: bool, direct_count: int, adjustment_matches: int):
        self.active = active
        self.direct_count = direct_count
        self.adjustment_matches = adjustment_matches

    @property
    def play_in_count(self) -> int:
        """Number of participants who have to go through the play-in round."""
        return self.adjustment_matches * 2

    def __eq__(self, other):
        if not isinstance(other, PlayInInfo):
            return NotImplemented
        return (self.active, self.direct_count, self.adjustment_matches) == \
            (other.active, other.direct_count, other.adjustment_matches)

    def __repr__(self):
        return (f"PlayInInfo(active={self.active}, direct_count={self.direct_count}, "
                f"adjustment_matches={self.adjustment_matches})")


class Bracket:
    """Ordered rounds of a single elimination tournament, earliest first."""

    def __init__(self, rounds: Optional[List[List[Match]]] = None):
        self.rounds = rounds if rounds else []

    @property
    def final(self) -> Optional[Match]:
        if not self.rounds or not self.rounds[-1]:
            return None
        return self.rounds[-1][0]

    @property
    def champion(self) -> Optional[Participant]:
        final = self.final
        return final.winner if final else None

    @property
    def is_complete(self) -> bool:
        return self.champion is not None

    def has_match(self, round_index: int, match_index: int) -> bool:
        return (0 <= round_index < len(self.rounds)
                and 0 <= match_index < len(self.rounds[round_index]))

    def get_match(self, round_index: int, match_index: int) -> Match:
        return self.rounds[round_index][match_index]

    def matches(self):
        for round_matches in self.rounds:
            for match in round_matches:
                yield match

    def __repr__(self):
        sizes = [len(r) for r in self.rounds]
        return f"Bracket(rounds={sizes}, champion={self.champion})"


class TeamBracketState:
    def __init__(self):
        self.semifinal1_winner = None
        self.semifinal2_winner = None
        self.champion = None

    def __repr__(self):
        return (f"TeamBracketState(semifinal1_winner={self.semifinal1_winner}, "
                f"semifinal2_winner={self.semifinal2_winner}, champion={self.champion})")


class BestOfThreeState:
    def __init__(self):
        self.match1_winner = None
        self.match2_winner = None
        self.match3_winner = None

    def winners(self) -> list:
        return [self.match1_winner, self.match2_winner, self.match3_winner]

    def __repr__(self):
        return (f"BestOfThreeState(match1_winner={self.match1_winner}, "
                f"match2_winner={self.match2_winner}, match3_winner={self.match3_winner})")
