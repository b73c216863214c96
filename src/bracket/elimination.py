"""
Single elimination bracket generation and management.

Participant counts that are not a power of two get a play-in round: the
surplus is played off first so the main bracket always starts at a power of
two. Direct entrants take the lowest first-round slots and play-in winners
fill the slots after them, in play-in match order.
"""
import logging
from typing import List, Dict, Optional, Tuple

from bracket.errors import InsufficientParticipants, InvalidWinner, StaleMatchReference
from bracket.models import Bracket, Match, PlayInInfo, Participant
from bracket.seeding import shuffle

logger = logging.getLogger(__name__)

PLAY_IN_ROUND_NAME = "Play-in"


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_target_size(num_participants: int) -> int:
    """Largest power of two that does not exceed the participant count."""
    if num_participants <= 0:
        return 0
    return 1 << (num_participants.bit_length() - 1)


def calculate_play_in(num_participants: int) -> PlayInInfo:
    """
    Work out how many entrants go straight to the main bracket and how many
    play-in matches are needed to cut the field to a power of two.
    """
    target_size = calculate_target_size(num_participants)
    adjustment_matches = num_participants - target_size
    if adjustment_matches == 0:
        return PlayInInfo(active=False, direct_count=num_participants, adjustment_matches=0)
    return PlayInInfo(
        active=True,
        direct_count=num_participants - adjustment_matches * 2,
        adjustment_matches=adjustment_matches,
    )


def infer_play_in(bracket: Bracket) -> PlayInInfo:
    """
    Recover the PlayInInfo of a built bracket from its shape.

    A main bracket round always has twice the matches of the round after it;
    a leading round that breaks that rule is the play-in round.
    """
    rounds = bracket.rounds
    if len(rounds) < 2 or len(rounds[0]) == 2 * len(rounds[1]):
        size = 2 * len(rounds[0]) if rounds else 0
        return PlayInInfo(active=False, direct_count=size, adjustment_matches=0)
    adjustment_matches = len(rounds[0])
    target_size = 2 * len(rounds[1])
    return PlayInInfo(
        active=True,
        direct_count=target_size - adjustment_matches,
        adjustment_matches=adjustment_matches,
    )


def _first_main_round_index(play_in: PlayInInfo) -> int:
    return 1 if play_in.active else 0


def _play_in_fed_slots(play_in: PlayInInfo) -> range:
    """First main round slot positions that are filled by play-in winners."""
    if not play_in.active:
        return range(0)
    return range(play_in.direct_count, play_in.direct_count + play_in.adjustment_matches)


def _destination(bracket: Bracket, play_in: PlayInInfo,
                 round_index: int, match_index: int) -> Optional[Tuple[Match, bool]]:
    """
    Find where the winner of a match goes next.

    Returns (next_match, is_first_slot), or None for the final.
    """
    if play_in.active and round_index == 0:
        target_slot = play_in.direct_count + match_index
        return bracket.get_match(1, target_slot // 2), target_slot % 2 == 0

    next_round_index = round_index + 1
    if next_round_index >= len(bracket.rounds):
        return None
    return bracket.get_match(next_round_index, match_index // 2), match_index % 2 == 0


def _set_slot(match: Match, is_first_slot: bool, participant: Optional[Participant]):
    if is_first_slot:
        match.slot1 = participant
    else:
        match.slot2 = participant


def _clear_downstream(bracket: Bracket, play_in: PlayInInfo, match: Match):
    """Drop a match result and everything that was built on top of it."""
    logger.debug("Invalidating result of %s (was %s)", match.id, match.winner)
    match.winner = None
    destination = _destination(bracket, play_in, match.round_index, match.match_index)
    if destination is None:
        return
    next_match, is_first_slot = destination
    _set_slot(next_match, is_first_slot, None)
    if next_match.winner is not None:
        _clear_downstream(bracket, play_in, next_match)


def _propagate(bracket: Bracket, play_in: PlayInInfo, match: Match):
    """Move the winner of a match into its slot in the next round."""
    destination = _destination(bracket, play_in, match.round_index, match.match_index)
    if destination is None:
        return
    next_match, is_first_slot = destination
    _set_slot(next_match, is_first_slot, match.winner)
    logger.debug("%s advances from %s to %s", match.winner, match.id, next_match.id)
    # An input changed, so the result there is stale
    if next_match.winner is not None:
        _clear_downstream(bracket, play_in, next_match)


def _resolve_byes(bracket: Bracket, play_in: PlayInInfo):
    """Give a walkover to first-round entrants whose opponent slot nothing feeds."""
    first_round = _first_main_round_index(play_in)
    if first_round >= len(bracket.rounds):
        return
    fed_slots = _play_in_fed_slots(play_in)

    for match in bracket.rounds[first_round]:
        first_slot = match.match_index * 2
        if match.slot1 is not None and match.slot2 is None and first_slot + 1 not in fed_slots:
            occupant = match.slot1
        elif match.slot2 is not None and match.slot1 is None and first_slot not in fed_slots:
            occupant = match.slot2
        else:
            continue
        match.is_bye = True
        match.winner = occupant
        _propagate(bracket, play_in, match)


def _validate_participants(participants: List[Participant]):
    if len(participants) < 2:
        raise InsufficientParticipants(
            f"At least 2 participants are needed for a bracket ({len(participants)} given)"
        )
    ids = [p.id for p in participants]
    if len(set(ids)) != len(ids):
        raise InsufficientParticipants("Participants must have unique ids")


def build_bracket(participants: List[Participant], rng=None) -> Tuple[Bracket, PlayInInfo]:
    """
    Shuffle participants and lay them out in a fresh bracket.

    Returns the bracket together with its PlayInInfo, which advance_winner
    needs to route play-in winners into the main bracket.
    """
    _validate_participants(participants)

    shuffled = shuffle(participants, rng)
    play_in = calculate_play_in(len(shuffled))
    target_size = calculate_target_size(len(shuffled))

    direct_entrants = shuffled[:play_in.direct_count]
    play_in_entrants = shuffled[play_in.direct_count:]

    rounds = []
    if play_in.active:
        rounds.append([
            Match(0, i, play_in_entrants[i * 2], play_in_entrants[i * 2 + 1])
            for i in range(play_in.adjustment_matches)
        ])

    num_main_rounds = target_size.bit_length() - 1
    matches_in_round = target_size // 2
    for _ in range(num_main_rounds):
        round_index = len(rounds)
        rounds.append([Match(round_index, i) for i in range(matches_in_round)])
        matches_in_round //= 2

    first_round = rounds[_first_main_round_index(play_in)]
    for slot, participant in enumerate(direct_entrants):
        _set_slot(first_round[slot // 2], slot % 2 == 0, participant)

    bracket = Bracket(rounds)
    _resolve_byes(bracket, play_in)

    logger.debug("Built bracket for %d participants: %s, %s", len(shuffled), bracket, play_in)
    return bracket, play_in


def advance_winner(bracket: Bracket, play_in: PlayInInfo, round_index: int,
                   match_index: int, winner: Participant) -> Bracket:
    """
    Record the winner of a match and move them on to the next round.

    Declaring a different winner for a decided match is allowed as a
    correction; every later result that depended on it is cleared. Declaring
    the same winner again changes nothing. The bracket is left untouched
    when an error is raised.
    """
    if not bracket.has_match(round_index, match_index):
        raise StaleMatchReference(
            f"No match {match_index} in round {round_index} of this bracket"
        )

    match = bracket.get_match(round_index, match_index)
    if not match.has_participant(winner):
        raise InvalidWinner(f"{winner} is not playing in match {match.id}")
    if not match.is_ready and not match.is_bye:
        raise InvalidWinner(f"Match {match.id} is still waiting for an opponent")

    # Store the seeded object, not the caller's copy
    winner = match.slot1 if match.slot1 == winner else match.slot2
    if match.winner == winner:
        return bracket

    if match.winner is not None:
        logger.debug("Correcting %s: %s replaces %s", match.id, winner, match.winner)
    match.winner = winner
    _propagate(bracket, play_in, match)
    return bracket


def reset_bracket(bracket: Bracket, play_in: Optional[PlayInInfo] = None) -> Bracket:
    """
    Clear every result so the same draw can be replayed.

    Seeded slots (play-in entrants and direct entrants) keep their occupants;
    slots that only ever held advancing winners are emptied again, which
    puts the bracket back in the state build_bracket returned it in.
    """
    if play_in is None:
        play_in = infer_play_in(bracket)

    first_round = _first_main_round_index(play_in)
    fed_slots = _play_in_fed_slots(play_in)

    for match in bracket.matches():
        match.winner = None
        match.is_bye = False
        if match.round_index > first_round:
            match.slot1 = None
            match.slot2 = None
        elif match.round_index == first_round:
            if match.match_index * 2 in fed_slots:
                match.slot1 = None
            if match.match_index * 2 + 1 in fed_slots:
                match.slot2 = None

    _resolve_byes(bracket, play_in)
    return bracket


def get_round_names(bracket: Bracket, play_in: PlayInInfo) -> List[str]:
    names = []
    for round_index, round_matches in enumerate(bracket.rounds):
        if play_in.active and round_index == 0:
            names.append(PLAY_IN_ROUND_NAME)
        else:
            names.append(get_round_name(len(round_matches) * 2))
    return names


def _participant_display(participant: Optional[Participant]) -> Optional[Dict]:
    if participant is None:
        return None
    return {'id': participant.id, 'name': participant.name, 'image': participant.image}


def get_bracket_display(bracket: Bracket, play_in: PlayInInfo) -> Dict:
    """
    Get bracket data formatted for UI display.

    Rounds are listed from the first round (the play-in, when there is one)
    to the final.
    """
    rounds = []
    for round_name, round_matches in zip(get_round_names(bracket, play_in), bracket.rounds):
        rounds.append({
            'name': round_name,
            'matches': [
                {
                    'match_code': match.id,
                    'round_index': match.round_index,
                    'match_index': match.match_index,
                    'teams': (_participant_display(match.slot1), _participant_display(match.slot2)),
                    'winner': _participant_display(match.winner),
                    'is_bye': match.is_bye,
                    'is_placeholder': not match.is_ready and not match.is_bye,
                    'is_playable': match.is_ready and match.winner is None,
                }
                for match in round_matches
            ],
        })

    return {
        'rounds': rounds,
        'total_rounds': len(bracket.rounds),
        'total_participants': play_in.direct_count + play_in.play_in_count,
        'direct_count': play_in.direct_count,
        'play_in_count': play_in.play_in_count,
        'adjustment_matches': play_in.adjustment_matches,
        'has_play_in': play_in.active,
        'champion': _participant_display(bracket.champion),
    }
