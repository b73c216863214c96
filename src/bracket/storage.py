"""
YAML persistence for bracket structures.

Only the bracket itself is stored: participants are written once and
referenced by id from slots and winners, so a loaded bracket holds a single
object per participant just like a freshly built one.
"""
import logging
import os
from typing import Dict, Optional, Tuple

import yaml
from filelock import FileLock

from bracket.elimination import infer_play_in
from bracket.fixed import BestOfThree, TeamBracket
from bracket.models import Bracket, Match, Participant, PlayInInfo, Team

logger = logging.getLogger(__name__)

LOCK_TIMEOUT = 10


def participant_to_dict(participant: Participant) -> Dict:
    return {'id': participant.id, 'name': participant.name, 'image': participant.image}


def _ref(participant: Optional[Participant]):
    return participant.id if participant is not None else None


def _lookup(by_id: Dict, participant_id):
    if participant_id is None:
        return None
    if participant_id not in by_id:
        raise ValueError(f"Unknown participant id in stored bracket: {participant_id}")
    return by_id[participant_id]


def bracket_to_dict(bracket: Bracket, play_in: PlayInInfo) -> Dict:
    participants = {}
    for match in bracket.matches():
        for p in match.participants:
            participants.setdefault(p.id, p)

    return {
        'participants': [participant_to_dict(p) for p in participants.values()],
        'play_in': {
            'active': play_in.active,
            'direct_count': play_in.direct_count,
            'adjustment_matches': play_in.adjustment_matches,
        },
        'rounds': [
            [
                {
                    'slot1': _ref(m.slot1),
                    'slot2': _ref(m.slot2),
                    'winner': _ref(m.winner),
                    'is_bye': m.is_bye,
                }
                for m in round_matches
            ]
            for round_matches in bracket.rounds
        ],
    }


def bracket_from_dict(data: Dict) -> Tuple[Bracket, PlayInInfo]:
    by_id = {p['id']: Participant(p['id'], p['name'], p.get('image'))
             for p in data.get('participants', [])}

    rounds = []
    for round_index, round_data in enumerate(data.get('rounds', [])):
        round_matches = []
        for match_index, match_data in enumerate(round_data):
            match = Match(round_index, match_index,
                          _lookup(by_id, match_data.get('slot1')),
                          _lookup(by_id, match_data.get('slot2')))
            match.winner = _lookup(by_id, match_data.get('winner'))
            match.is_bye = bool(match_data.get('is_bye', False))
            if match.winner is not None and not match.has_participant(match.winner):
                raise ValueError(f"Stored winner of {match.id} is not one of its participants")
            round_matches.append(match)
        rounds.append(round_matches)

    bracket = Bracket(rounds)
    play_in_data = data.get('play_in')
    if play_in_data:
        play_in = PlayInInfo(bool(play_in_data['active']),
                             int(play_in_data['direct_count']),
                             int(play_in_data['adjustment_matches']))
    else:
        play_in = infer_play_in(bracket)
    return bracket, play_in


def _team_to_dict(team: Team) -> Dict:
    return {
        'id': team.id,
        'name': team.name,
        'color': team.color,
        'members': [participant_to_dict(m) for m in team.members],
    }


def _team_from_dict(data: Dict) -> Team:
    members = [Participant(m['id'], m['name'], m.get('image')) for m in data.get('members', [])]
    return Team(data['id'], data['name'], color=data.get('color'), members=members)


def team_bracket_to_dict(team_bracket: TeamBracket) -> Dict:
    state = team_bracket.state
    return {
        'teams': [_team_to_dict(t) for t in team_bracket.teams],
        'state': {
            'semifinal1_winner': _ref(state.semifinal1_winner),
            'semifinal2_winner': _ref(state.semifinal2_winner),
            'champion': _ref(state.champion),
        },
    }


def team_bracket_from_dict(data: Dict) -> TeamBracket:
    team_bracket = TeamBracket([_team_from_dict(t) for t in data.get('teams', [])])
    by_id = {t.id: t for t in team_bracket.teams}
    state = data.get('state') or {}
    team_bracket.state.semifinal1_winner = _lookup(by_id, state.get('semifinal1_winner'))
    team_bracket.state.semifinal2_winner = _lookup(by_id, state.get('semifinal2_winner'))
    team_bracket.state.champion = _lookup(by_id, state.get('champion'))
    return team_bracket


def best_of_three_to_dict(series: BestOfThree) -> Dict:
    return {
        'entrants': [participant_to_dict(e) for e in series.entrants],
        'state': {
            f"match{i}_winner": _ref(w) for i, w in enumerate(series.state.winners(), start=1)
        },
    }


def best_of_three_from_dict(data: Dict) -> BestOfThree:
    series = BestOfThree([Participant(e['id'], e['name'], e.get('image'))
                          for e in data.get('entrants', [])])
    by_id = {e.id: e for e in series.entrants}
    state = data.get('state') or {}
    for i in range(1, 4):
        key = f"match{i}_winner"
        setattr(series.state, key, _lookup(by_id, state.get(key)))
    return series


def load_state(path: str) -> Optional[Dict]:
    """Read a YAML document, or None when the file is missing or empty."""
    if not os.path.exists(path):
        return None
    with FileLock(path + '.lock', timeout=LOCK_TIMEOUT):
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)


def save_state(path: str, data: Dict):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with FileLock(path + '.lock', timeout=LOCK_TIMEOUT):
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    logger.debug("Saved %s", path)


def save_bracket(path: str, bracket: Bracket, play_in: PlayInInfo):
    save_state(path, bracket_to_dict(bracket, play_in))


def load_bracket(path: str) -> Optional[Tuple[Bracket, PlayInInfo]]:
    data = load_state(path)
    if not data:
        return None
    return bracket_from_dict(data)
