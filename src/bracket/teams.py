"""
Split the active roster into the four squads of the team bracket.
"""
from typing import List

from bracket.errors import InsufficientParticipants
from bracket.models import Participant, Team
from bracket.seeding import shuffle

TEAM_SIZE = 5
TEAM_COUNT = 4

# (id, name, color) for each squad, in bracket order
TEAM_PRESETS = [
    ('t1', 'Alpha Squad', 'bg-red-600'),
    ('t2', 'Bravo Six', 'bg-green-600'),
    ('t3', 'Delta Force', 'bg-yellow-500'),
    ('t4', 'Omega Protocol', 'bg-blue-600'),
]


def form_teams(players: List[Participant], rng=None,
               team_size: int = TEAM_SIZE, team_count: int = TEAM_COUNT) -> List[Team]:
    """Randomly deal exactly team_size * team_count players into teams."""
    required = team_size * team_count
    if len(players) > required:
        raise InsufficientParticipants(f"Too many active players (max {required}, got {len(players)})")
    if len(players) < required:
        raise InsufficientParticipants(f"Not enough active players ({len(players)}/{required})")
    if team_count > len(TEAM_PRESETS):
        raise ValueError(f"Only {len(TEAM_PRESETS)} team presets are available")

    shuffled = shuffle(players, rng)
    teams = []
    for i, (team_id, name, color) in enumerate(TEAM_PRESETS[:team_count]):
        members = shuffled[i * team_size:(i + 1) * team_size]
        teams.append(Team(team_id, name, color=color, members=members))
    return teams
