# Entry point for drawing a bracket from the command line

import argparse
import os
import sys
import yaml
from bracket.errors import BracketError
from bracket.elimination import build_bracket, get_round_names
from bracket.models import Participant
from bracket.seeding import make_rng


def load_participants(file_path):
    """
    Load participants from YAML. Accepts a list of names or a list of
    {id, name, image} mappings; only entries with active != false are kept.
    """
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if isinstance(data, dict):
        data = data.get('players', [])

    participants = []
    for index, entry in enumerate(data):
        if isinstance(entry, str):
            participants.append(Participant(str(index + 1), entry))
        elif entry.get('active', True):
            participants.append(Participant(entry.get('id', str(index + 1)), entry['name'], entry.get('image')))
    return participants


def format_bracket(bracket, play_in):
    lines = []
    if play_in.active:
        lines.append(f"{play_in.direct_count} direct, {play_in.play_in_count} in the play-in "
                     f"({play_in.adjustment_matches} matches)")
    for round_name, round_matches in zip(get_round_names(bracket, play_in), bracket.rounds):
        lines.append("")
        lines.append(f"# {round_name}")
        for match in round_matches:
            slot1 = match.slot1.name if match.slot1 else 'TBD'
            slot2 = match.slot2.name if match.slot2 else ('BYE' if match.is_bye else 'TBD')
            lines.append(f"  {match.id}: {slot1} vs {slot2}")
    return "\n".join(lines)


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Draw a single elimination bracket')
    parser.add_argument('players_file', nargs='?', default=os.path.join(base_dir, 'data', 'players.yaml'),
                        help='YAML file with the players to seed')
    parser.add_argument('--seed', type=int, default=None, help='Fixed seed for a reproducible draw')
    args = parser.parse_args(argv)

    participants = load_participants(args.players_file)

    try:
        bracket, play_in = build_bracket(participants, make_rng(args.seed))
    except BracketError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_bracket(bracket, play_in))
    return 0


if __name__ == '__main__':
    sys.exit(main())
