"""
Flask JSON API for generating and playing out tournament brackets.
"""
import os
import yaml
from filelock import FileLock
from flask import Flask, request, jsonify
from bracket.errors import BracketError
from bracket.elimination import build_bracket, advance_winner, reset_bracket, get_bracket_display
from bracket.fixed import TeamBracket, BestOfThree, STAGES
from bracket.models import Participant
from bracket.seeding import make_rng
from bracket.storage import (
    LOCK_TIMEOUT, participant_to_dict, load_state, save_state, save_bracket, load_bracket,
    team_bracket_to_dict, team_bracket_from_dict, best_of_three_to_dict, best_of_three_from_dict,
)
from bracket.teams import form_teams

app = Flask(__name__)


def _get_bracket_seed():
    """Optional fixed seed for reproducible draws (BRACKET_SEED)."""
    value = os.environ.get('BRACKET_SEED')
    if value is None or value == '':
        return None
    try:
        return int(value)
    except ValueError:
        app.logger.warning(f'Ignoring non-integer BRACKET_SEED: {value!r}')
        return None


BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

app.config['BRACKET_SEED'] = _get_bracket_seed()

# Paths to state files
BRACKET_FILE = os.path.join(DATA_DIR, 'bracket.yaml')
TEAM_BRACKET_FILE = os.path.join(DATA_DIR, 'team_bracket.yaml')
SERIES_FILE = os.path.join(DATA_DIR, 'best_of_three.yaml')


def _data_lock():
    """Lock held around a whole load, change and save of the state files."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(os.path.join(DATA_DIR, '.lock'), timeout=LOCK_TIMEOUT)


def _error(message, status=400):
    return jsonify({'success': False, 'error': message}), status


def _is_id(value) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def _int_field(value, name) -> int:
    """Read an integer request field; numeric strings are accepted."""
    if not _is_id(value):
        raise ValueError(f'{name} must be an integer')
    try:
        return int(value)
    except ValueError:
        raise ValueError(f'{name} must be an integer, got {value!r}')


def _id_field(value, name):
    if not _is_id(value) or value == '':
        raise ValueError(f'{name} must be a string or an integer')
    return value


def _rng_from_request(data):
    """Seed from the request body, else the configured BRACKET_SEED."""
    seed = data.get('seed', app.config.get('BRACKET_SEED'))
    if seed is None:
        return make_rng()
    return make_rng(_int_field(seed, 'seed'))


def parse_participants(items) -> list:
    """Build participants from JSON objects with id, name and optional image."""
    if not isinstance(items, list):
        raise ValueError('Participants must be a list')
    participants = []
    for item in items:
        if not isinstance(item, dict) or item.get('id') in (None, '') or not item.get('name'):
            raise ValueError('Each participant needs an id and a name')
        if not _is_id(item['id']):
            raise ValueError(f"Participant id must be a string or an integer, got {item['id']!r}")
        if not isinstance(item['name'], str):
            raise ValueError(f"Participant name must be a string, got {item['name']!r}")
        participants.append(Participant(item['id'], item['name'], item.get('image')))
    return participants


def load_current_bracket():
    """Load the saved bracket, or None when nothing has been generated."""
    try:
        return load_bracket(BRACKET_FILE)
    except (yaml.YAMLError, ValueError, KeyError, TypeError) as e:
        app.logger.warning(f'Failed to parse {BRACKET_FILE}: {e}')
        return None


def load_team_bracket():
    try:
        data = load_state(TEAM_BRACKET_FILE)
        if not data:
            return None
        return team_bracket_from_dict(data)
    except (yaml.YAMLError, BracketError, ValueError, KeyError, TypeError) as e:
        app.logger.warning(f'Failed to parse {TEAM_BRACKET_FILE}: {e}')
        return None


def load_series():
    try:
        data = load_state(SERIES_FILE)
        if not data:
            return None
        return best_of_three_from_dict(data)
    except (yaml.YAMLError, BracketError, ValueError, KeyError, TypeError) as e:
        app.logger.warning(f'Failed to parse {SERIES_FILE}: {e}')
        return None


def get_team_bracket_display(team_bracket) -> dict:
    def team_json(team):
        if team is None:
            return None
        return {
            'id': team.id,
            'name': team.name,
            'color': team.color,
            'members': [participant_to_dict(m) for m in team.members],
        }

    state = team_bracket.state
    return {
        'teams': [team_json(t) for t in team_bracket.teams],
        'semifinals': [
            [team_json(t) for t in team_bracket.entrants('semi1')],
            [team_json(t) for t in team_bracket.entrants('semi2')],
        ],
        'semifinal1_winner': team_json(state.semifinal1_winner),
        'semifinal2_winner': team_json(state.semifinal2_winner),
        'champion': team_json(state.champion),
    }


def get_series_display(series) -> dict:
    return {
        'entrants': [participant_to_dict(e) for e in series.entrants],
        'winners': [participant_to_dict(w) if w else None for w in series.state.winners()],
        'wins': {str(e.id): series.wins(e) for e in series.entrants},
        'champion': participant_to_dict(series.champion) if series.champion else None,
    }


# ---------------------------------------------------------------------------
# Single elimination bracket
# ---------------------------------------------------------------------------

@app.route('/api/bracket', methods=['GET'])
def api_get_bracket():
    """Return the current bracket, if one has been generated."""
    loaded = load_current_bracket()
    if loaded is None:
        return _error('No bracket generated yet', 404)
    bracket, play_in = loaded
    return jsonify({'success': True, 'bracket': get_bracket_display(bracket, play_in)})


@app.route('/api/bracket/generate', methods=['POST'])
def api_generate_bracket():
    """Draw a new bracket from the eligible participants, replacing any old one."""
    data = request.get_json(silent=True) or {}
    try:
        participants = parse_participants(data.get('participants', []))
        bracket, play_in = build_bracket(participants, _rng_from_request(data))
    except (BracketError, ValueError) as e:
        app.logger.warning(f'Bracket generation rejected: {e}')
        return _error(str(e))

    with _data_lock():
        save_bracket(BRACKET_FILE, bracket, play_in)
    app.logger.info(f'Generated bracket for {len(participants)} participants '
                    f'({play_in.direct_count} direct, {play_in.play_in_count} play-in)')
    return jsonify({'success': True, 'bracket': get_bracket_display(bracket, play_in)})


@app.route('/api/bracket/advance', methods=['POST'])
def api_advance_bracket():
    """Record the winner of one match and move them on."""
    data = request.get_json(silent=True) or {}
    if data.get('round_index') is None or data.get('match_index') is None or data.get('winner_id') is None:
        return _error('Missing round_index, match_index or winner_id')
    try:
        round_index = _int_field(data['round_index'], 'round_index')
        match_index = _int_field(data['match_index'], 'match_index')
        winner = Participant(_id_field(data['winner_id'], 'winner_id'), '')
    except ValueError as e:
        return _error(str(e))

    with _data_lock():
        loaded = load_current_bracket()
        if loaded is None:
            return _error('No bracket generated yet', 404)
        bracket, play_in = loaded

        try:
            advance_winner(bracket, play_in, round_index, match_index, winner)
        except BracketError as e:
            app.logger.warning(f'Advance rejected: {e}')
            return _error(str(e))

        save_bracket(BRACKET_FILE, bracket, play_in)
    return jsonify({'success': True, 'bracket': get_bracket_display(bracket, play_in)})


@app.route('/api/bracket/reset', methods=['POST'])
def api_reset_bracket():
    """Clear all results but keep the draw."""
    with _data_lock():
        loaded = load_current_bracket()
        if loaded is None:
            return _error('No bracket generated yet', 404)
        bracket, play_in = loaded
        reset_bracket(bracket, play_in)
        save_bracket(BRACKET_FILE, bracket, play_in)
    app.logger.info('Bracket results cleared')
    return jsonify({'success': True, 'bracket': get_bracket_display(bracket, play_in)})


# ---------------------------------------------------------------------------
# Four team bracket
# ---------------------------------------------------------------------------

@app.route('/api/teams/bracket', methods=['GET'])
def api_get_team_bracket():
    team_bracket = load_team_bracket()
    if team_bracket is None:
        return _error('No teams generated yet', 404)
    return jsonify({'success': True, 'bracket': get_team_bracket_display(team_bracket)})


@app.route('/api/teams/generate', methods=['POST'])
def api_generate_teams():
    """Deal the active players into four random teams and start a new bracket."""
    data = request.get_json(silent=True) or {}
    try:
        players = parse_participants(data.get('players', []))
        team_bracket = TeamBracket(form_teams(players, _rng_from_request(data)))
    except (BracketError, ValueError) as e:
        app.logger.warning(f'Team generation rejected: {e}')
        return _error(str(e))

    with _data_lock():
        save_state(TEAM_BRACKET_FILE, team_bracket_to_dict(team_bracket))
    app.logger.info('Generated random teams')
    return jsonify({'success': True, 'bracket': get_team_bracket_display(team_bracket)})


@app.route('/api/teams/advance', methods=['POST'])
def api_advance_team():
    data = request.get_json(silent=True) or {}
    stage = data.get('stage')
    team_id = data.get('team_id')
    if stage not in STAGES or team_id is None:
        return _error(f"Missing team_id or stage (expected one of {', '.join(STAGES)})")
    try:
        team = Participant(_id_field(team_id, 'team_id'), '')
    except ValueError as e:
        return _error(str(e))

    with _data_lock():
        team_bracket = load_team_bracket()
        if team_bracket is None:
            return _error('No teams generated yet', 404)

        try:
            team_bracket.advance(stage, team)
        except BracketError as e:
            app.logger.warning(f'Team advance rejected: {e}')
            return _error(str(e))

        save_state(TEAM_BRACKET_FILE, team_bracket_to_dict(team_bracket))
    return jsonify({'success': True, 'bracket': get_team_bracket_display(team_bracket)})


@app.route('/api/teams/rename', methods=['POST'])
def api_rename_team():
    """Rename one of the generated teams, keeping the results."""
    data = request.get_json(silent=True) or {}
    team_id = data.get('team_id')
    name = data.get('name')
    if team_id is None or not isinstance(name, str) or not name.strip():
        return _error('Missing team_id or name')

    with _data_lock():
        team_bracket = load_team_bracket()
        if team_bracket is None:
            return _error('No teams generated yet', 404)

        try:
            team = team_bracket.rename_team(team_id, name.strip())
        except (BracketError, ValueError) as e:
            app.logger.warning(f'Team rename rejected: {e}')
            return _error(str(e))

        save_state(TEAM_BRACKET_FILE, team_bracket_to_dict(team_bracket))
    app.logger.info(f'Renamed team {team.id} to {team.name}')
    return jsonify({'success': True, 'bracket': get_team_bracket_display(team_bracket)})


@app.route('/api/teams/reset', methods=['POST'])
def api_reset_team_bracket():
    with _data_lock():
        team_bracket = load_team_bracket()
        if team_bracket is None:
            return _error('No teams generated yet', 404)
        team_bracket.reset()
        save_state(TEAM_BRACKET_FILE, team_bracket_to_dict(team_bracket))
    return jsonify({'success': True, 'bracket': get_team_bracket_display(team_bracket)})


# ---------------------------------------------------------------------------
# Best-of-3 series
# ---------------------------------------------------------------------------

@app.route('/api/bo3', methods=['GET'])
def api_get_series():
    series = load_series()
    if series is None:
        return _error('No series started yet', 404)
    return jsonify({'success': True, 'series': get_series_display(series)})


@app.route('/api/bo3/generate', methods=['POST'])
def api_generate_series():
    data = request.get_json(silent=True) or {}
    try:
        series = BestOfThree(parse_participants(data.get('entrants', [])))
    except (BracketError, ValueError) as e:
        app.logger.warning(f'Series creation rejected: {e}')
        return _error(str(e))

    with _data_lock():
        save_state(SERIES_FILE, best_of_three_to_dict(series))
    return jsonify({'success': True, 'series': get_series_display(series)})


@app.route('/api/bo3/record', methods=['POST'])
def api_record_series_match():
    """Record (or clear, when winner_id is null) the winner of one game."""
    data = request.get_json(silent=True) or {}
    if data.get('match_number') is None:
        return _error('Missing match_number')
    winner_id = data.get('winner_id')
    try:
        match_number = _int_field(data['match_number'], 'match_number')
        winner = None if winner_id is None else Participant(_id_field(winner_id, 'winner_id'), '')
    except ValueError as e:
        return _error(str(e))

    with _data_lock():
        series = load_series()
        if series is None:
            return _error('No series started yet', 404)

        try:
            if winner is None:
                series.clear(match_number)
            else:
                series.record(match_number, winner)
        except BracketError as e:
            app.logger.warning(f'Series result rejected: {e}')
            return _error(str(e))

        save_state(SERIES_FILE, best_of_three_to_dict(series))
    return jsonify({'success': True, 'series': get_series_display(series)})


@app.route('/api/bo3/reset', methods=['POST'])
def api_reset_series():
    with _data_lock():
        series = load_series()
        if series is None:
            return _error('No series started yet', 404)
        series.reset()
        save_state(SERIES_FILE, best_of_three_to_dict(series))
    return jsonify({'success': True, 'series': get_series_display(series)})


if __name__ == '__main__':
    app.run(debug=True)
