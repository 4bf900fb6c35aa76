"""
Flask web application for the bracket engine.

JSON API for creating elimination tournaments, recording results and editing
slots. Each tournament is stored as a YAML file under DATA_DIR.
"""
import os
import logging
from datetime import datetime
from flask import Flask, request, jsonify
from bracket_engine.models import Team, Slot, TournamentSettings, BYE_WINNER, WINNERS, LOSERS, round_index
from bracket_engine.config import DATA_DIR, LOG_LEVEL, get_default_settings
from bracket_engine.elimination import build_bracket, get_bracket_round_names
from bracket_engine.resolution import finish_game, resolve_byes
from bracket_engine.advancement import champion
from bracket_engine.duration import calculate_tournament_duration, estimated_completion
from bracket_engine.editing import set_slot, assign_open_to_bye, clear_round
from bracket_engine.lifecycle import GameStateError, start_game, next_phase, pause_game, resume_game
from bracket_engine.storage import TournamentStore, TournamentNotFound, bracket_to_rows, bracket_from_rows

app = Flask(__name__)
app.logger.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))

GAME_ACTIONS = {
    'start': start_game,
    'next-phase': next_phase,
    'pause': pause_game,
    'resume': resume_game,
}

ROUND_ACTIONS = {
    'assign-byes': assign_open_to_bye,
    'clear': clear_round,
}


def _store() -> TournamentStore:
    """Store rooted at the current DATA_DIR."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return TournamentStore(DATA_DIR)


def _error(message, status):
    return jsonify({'error': message}), status


def _team_names(tournament: dict) -> dict:
    return {t['id']: t['name'] for t in tournament.get('teams', [])}


def _tournament_response(tournament: dict) -> dict:
    """Tournament as returned by the API: stored fields plus round names and champion."""
    bracket = bracket_from_rows(tournament.get('bracket', []))
    winner_id = champion(bracket)
    settings = TournamentSettings.from_dict(tournament['settings'])
    num_teams = len(tournament.get('teams', []))
    return {
        'slug': tournament['slug'],
        'name': tournament['name'],
        'created': tournament.get('created'),
        'settings': tournament['settings'],
        'seeding_mode': tournament.get('seeding_mode', 'off'),
        'seeding_type': tournament.get('seeding_type', 'standard'),
        'teams': tournament.get('teams', []),
        'bracket': bracket_to_rows(bracket),
        'round_names': get_bracket_round_names(bracket),
        'champion': winner_id,
        'champion_name': _team_names(tournament).get(winner_id) if winner_id else None,
        'duration': calculate_tournament_duration(num_teams, settings),
        'estimated_completion': estimated_completion(tournament.get('created'), num_teams, settings),
    }


def _parse_teams(entries) -> list:
    """Validate the posted team list. Raises ValueError on bad input."""
    if not isinstance(entries, list) or not entries:
        raise ValueError('At least one team is required')

    teams = []
    seen = set()
    for i, entry in enumerate(entries):
        if isinstance(entry, str):
            entry = {'name': entry}
        if not isinstance(entry, dict):
            raise ValueError('Each team must be a name or an object')
        name = str(entry.get('name', '')).strip()
        if not name:
            raise ValueError('Team name is required')
        team_id = str(entry.get('id') or f'team-{i + 1}')
        if team_id == BYE_WINNER:
            raise ValueError(f'Team id {BYE_WINNER} is reserved')
        if team_id in seen:
            raise ValueError(f'Duplicate team id: {team_id}')
        seen.add(team_id)
        seed = entry.get('seed')
        if seed is not None and not isinstance(seed, int):
            raise ValueError('Seed must be an integer')
        teams.append(Team(team_id, name, seed))
    return teams


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List stored tournament slugs."""
    return jsonify({'tournaments': _store().slugs()})


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Build a bracket for the posted roster and store it.

    Requires: name, teams in JSON body. Optional: settings, seeding_mode, seeding_type.
    """
    data = request.get_json(silent=True)
    if not data:
        return _error('No data provided', 400)

    name = str(data.get('name', '')).strip()
    if not name:
        return _error('Tournament name is required', 400)

    try:
        teams = _parse_teams(data.get('teams'))
        settings_data = get_default_settings()
        settings_data.update(data.get('settings') or {})
        settings = TournamentSettings.from_dict(settings_data)
        seeding_mode = data.get('seeding_mode', 'off')
        seeding_type = data.get('seeding_type', 'standard')
        bracket = build_bracket(teams, settings, seeding_mode, seeding_type)
    except (ValueError, TypeError) as e:
        return _error(str(e), 400)

    team_names = {t.id: t.name for t in teams}
    resolve_byes(bracket, team_names)

    store = _store()
    with store.lock:
        slug = store.unique_slug(name)
        tournament = {
            'slug': slug,
            'name': name,
            'created': datetime.now().isoformat(),
            'settings': settings.to_dict(),
            'seeding_mode': seeding_mode,
            'seeding_type': seeding_type,
            'teams': [t.to_dict() for t in teams],
            'bracket': bracket_to_rows(bracket),
        }
        store.save(slug, tournament)

    app.logger.info(f'Created tournament {slug} with {len(teams)} teams')
    return jsonify(_tournament_response(tournament)), 201


@app.route('/api/tournaments/<slug>', methods=['GET'])
def api_get_tournament(slug):
    try:
        tournament = _store().load(slug)
    except TournamentNotFound:
        return _error('Tournament not found', 404)
    return jsonify(_tournament_response(tournament))


@app.route('/api/tournaments/<slug>', methods=['DELETE'])
def api_delete_tournament(slug):
    try:
        _store().delete(slug)
    except TournamentNotFound:
        return _error('Tournament not found', 404)
    app.logger.info(f'Deleted tournament {slug}')
    return jsonify({'success': True})


@app.route('/api/tournaments/<slug>/games/<game_id>/finish', methods=['POST'])
def api_finish_game(slug, game_id):
    """Record a result. Requires winner_id; score_a and score_b default to 0."""
    data = request.get_json(silent=True) or {}
    winner_id = data.get('winner_id')
    if not winner_id:
        return _error('winner_id is required', 400)
    try:
        score_a = int(data.get('score_a', 0))
        score_b = int(data.get('score_b', 0))
    except (TypeError, ValueError):
        return _error('Scores must be integers', 400)

    store = _store()
    with store.lock:
        try:
            tournament = store.load(slug)
        except TournamentNotFound:
            return _error('Tournament not found', 404)

        bracket = bracket_from_rows(tournament.get('bracket', []))
        if bracket.find_game(game_id) is None:
            return _error('Game not found', 404)

        events = finish_game(bracket, game_id, winner_id, score_a, score_b, _team_names(tournament))
        if not events:
            return _error('Game cannot be finished with that winner', 409)

        tournament['bracket'] = bracket_to_rows(bracket)
        store.save(slug, tournament)

    app.logger.info(f'{slug}: {game_id} won by {winner_id} ({score_a}-{score_b}), {len(events)} events')
    response = _tournament_response(tournament)
    response['events'] = events
    return jsonify(response)


@app.route('/api/tournaments/<slug>/games/<game_id>/slot', methods=['POST'])
def api_set_slot(slug, game_id):
    """Manually set one side of a queued game. Requires side and type; team_id for Team slots."""
    data = request.get_json(silent=True)
    if not data:
        return _error('No data provided', 400)

    store = _store()
    with store.lock:
        try:
            tournament = store.load(slug)
        except TournamentNotFound:
            return _error('Tournament not found', 404)

        bracket = bracket_from_rows(tournament.get('bracket', []))
        try:
            slot = Slot.from_dict({'type': data.get('type'), 'team_id': data.get('team_id')})
            if slot.is_team and slot.team_id not in _team_names(tournament):
                return _error(f'Unknown team: {slot.team_id}', 400)
            set_slot(bracket, game_id, data.get('side', ''), slot)
        except GameStateError as e:
            return _error(str(e), 409)
        except KeyError:
            return _error('Game not found', 404)
        except ValueError as e:
            return _error(str(e), 400)

        tournament['bracket'] = bracket_to_rows(bracket)
        store.save(slug, tournament)

    return jsonify(_tournament_response(tournament))


@app.route('/api/tournaments/<slug>/games/<game_id>/<action>', methods=['POST'])
def api_game_action(slug, game_id, action):
    """Drive the game timer: start, next-phase, pause or resume."""
    transition = GAME_ACTIONS.get(action)
    if transition is None:
        return _error(f'Unknown action: {action}', 404)

    store = _store()
    with store.lock:
        try:
            tournament = store.load(slug)
        except TournamentNotFound:
            return _error('Tournament not found', 404)

        bracket = bracket_from_rows(tournament.get('bracket', []))
        game = bracket.find_game(game_id)
        if game is None:
            return _error('Game not found', 404)
        try:
            transition(game)
        except GameStateError as e:
            return _error(str(e), 409)

        tournament['bracket'] = bracket_to_rows(bracket)
        store.save(slug, tournament)

    return jsonify({'game_id': game.id, 'status': game.status, 'phase': game.phase})


@app.route('/api/tournaments/<slug>/rounds/<bracket_type>/<int:round_num>/<action>', methods=['POST'])
def api_round_action(slug, bracket_type, round_num, action):
    """Bulk edit a round: assign-byes turns OPEN slots into BYEs, clear resets queued games to OPEN."""
    edit = ROUND_ACTIONS.get(action)
    if edit is None:
        return _error(f'Unknown action: {action}', 404)
    if bracket_type not in (WINNERS, LOSERS):
        return _error(f'Unknown bracket type: {bracket_type}', 404)

    store = _store()
    with store.lock:
        try:
            tournament = store.load(slug)
        except TournamentNotFound:
            return _error('Tournament not found', 404)

        bracket = bracket_from_rows(tournament.get('bracket', []))
        rounds = bracket.rounds_for(bracket_type)
        if round_num < 1 or round_num > len(rounds):
            return _error('Round not found', 404)

        changed = edit(bracket, bracket_type, round_index(round_num))
        tournament['bracket'] = bracket_to_rows(bracket)
        store.save(slug, tournament)

    app.logger.info(f'{slug}: {action} on {bracket_type} round {round_num} changed {changed}')
    response = _tournament_response(tournament)
    response['changed'] = changed
    return jsonify(response)


@app.route('/api/tournaments/<slug>/resolve-byes', methods=['POST'])
def api_resolve_byes(slug):
    store = _store()
    with store.lock:
        try:
            tournament = store.load(slug)
        except TournamentNotFound:
            return _error('Tournament not found', 404)

        bracket = bracket_from_rows(tournament.get('bracket', []))
        events = resolve_byes(bracket, _team_names(tournament))
        tournament['bracket'] = bracket_to_rows(bracket)
        store.save(slug, tournament)

    response = _tournament_response(tournament)
    response['events'] = events
    return jsonify(response)


if __name__ == '__main__':
    app.run(debug=True, port=5000)
