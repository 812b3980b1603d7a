from flask import Blueprint, jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError
from scoreboard import socketio
from scoreboard.store import get_store
from scoreboard.services.rounds import board as views
from scoreboard.services.rounds import ledger
from scoreboard.services.rounds.ledger import LedgerError


board = Blueprint('board', __name__)

BOARD_ROOM = 'board'


def _broadcast(reason: str) -> None:
    socketio.emit('state_update', {'reason': reason}, to=BOARD_ROOM, namespace='/ws')


@board.errorhandler(LedgerError)
def handle_ledger_error(exc):
    return jsonify({'error': exc.message}), exc.status


@board.errorhandler(SQLAlchemyError)
def handle_store_error(exc):
    current_app.logger.error(f"[store-error] {exc}")
    return jsonify({'error': 'Storage failure, please retry.'}), 500


@board.route('/players', methods=['GET'])
def list_players():
    return jsonify([p.to_dict() for p in get_store().list_players()])


@board.route('/players', methods=['POST'])
def add_player():
    data = request.get_json(silent=True) or {}
    player = ledger.add_player(get_store(), data.get('name'))
    _broadcast('player_added')
    return jsonify(player.to_dict()), 201


@board.route('/players/<int:player_id>', methods=['DELETE'])
def delete_player(player_id):
    store = get_store()
    player = store.get_player(player_id)
    name = player.name if player else None
    ledger.delete_player(store, player_id)
    _broadcast('player_deleted')
    return jsonify({'message': f'{name} has been removed.'})


@board.route('/players/<int:player_id>/scores', methods=['POST'])
def record_score(player_id):
    data = request.get_json(silent=True) or {}
    if 'points' not in data:
        return jsonify({'error': 'Points are required'}), 400
    entry, player = ledger.record_score(
        get_store(),
        player_id,
        data.get('points'),
        action_label=data.get('action_label'),
        input_type=data.get('input_type') or 'shortcut',
    )
    _broadcast('score_recorded')
    return jsonify({'entry': entry.to_dict(), 'player': player.to_dict()}), 201


@board.route('/players/<int:player_id>/history', methods=['GET'])
def get_player_history(player_id):
    store = get_store()
    player = store.get_player(player_id)
    if not player:
        return jsonify({'error': 'Player not found.'}), 404
    return jsonify({
        'player': player.to_dict(),
        'history': views.player_history(player, store.list_events(player_id=player.id)),
    })


@board.route('/scores/reset', methods=['POST'])
def reset_scores():
    ledger.reset_scores(get_store())
    _broadcast('scores_reset')
    return jsonify({'message': 'All scores have been reset.'})


@board.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    store = get_store()
    return jsonify(views.leaderboard(store.list_players(), store.list_events()))


@board.route('/game-info', methods=['GET'])
def get_game_info():
    store = get_store()
    return jsonify(views.game_info(store.list_players(), store.list_events()))


@board.route('/history', methods=['GET'])
def get_round_history():
    store = get_store()
    return jsonify(views.round_history(store.list_players(), store.list_events()))


@board.route('/state', methods=['GET'])
def get_state():
    store = get_store()
    players = store.list_players()
    events = store.list_events()
    return jsonify({
        'players': [p.to_dict() for p in players],
        'leaderboard': views.leaderboard(players, events),
        'game_info': views.game_info(players, events),
    })
