from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from scoreboard import socketio
from scoreboard.api.board import BOARD_ROOM


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    current_app.logger.info(f"[ws-disconnect] sid={request.sid}")


def handle_join_board(data=None):
    join_room(BOARD_ROOM)
    emit('joined', {'room': BOARD_ROOM})


def handle_leave_board(data=None):
    leave_room(BOARD_ROOM)
    emit('left', {'room': BOARD_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for ns in namespaces:
        socketio.on_event('connect', handle_connect, namespace=ns)
        socketio.on_event('disconnect', handle_disconnect, namespace=ns)
        socketio.on_event('join_board', handle_join_board, namespace=ns)
        socketio.on_event('leave_board', handle_leave_board, namespace=ns)
        socketio.on_event('ping', handle_ping, namespace=ns)
