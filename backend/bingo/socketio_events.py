from flask import current_app, request
from flask_socketio import join_room, leave_room
from typing import Any, Dict

from bingo import get_registry
from bingo.services.rooms import Notifier, SessionError


class SocketIONotifier(Notifier):
    """Pushes registry notifications over Flask-SocketIO (at-most-once, no acks)."""

    def __init__(self, server, namespace: str = '/'):
        self.server = server
        self.namespace = namespace

    def join(self, connection_id, room_id):
        join_room(room_id, sid=connection_id, namespace=self.namespace)

    def leave(self, connection_id, room_id):
        leave_room(room_id, sid=connection_id, namespace=self.namespace)

    def to_connection(self, connection_id, event, payload):
        self.server.emit(event, payload, to=connection_id, namespace=self.namespace)

    def to_room(self, room_id, event, payload):
        self.server.emit(event, payload, to=room_id, namespace=self.namespace)


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


def _failure(exc: SessionError) -> Dict[str, Any]:
    return {'ok': False, 'message': exc.message}


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    registry = get_registry(current_app)
    ctx = registry.connection_context(sid) or {}
    current_app.logger.info(
        f"[disconnect] sid={sid} role={ctx.get('role')} room={ctx.get('room_id')} key={ctx.get('secret_key')}"
    )
    registry.handle_disconnect(sid)


def handle_create_room(data=None):
    data = _payload(data)
    registry = get_registry(current_app)
    try:
        room, rejoin = registry.create_or_rejoin_room(
            _get_sid(),
            room_id=data.get('roomId'),
            min_number=data.get('minNumber'),
            max_number=data.get('maxNumber'),
        )
    except SessionError as exc:
        return _failure(exc)
    return {'ok': True, 'rejoin': rejoin, 'room': registry.snapshot(room)}


def handle_join_room(data=None):
    data = _payload(data)
    try:
        room, player, rejoin = get_registry(current_app).join_room(
            _get_sid(),
            room_id=data.get('roomId'),
            name=data.get('name'),
            secret_key=data.get('secretKey'),
        )
    except SessionError as exc:
        return _failure(exc)
    return {
        'ok': True,
        'name': player.name,
        'secretKey': player.secret_key,
        'rejoin': rejoin,
        'cardNumbers': player.card_numbers,
        'room': room.summary(),
    }


def handle_save_card(data=None):
    data = _payload(data)
    saved = get_registry(current_app).save_card(
        data.get('roomId'), data.get('secretKey'), data.get('cardNumbers')
    )
    return {'ok': saved}


def handle_draw_number(data=None):
    data = _payload(data)
    try:
        get_registry(current_app).draw_number(_get_sid(), data.get('roomId'), data.get('number'))
    except SessionError as exc:
        return _failure(exc)
    return {'ok': True}


def handle_bingo(data=None):
    data = _payload(data)
    get_registry(current_app).report_bingo(data.get('roomId'), data.get('name'))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Bind the bingo events to the shared Socket.IO server on ``namespace``."""
    from bingo import socketio

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('host:createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('host:drawNumber', handle_draw_number, namespace=namespace)
    socketio.on_event('player:joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('player:saveCard', handle_save_card, namespace=namespace)
    socketio.on_event('player:bingo', handle_bingo, namespace=namespace)
