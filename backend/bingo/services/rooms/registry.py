import functools
import logging
import math
import threading
import time
from typing import Any, Dict, List, Optional

from bingo.models import Room, Player, generate_room_id, generate_secret_key
from .errors import (
    InvalidRangeError,
    HostAlreadyPresentError,
    RoomNotFoundError,
    MissingNameError,
    NotHostError,
    InvalidNumberError,
    KeyspaceExhaustedError,
)
from .policy import ConnectionHostPolicy

# Server -> client event names
PLAYERS_UPDATE = 'room:playersUpdate'
NUMBER_DRAWN = 'number:drawn'
BINGO_REPORTED = 'player:bingo'
HOST_LEFT = 'room:hostLeft'

SECRET_KEY_SPACE = 9000


class Notifier:
    """Outbound side of the registry. Delivery is fire-and-forget."""

    def join(self, connection_id: str, room_id: str) -> None:
        raise NotImplementedError

    def leave(self, connection_id: str, room_id: str) -> None:
        raise NotImplementedError

    def to_connection(self, connection_id: str, event: str, payload: Any) -> None:
        raise NotImplementedError

    def to_room(self, room_id: str, event: str, payload: Any) -> None:
        raise NotImplementedError


class NullNotifier(Notifier):
    def join(self, connection_id, room_id):
        pass

    def leave(self, connection_id, room_id):
        pass

    def to_connection(self, connection_id, event, payload):
        pass

    def to_room(self, room_id, event, payload):
        pass


def to_finite_number(value):
    """Coerce ``value`` to an int/float, or return None if it isn't a finite number.

    Numeric strings are accepted; integral floats collapse to int so that 17 and
    17.0 count as the same draw.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value) if value.is_integer() else value
    return None


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ''


def _locked(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class RoomRegistry:
    """In-memory rooms for one application instance.

    Socket.IO handlers and the sweeper call in from separate threads; every
    public method holds the registry lock for its whole transition. The lock is
    reentrant because rebinding a connection releases its previous binding.
    """

    def __init__(self, notifier: Optional[Notifier] = None, host_policy=None,
                 logger: Optional[logging.Logger] = None, notify_host_left: bool = False):
        self.rooms: Dict[str, Room] = {}
        self.notifier = notifier or NullNotifier()
        self.host_policy = host_policy or ConnectionHostPolicy()
        self.logger = logger or logging.getLogger(__name__)
        self.notify_host_left = notify_host_left
        self._connections: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    @_locked
    def get(self, room_id) -> Optional[Room]:
        if not isinstance(room_id, str):
            return None
        return self.rooms.get(room_id.strip())

    @_locked
    def snapshot(self, room: Room):
        return room.to_dict()

    @_locked
    def connection_context(self, connection_id: str) -> Optional[Dict[str, Any]]:
        ctx = self._connections.get(connection_id)
        return dict(ctx) if ctx else None

    # ---- host ----

    @_locked
    def create_or_rejoin_room(self, connection_id: str, room_id=None, min_number=None, max_number=None):
        """Create a room, or take over a host-less one. Returns ``(room, rejoin)``."""
        low = to_finite_number(min_number)
        high = to_finite_number(max_number)
        if low is None or high is None or low > high:
            raise InvalidRangeError()

        requested = _clean(room_id) or None
        existing = self.rooms.get(requested) if requested else None
        if existing is not None:
            if existing.has_host:
                raise HostAlreadyPresentError()
            existing.bind_host(connection_id, self.host_policy.issue(connection_id))
            existing.min_number = low
            existing.max_number = high
            existing.touch()
            self._bind(connection_id, role='host', room_id=existing.room_id)
            self.logger.info(f"[host-rejoin] room={existing.room_id} range={low}-{high}")
            self.notify_players_update(existing.room_id)
            return existing, True

        new_id = requested or self._fresh_room_id()
        room = Room(new_id, low, high)
        room.bind_host(connection_id, self.host_policy.issue(connection_id))
        self.rooms[new_id] = room
        self._bind(connection_id, role='host', room_id=new_id)
        self.logger.info(f"[room-create] room={new_id} range={low}-{high}")
        return room, False

    @_locked
    def draw_number(self, connection_id: str, room_id, number):
        room = self.get(room_id)
        if room is None:
            raise RoomNotFoundError()
        if not self.host_policy.authorize(room, connection_id):
            raise NotHostError()
        value = to_finite_number(number)
        if value is None:
            raise InvalidNumberError()

        added = room.add_drawn(value)
        room.touch()
        self.logger.info(f"[number-drawn] room={room.room_id} n={value} new={added}")
        self.notifier.to_room(room.room_id, NUMBER_DRAWN, {
            'number': value,
            'drawnNumbers': list(room.drawn_numbers),
        })
        return room

    # ---- players ----

    @_locked
    def join_room(self, connection_id: str, room_id, name, secret_key=None):
        """Join or resume a player. Returns ``(room, player, rejoin)``."""
        room = self.get(room_id)
        if room is None:
            raise RoomNotFoundError()
        display_name = _clean(name)
        if not display_name:
            raise MissingNameError()

        key = _clean(secret_key)
        if not key:
            key = self._fresh_secret_key(room)

        player = room.players.get(key)
        rejoin = player is not None
        if player is None:
            player = Player(key, display_name)
            room.players[key] = player
        player.name = display_name
        player.connection_id = connection_id
        room.touch()

        self._bind(connection_id, role='player', room_id=room.room_id, secret_key=key)
        self.notify_players_update(room.room_id)
        self.logger.info(
            f"[player-join] room={room.room_id} name={display_name} key={key} rejoin={rejoin}"
        )
        return room, player, rejoin

    @_locked
    def save_card(self, room_id, secret_key, card_numbers) -> bool:
        room = self.get(room_id)
        if room is None:
            return False
        player = room.players.get(_clean(secret_key))
        if player is None:
            return False
        player.card_numbers = card_numbers
        self.logger.info(f"[card-saved] room={room.room_id} key={player.secret_key}")
        return True

    @_locked
    def report_bingo(self, room_id, name) -> None:
        room = self.get(room_id)
        if room is None or not room.has_host:
            return
        self.logger.info(f"[bingo] room={room.room_id} name={name}")
        self.notifier.to_connection(room.host_connection_id, BINGO_REPORTED, {'name': name})

    @_locked
    def notify_players_update(self, room_id) -> None:
        room = self.get(room_id)
        if room is None or not room.has_host:
            return
        self.notifier.to_connection(room.host_connection_id, PLAYERS_UPDATE, room.online_player_names())

    # ---- connection lifecycle ----

    @_locked
    def handle_disconnect(self, connection_id: str) -> None:
        ctx = self._connections.pop(connection_id, None)
        if not ctx:
            return
        self._release(connection_id, ctx)

    def _release(self, connection_id: str, ctx: Dict[str, Any]) -> None:
        room = self.rooms.get(ctx.get('room_id'))
        if room is None:
            return

        if ctx.get('role') == 'host':
            # A newer host may already hold the room; only clear our own binding
            if self.host_policy.authorize(room, connection_id):
                room.clear_host()
                room.touch()
                self.logger.info(f"[host-left] room={room.room_id}")
                if self.notify_host_left:
                    self.notifier.to_room(room.room_id, HOST_LEFT, {'roomId': room.room_id})
        elif ctx.get('role') == 'player':
            player = room.players.get(ctx.get('secret_key'))
            if player is not None and player.connection_id == connection_id:
                player.connection_id = None
            room.touch()
            self.logger.info(f"[player-left] room={room.room_id} key={ctx.get('secret_key')}")
            self.notify_players_update(room.room_id)

    @_locked
    def evict_idle_rooms(self, max_idle_sec: float, now: Optional[float] = None) -> List[str]:
        """Drop rooms with nobody connected that have been idle for ``max_idle_sec``."""
        now = time.time() if now is None else now
        evicted = [
            room_id for room_id, room in self.rooms.items()
            if not room.has_host
            and not room.online_player_names()
            and now - room.last_active >= max_idle_sec
        ]
        for room_id in evicted:
            del self.rooms[room_id]
            self.logger.info(f"[room-evict] room={room_id}")
        if evicted:
            gone = set(evicted)
            for sid in [sid for sid, ctx in self._connections.items() if ctx.get('room_id') in gone]:
                self._connections.pop(sid, None)
        return evicted

    # ---- helpers ----

    def _bind(self, connection_id: str, role: str, room_id: str, secret_key: Optional[str] = None) -> None:
        ctx = {'role': role, 'room_id': room_id}
        if secret_key is not None:
            ctx['secret_key'] = secret_key
        previous = self._connections.get(connection_id)
        self._connections[connection_id] = ctx
        # One identity per connection: drop whatever it held before
        if previous and previous != ctx:
            self._release(connection_id, previous)
            if previous.get('room_id') != room_id:
                self.notifier.leave(connection_id, previous.get('room_id'))
        self.notifier.join(connection_id, room_id)

    def _fresh_room_id(self) -> str:
        while True:
            room_id = generate_room_id()
            if room_id not in self.rooms:
                return room_id

    def _fresh_secret_key(self, room: Room) -> str:
        taken = sum(1 for k in room.players if len(k) == 4 and k.isdigit() and k[0] != '0')
        if taken >= SECRET_KEY_SPACE:
            raise KeyspaceExhaustedError()
        while True:
            key = generate_secret_key()
            if key not in room.players:
                return key
