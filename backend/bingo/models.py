import random
import string
import time
from typing import Any, Dict, List, Optional

ROOM_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_room_id(length=6):
    """Generate a short random room id (not guaranteed unique on its own)."""
    return ''.join(random.choices(ROOM_ID_ALPHABET, k=length))


def generate_secret_key():
    """Generate a 4-digit player secret key between 1000 and 9999."""
    return str(random.randint(1000, 9999))


class Player:
    def __init__(self, secret_key: str, name: str):
        self.secret_key = secret_key
        self.name = name
        self.connection_id: Optional[str] = None
        self.card_numbers: Any = None

    @property
    def online(self) -> bool:
        return self.connection_id is not None

    def to_dict(self):
        return {
            'name': self.name,
            'online': self.online,
            'hasCard': self.card_numbers is not None,
        }


class Room:
    def __init__(self, room_id: str, min_number, max_number):
        self.room_id = room_id
        self.host_connection_id: Optional[str] = None
        self.host_token: Optional[str] = None
        self.min_number = min_number
        self.max_number = max_number
        self.drawn_numbers: List = []
        self.players: Dict[str, Player] = {}
        self.last_active = time.time()

    @property
    def has_host(self) -> bool:
        return self.host_connection_id is not None

    def bind_host(self, connection_id: str, token: str) -> None:
        self.host_connection_id = connection_id
        self.host_token = token

    def clear_host(self) -> None:
        self.host_connection_id = None
        self.host_token = None

    def touch(self, now=None):
        self.last_active = time.time() if now is None else now

    def add_drawn(self, number) -> bool:
        """Append ``number`` unless it was already drawn. Returns True if appended."""
        if number in self.drawn_numbers:
            return False
        self.drawn_numbers.append(number)
        return True

    def online_player_names(self) -> List[str]:
        return [p.name for p in self.players.values() if p.online]

    def summary(self):
        return {
            'roomId': self.room_id,
            'minNumber': self.min_number,
            'maxNumber': self.max_number,
            'drawnNumbers': list(self.drawn_numbers),
        }

    def to_dict(self):
        data = self.summary()
        data['hasHost'] = self.has_host
        data['players'] = [p.to_dict() for p in self.players.values()]
        return data
