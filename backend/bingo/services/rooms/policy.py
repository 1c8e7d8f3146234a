from typing import Optional


class ConnectionHostPolicy:
    """Host authorization by connection identity.

    The token handed to a room on host bind is the connection id itself, so a
    host keeps its rights exactly as long as its connection lives. Subclass and
    override ``issue`` to switch to another credential.
    """

    def issue(self, connection_id: str) -> str:
        return connection_id

    def authorize(self, room, connection_id: Optional[str]) -> bool:
        if connection_id is None or room.host_token is None:
            return False
        return room.host_token == self.issue(connection_id)
