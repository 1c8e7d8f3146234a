class SessionError(Exception):
    """Base for failures that are reported back to the caller as ``{ok: False}``."""

    default_message = 'Request failed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRangeError(SessionError):
    default_message = 'Invalid number range.'


class HostAlreadyPresentError(SessionError):
    default_message = 'This room already has a host.'


class RoomNotFoundError(SessionError):
    default_message = 'Room does not exist.'


class MissingNameError(SessionError):
    default_message = 'Please enter a name.'


class NotHostError(SessionError):
    default_message = 'You are not the host of this room.'


class InvalidNumberError(SessionError):
    default_message = 'Invalid number.'


class KeyspaceExhaustedError(SessionError):
    default_message = 'No secret keys left in this room.'
