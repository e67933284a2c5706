"""Error kinds raised by the round engine and rendered by the API.

Every error is recoverable by the caller and maps to a JSON body of the form
``{"error": <message>, "code": <code>}``.
"""


class GameError(Exception):
    status_code = 400
    code = 'game_error'
    default_message = 'Request rejected'

    def __init__(self, message=None, **details):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        if self.details:
            payload['details'] = self.details
        return payload


class SessionNotFound(GameError):
    status_code = 404
    code = 'session_not_found'
    default_message = 'Session not found'


class PlayerNotFound(GameError):
    status_code = 404
    code = 'player_not_found'
    default_message = 'Player not found'


class SessionCompleted(GameError):
    status_code = 409
    code = 'session_completed'
    default_message = 'Session already completed'


class NoSwapsAvailable(GameError):
    code = 'no_swaps_available'
    default_message = 'No swaps left. Buy more in the shop.'


class InsufficientCurrency(GameError):
    code = 'insufficient_currency'
    default_message = 'Not enough gems'


class WordRejected(GameError):
    status_code = 422
    code = 'word_rejected'
    default_message = 'Word is not in the dictionary or cannot be built from the letters'


class InvalidInput(GameError):
    code = 'invalid_input'
    default_message = 'Invalid request'


class TransientFailure(GameError):
    status_code = 503
    code = 'transient_failure'
    default_message = 'Temporary failure, please retry'
