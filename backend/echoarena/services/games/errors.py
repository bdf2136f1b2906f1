"""Domain errors raised by the game services.

Each error carries the HTTP status and a stable code so the app-level
error handler can render it without the services knowing about Flask.
"""


class GameError(Exception):
    status_code = 500
    code = 'internal_error'
    message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'success': False, 'error': self.message, 'code': self.code}


# Validation

class ValidationError(GameError):
    status_code = 400
    code = 'validation_error'
    message = 'Invalid request'


class InvalidCodeFormat(ValidationError):
    code = 'invalid_code_format'
    message = 'Invalid room code format'


class InvalidSubmission(ValidationError):
    code = 'invalid_submission'
    message = 'Invalid submission'


# Identity

class InvalidUser(GameError):
    status_code = 401
    code = 'invalid_user'
    message = 'Invalid user'


class Unauthorized(GameError):
    status_code = 403
    code = 'unauthorized'
    message = 'Unauthorized'


# Not found

class NotFoundError(GameError):
    status_code = 404
    code = 'not_found'
    message = 'Not found'


class RoomNotFound(NotFoundError):
    code = 'room_not_found'
    message = 'Room not found'


class RoomNotJoinable(NotFoundError):
    code = 'room_not_joinable'
    message = 'Room not found or already started'


class UnknownQuestion(NotFoundError):
    code = 'unknown_question'
    message = 'Question does not match the current turn'


class NoQuestionsAvailable(NotFoundError):
    code = 'no_questions_available'
    message = 'No questions available'


# Conflict

class ConflictError(GameError):
    status_code = 409
    code = 'conflict'
    message = 'Conflict'


class CodeExhausted(ConflictError):
    code = 'code_exhausted'
    message = 'Could not allocate a unique room code'


class TurnAlreadyAnswered(ConflictError):
    code = 'turn_already_answered'
    message = 'This turn has already been answered'


class NoActiveParticipants(ConflictError):
    code = 'no_active_participants'
    message = 'No active participants in this room'


class InvalidRoomState(ConflictError):
    code = 'invalid_room_state'
    message = 'Room is not in a valid state for this action'
