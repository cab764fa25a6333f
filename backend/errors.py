"""Domain error taxonomy shared by services and routes."""


class AppError(Exception):
    """Base class for errors whose message is safe to show to the user."""
    status_code = 400
    message = 'Request failed'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(AppError):
    status_code = 400
    message = 'Invalid request'


class NotFound(AppError):
    status_code = 400
    message = 'Match not found'


class MatchFull(AppError):
    status_code = 400
    message = 'Match is already full'


class Conflict(AppError):
    status_code = 409
    message = 'Resource already exists'


class Unauthorized(AppError):
    status_code = 401
    message = 'Authentication required'


class Forbidden(AppError):
    status_code = 403
    message = 'Forbidden: Admin access required'
