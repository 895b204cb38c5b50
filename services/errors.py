"""Error taxonomy shared by the scheduling services and the HTTP routes"""


class ServiceError(Exception):
    """Base class for expected, caller-visible failures"""

    status_code = 500
    error_code = 'internal_error'
    default_message = 'An unexpected error occurred'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {
            'success': False,
            'error': self.error_code,
            'message': self.message
        }


class ValidationError(ServiceError):
    """Malformed input or an out-of-range setting; rejected before any write"""

    status_code = 400
    error_code = 'validation_error'
    default_message = 'Invalid input'


class NotFoundError(ServiceError):
    """Missing id, or an id that belongs to another user"""

    status_code = 404
    error_code = 'not_found'
    default_message = 'Problem not found'


class AlreadyRevisitedToday(ServiceError):
    """The problem already has a revisit entry for the current calendar day"""

    status_code = 409
    error_code = 'already_revisited_today'
    default_message = 'This problem has already been revisited today. Come back tomorrow!'


class UnavailableError(ServiceError):
    """The store failed (connection error, aborted transaction)"""

    status_code = 503
    error_code = 'unavailable'
    default_message = 'The service is temporarily unavailable. Please try again.'
