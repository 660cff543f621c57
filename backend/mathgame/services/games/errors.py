class GameServiceError(Exception):
    """Base error for the game services; carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class ValidationError(GameServiceError):
    """Missing or malformed input. Raised before anything is written."""

    status_code = 400


class NotFound(GameServiceError):
    status_code = 404


class StorageError(GameServiceError):
    """The database rejected or failed a write."""

    status_code = 500
