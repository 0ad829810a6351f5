"""Error taxonomy shared by the services and their trigger surfaces.

Each error carries the HTTP status the API answers with. Collaborator
failures (notifier, knowledge providers) are not errors here: they are
absorbed where they happen and never reach the caller.
"""


class ServiceError(Exception):
    """Base class for errors surfaced to the caller as `{"error": message}`."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Caller input is missing or malformed. Never retried."""

    status_code = 400


class NotFoundError(ServiceError):
    """A referenced record does not exist."""

    status_code = 404


class PersistenceError(ServiceError):
    """A data store read or update failed."""

    status_code = 500
