from fastapi import status


class MessagingError(Exception):
    """
    Base class for failures of the messaging core.
    Each subclass carries the HTTP status it is rendered with.
    """
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthorized(MessagingError):
    """ The actor is not a permitted party for the operation """
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransition(MessagingError):
    """ The entity is not in a state that allows the operation """
    status_code = status.HTTP_409_CONFLICT


class DuplicatePending(MessagingError):
    status_code = status.HTTP_409_CONFLICT


class NotFound(MessagingError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidPayload(MessagingError):
    status_code = status.HTTP_400_BAD_REQUEST
