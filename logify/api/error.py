from fastapi import status
from libs.result import Error


class ClientError(Exception):
    """A request the caller can fix; rendered with its own status code"""

    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class NotFoundError(ClientError):
    """The requested event (or other log record) does not exist"""

    def __init__(self, base_error: Error):
        super().__init__(base_error, status_code=status.HTTP_404_NOT_FOUND)


class ServerError(Exception):
    """Anything else; always rendered as a 500 without the message"""

    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def raise_for(error: Error, client_codes=(), not_found_codes=()):
    """Raise the API error matching a use case error code"""
    if error.code in not_found_codes:
        raise NotFoundError(error)
    if error.code in client_codes:
        raise ClientError(error)
    raise ServerError(error)
