"""Error types for the HTTP API."""


class InvalidRequestError(Exception):
    """The request is malformed; answered with 400.

    Attributes:
        message: Client-facing error text.
    """

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
