"""Domain-specific error types for the LLM module."""


class LlmConfigError(Exception):
    """No usable judgment backend credentials are configured."""


class LlmApiError(Exception):
    """Language model API call failure (transport, quota or bad response).

    Attributes:
        status_code: HTTP status code from the API response, 0 if none.
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code
