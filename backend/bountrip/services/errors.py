class LLMError(Exception):
    """Raised when the LLM service fails."""


class InvalidLLMRequest(LLMError):
    """Raised before any network call when a request is malformed."""


class MissingSchemaName(InvalidLLMRequest):
    """A structured-output schema was supplied without a schema name."""

    def __init__(self) -> None:
        super().__init__("Missing required field: json_schema_name")


class ModelNotFound(LLMError):
    def __init__(self, model: str) -> None:
        super().__init__(f"Model info not found for {model}")
        self.model = model


class MissingAuthToken(LLMError):
    def __init__(self, provider: str) -> None:
        super().__init__(f"Auth token not found for provider: {provider}")
        self.provider = provider


class RequestFailed(LLMError):
    """The outbound provider call failed or returned a non-success status.

    ``status_code`` and ``body`` carry the provider's response when one was
    received, for caller diagnostics.
    """

    def __init__(
        self,
        cause: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(f"Request failed: {cause}")
        self.status_code = status_code
        self.body = body


class ResponseRefused(LLMError):
    """The provider returned a refusal instead of content."""

    def __init__(self, refusal: str) -> None:
        super().__init__(refusal)
        self.refusal = refusal
