"""Terminal error responses produced when a gateway call fails."""

from __future__ import annotations

from .types import LlmResponse

ERROR_CODE_PREFIX = "LITELLM_"
TRANSPORT_ERROR_CODE = "LITELLM_ERROR"

_PROBABLE_CAUSES = (
    "LiteLLM service is not running or scaled to zero",
    "Upstream model API key not configured in LiteLLM",
    "Network connectivity issues",
)


def http_error_response(status_code: int, body: str) -> LlmResponse:
    """Build the response for a gateway that answered with a non-2xx status."""

    causes = "\n".join(f"- {cause}" for cause in _PROBABLE_CAUSES)
    diagnostic = (
        f"[LiteLLM Error {status_code}]\n\n"
        f"The LiteLLM proxy service returned an error:\n{body}\n\n"
        f"Possible causes:\n{causes}\n\n"
        "Please check the LiteLLM gateway deployment."
    )
    return LlmResponse(
        error_code=f"{ERROR_CODE_PREFIX}{status_code}",
        error_message=body,
        diagnostic=diagnostic,
        turn_complete=True,
    )


def transport_error_response(exc: BaseException) -> LlmResponse:
    """Build the response for a failed call that produced no HTTP error status.

    Used for connection failures and for bodies that cannot be read or decoded.
    """

    message = str(exc) or exc.__class__.__name__
    return LlmResponse(
        error_code=TRANSPORT_ERROR_CODE,
        error_message=message,
        diagnostic=f"[LiteLLM Error]\n\nThe request to the LiteLLM gateway failed:\n{message}",
        turn_complete=True,
    )


__all__ = (
    "ERROR_CODE_PREFIX",
    "TRANSPORT_ERROR_CODE",
    "http_error_response",
    "transport_error_response",
)
