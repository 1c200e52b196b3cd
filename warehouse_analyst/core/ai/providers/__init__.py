"""Gateway transport and adapter implementations."""

from .base import AttemptPolicy, GatewayTransport, SingleAttemptPolicy
from .litellm import LiteLlmAdapter, ResponseStream

__all__ = (
    "AttemptPolicy",
    "GatewayTransport",
    "LiteLlmAdapter",
    "ResponseStream",
    "SingleAttemptPolicy",
)
