"""Exceptions raised inside the orchestration pipeline."""

from typing import Optional


class OrchestratorError(Exception):
    """Base orchestrator exception."""


class ProviderError(OrchestratorError):
    """A provider call failed: non-2xx status, transport error or unusable body."""

    def __init__(
        self,
        provider: str,
        status_code: Optional[int] = None,
        reason: str = "",
    ):
        self.provider = provider
        self.status_code = status_code
        self.reason = reason

        if status_code is not None:
            message = f"{provider} API error: {status_code} {reason}".rstrip()
        else:
            message = f"{provider} API error: {reason}" if reason else f"{provider} API error"
        super().__init__(message)
