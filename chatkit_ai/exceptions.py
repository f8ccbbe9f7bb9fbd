"""
Error Taxonomy

Two kinds of failure exist in the orchestration core:
- Recoverable: ProviderError. Agents catch it and degrade gracefully.
- Fatal: ConfigurationError and WorkflowError. They abort the current run
  and bubble up to the HTTP layer untouched.
"""

from typing import Optional


class ChatKitError(Exception):
    """Base class for all orchestration errors."""
    pass


class ProviderError(ChatKitError):
    """Raised when a remote model call fails or returns no usable result."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        self.message = message
        prefix = f"[{provider}] " if provider else ""
        super().__init__(f"{prefix}{message}")


class ConfigurationError(ChatKitError):
    """Raised for missing providers, agent classes or required agent config."""
    pass


class WorkflowError(ChatKitError):
    """Raised for structural workflow failures (bad graph, runaway loop)."""
    pass
