"""
Error taxonomy surfaced by the orchestrator and views.

Every error is recoverable by the caller: views convert them into a message and
return to an input-ready state.
"""

from typing import Optional


class AgriAssistError(Exception):
    """Base class for errors raised by Agri Assist."""

    pass


class ValidationError(AgriAssistError):
    """A caller precondition failed. No network call was made."""

    pass


class MalformedResponseError(AgriAssistError):
    """The model answered, but the payload failed schema or table parsing."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


class TransportError(AgriAssistError):
    """The generative or speech capability failed; the message is passed through."""

    pass


class UnknownError(AgriAssistError):
    """Anything else."""

    pass
