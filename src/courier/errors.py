"""Exception hierarchy for the outbound action pipeline.

All errors propagate unchanged to the caller for single actions.  The
broadcast coordinator is the only place that catches them, converting each
per-target failure into outcome data.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from courier.types import DirectoryEntry


class CourierError(Exception):
    """Base class for every error raised by courier."""


class ValidationError(CourierError):
    """A required field is missing or malformed (message, options, buttons...)."""


class TargetRequiredError(ValidationError):
    """The action needs a ``to``/``channelId`` target and none was given."""


class AmbiguousTargetError(CourierError):
    """A free-text target matched more than one directory entry.

    Never auto-resolved: callers get the full candidate list so they can
    prompt for disambiguation.
    """

    def __init__(self, message: str, candidates: list[DirectoryEntry]) -> None:
        super().__init__(message)
        self.candidates = candidates


class UnknownTargetError(CourierError):
    """A free-text target matched nothing in the channel directory."""


class UnsupportedActionError(CourierError):
    """No channel adapter handled a generic message action."""


class PolicyDeniedError(CourierError):
    """Cross-context policy denied the action. Non-retryable."""


class ChannelResolutionError(CourierError):
    """Channel configuration is missing, unknown, or ambiguous."""


class BroadcastPreconditionError(CourierError):
    """Broadcast disabled, no targets given, or no channels configured."""
