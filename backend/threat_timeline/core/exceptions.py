"""
Exceptions raised by the timeline graph and its derived views.

Mutations on the graph do not raise for missing references; they log and
return an empty result so the caller decides what to show. These types are
used where an operation genuinely cannot proceed.
"""


class TimelineError(Exception):
    """Base class for all timeline errors."""


class EventNotFoundError(TimelineError):
    """
    Raised when an event id does not resolve.

    The graph itself never raises this; the HTTP layer does, so that a missing
    id becomes a 404 instead of a silent no-op.
    """

    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class TimestampValidationError(TimelineError, ValueError):
    """Raised when a timestamp string does not parse to an instant."""

    def __init__(self, value: object):
        super().__init__(f"Invalid timestamp: {value!r}")
        self.value = value


class DataError(TimelineError):
    """
    Raised when a derived view cannot be built from the data it was given.

    Examples:
        * Generating a report from an empty event list
    """


class CreationError(TimelineError):
    """Raised when a new event cannot be added to the collection."""
