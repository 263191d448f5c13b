"""Exceptions raised by the import services."""


class ImportValidationError(ValueError):
    """A batch was rejected before any record was processed."""


class EventNotFoundError(LookupError):
    """The target event does not exist."""

    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class TeamResolutionError(Exception):
    """A raw team reference could not be resolved or created."""

    def __init__(self, raw_name: str, reason: str = "empty team name"):
        super().__init__(f"Cannot resolve team '{raw_name}': {reason}")
        self.raw_name = raw_name
        self.reason = reason
