"""Domain error kinds shared by the selection and population pipeline.

NotFoundError and ValidationError abort the current unit of work and are
surfaced to the caller. UpstreamFailure wraps a failed store or collaborator
call. ConflictIgnorable marks a duplicate-link attempt; it is counted by the
caller and never surfaced.
"""


class NewsletterError(Exception):
    """Base class for all domain errors."""


class NotFoundError(NewsletterError):
    """A referenced campaign, event, content item or ad does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier!r} not found")


class ValidationError(NewsletterError):
    """Malformed input (bad date, missing field, out-of-range score)."""


class InvalidTransitionError(ValidationError):
    """A status change not permitted by the transition table."""

    def __init__(self, entity: str, from_status: str, to_status: str) -> None:
        self.entity = entity
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid {entity} transition {from_status!r} -> {to_status!r}"
        )


class UpstreamFailure(NewsletterError):
    """A database, rating or notification call failed."""


class ConflictIgnorable(NewsletterError):
    """Duplicate insert of an already-present link."""
