"""
Typed failures raised by the stores and the verification service.

Each carries enough context (entity, id, attempted transition) for the web
layer to render a message; app/main.py maps them onto HTTP responses.
"""

from typing import Optional


class VerificationError(Exception):
    kind = "verification_error"

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        entity_id: Optional[str] = None,
        transition: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.entity = entity
        self.entity_id = str(entity_id) if entity_id is not None else None
        self.transition = transition

    def to_dict(self) -> dict:
        return {
            "error": self.kind,
            "detail": self.message,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "transition": self.transition,
        }


class ValidationError(VerificationError):
    """Malformed input; resubmitting corrected input succeeds."""

    kind = "validation_error"


class NotFound(VerificationError):
    kind = "not_found"


class InvalidTarget(VerificationError):
    """Claim submitted against an item that is missing or not verified."""

    kind = "invalid_target"


class IllegalTransition(VerificationError):
    kind = "illegal_transition"


class Conflict(VerificationError):
    """Lost a race for a shared record, e.g. the item was claimed first."""

    kind = "conflict"
