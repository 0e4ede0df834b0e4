from __future__ import annotations

from enum import Enum


class Rule(str, Enum):
    PLACEMENT_ALREADY_ACCEPTED = "placement already accepted"
    APPLICATION_LIMIT = "application limit"
    POSTING_NOT_OPEN = "posting not open"
    POSTING_CLOSED = "posting closed"
    NO_SLOTS = "no slots"
    YEAR_LEVEL = "year-level restriction"
    DUPLICATE_APPLICATION = "duplicate active application"
    DUPLICATE_WITHDRAWAL = "duplicate withdrawal request"
    NOT_OWNER = "not owner"
    NOT_SUCCESSFUL = "application not successful"
    POSTING_LIMIT = "posting limit"
    SLOT_LIMIT = "slot limit"
    INVALID_DATES = "invalid dates"


class PlacementError(Exception):
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__


class BusinessRuleViolation(PlacementError):
    status_code = 422

    def __init__(self, rule: Rule, message: str | None = None) -> None:
        super().__init__(message or rule.value)
        self.rule = rule


class InvalidState(PlacementError):
    status_code = 409


class NotFound(PlacementError):
    status_code = 404

    @classmethod
    def entity(cls, label: str, entity_id: str) -> "NotFound":
        return cls(f"{label} not found: {entity_id}")


class Unauthorized(PlacementError):
    status_code = 403


class InvalidInput(PlacementError):
    status_code = 400


class PersistenceFailure(PlacementError):
    status_code = 500
