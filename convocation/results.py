"""
Result variants returned by the screen controllers.

Controllers never navigate or sign out themselves; the route layer inspects
the variant and decides where the user goes next.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, TypeVar, Union

T = TypeVar("T")


class FailureKind(str, Enum):
    SESSION_ABSENT = "session_absent"
    PROFILE_FETCH_FAILED = "profile_fetch_failed"
    REGISTRATION_INCOMPLETE = "registration_incomplete"
    ALREADY_REGISTERED = "already_registered"
    VALIDATION_FAILED = "validation_failed"
    SUBMIT_FAILED = "submit_failed"
    TICKET_LOAD_FAILED = "ticket_load_failed"
    DOCUMENT_GENERATION_FAILED = "document_generation_failed"


_REDIRECT_KINDS = {
    FailureKind.SESSION_ABSENT,
    FailureKind.PROFILE_FETCH_FAILED,
    FailureKind.REGISTRATION_INCOMPLETE,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    data: T = None


@dataclass(frozen=True)
class Fail:
    kind: FailureKind
    message: str = ""
    field_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def redirects_to_entry(self) -> bool:
        return self.kind in _REDIRECT_KINDS

    @property
    def carries_message(self) -> bool:
        # session absence redirects silently
        return self.redirects_to_entry and self.kind is not FailureKind.SESSION_ABSENT

    @property
    def terminates_session(self) -> bool:
        return self.kind is FailureKind.PROFILE_FETCH_FAILED


Result = Union[Ok[T], Fail]
