from typing import Dict, Optional, Union

from .models import StudentProfile
from .validation import build_registration_payload, validate_registration


class DraftLockedError(RuntimeError):
    pass


class RegistrationDraft:
    """In-memory registration input, discarded when the form screen goes away."""

    def __init__(self):
        self.guest_count: Optional[int] = None
        self.guardian1 = ""
        self.guardian2 = ""
        self.errors: Dict[str, str] = {}
        self.locked = False

    @classmethod
    def from_profile(cls, profile: StudentProfile) -> "RegistrationDraft":
        draft = cls()
        draft.guest_count = profile.guest_count if profile.guest_count is not None else 0
        draft.guardian1 = profile.guardian1 or ""
        draft.guardian2 = profile.guardian2 or ""
        draft.lock()
        return draft

    def lock(self):
        self.locked = True

    def _check_editable(self):
        if self.locked:
            raise DraftLockedError("Registration is already submitted and cannot be changed.")

    def set_guest_count(self, value: Union[int, str, None]):
        self._check_editable()
        if value is None or value == "":
            count = None
        else:
            try:
                count = int(value)
            except (TypeError, ValueError):
                count = None

        self.guest_count = count
        self.errors.pop("guest_count", None)

        # slots past the new count must not keep stale names
        if count is None or count <= 0:
            self._clear_slot(1)
            self._clear_slot(2)
        elif count == 1:
            self._clear_slot(2)

    def set_guardian(self, slot: int, value: Optional[str]):
        self._check_editable()
        if slot == 1:
            self.guardian1 = value or ""
        elif slot == 2:
            self.guardian2 = value or ""
        else:
            raise ValueError(f"Unknown guardian slot: {slot}")
        self.errors.pop(f"guest_{slot}_name", None)

    def _clear_slot(self, slot: int):
        setattr(self, f"guardian{slot}", "")
        self.errors.pop(f"guest_{slot}_name", None)

    def validate(self) -> Dict[str, str]:
        self.errors = validate_registration(self.guest_count, self.guardian1, self.guardian2)
        return dict(self.errors)

    def payload(self) -> dict:
        return build_registration_payload(self.guest_count, self.guardian1, self.guardian2)

    def as_dict(self) -> dict:
        return {
            "guest_count": self.guest_count,
            "guest_1_name": self.guardian1,
            "guest_2_name": self.guardian2,
            "errors": dict(self.errors),
            "read_only": self.locked,
        }
