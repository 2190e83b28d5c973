from typing import Dict, Optional

MAX_GUESTS = 2

GUEST_COUNT_ERROR = "Number of guests must be between 0 and 2."
GUARDIAN_REQUIRED_ERROR = "Guardian name is required"


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def validate_registration(guest_count: Optional[int], guardian1: Optional[str],
                          guardian2: Optional[str]) -> Dict[str, str]:
    """
    Returns the field-level errors for a registration, keyed by wire field name.
    An empty dict means the registration may be submitted.
    """
    if guest_count is None or isinstance(guest_count, bool) or not 0 <= guest_count <= MAX_GUESTS:
        # guardian requirements depend on a valid count
        return {"guest_count": GUEST_COUNT_ERROR}

    errors = {}
    if guest_count >= 1 and _blank(guardian1):
        errors["guest_1_name"] = GUARDIAN_REQUIRED_ERROR
    if guest_count == 2 and _blank(guardian2):
        errors["guest_2_name"] = GUARDIAN_REQUIRED_ERROR
    return errors


def build_registration_payload(guest_count: int, guardian1: Optional[str],
                               guardian2: Optional[str]) -> dict:
    names = []
    for slot, value in enumerate((guardian1, guardian2), start=1):
        value = (value or "").strip()
        names.append(value if value and slot <= guest_count else None)
    return {
        "guest_count": guest_count,
        "guest_1_name": names[0],
        "guest_2_name": names[1],
    }
