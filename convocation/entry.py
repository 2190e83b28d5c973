import logging
from typing import Optional

from pydantic import ValidationError

from .models import StudentProfile
from .results import Fail, FailureKind, Ok, Result
from .services.store_client import StoreClient, StoreError
from .session import SessionContext

logger = logging.getLogger(__name__)

FORM_PATH = "/form"
TICKET_PATH = "/your-ticket"

INSTRUCTIONS = [
    "Students must register using their registered e-mail ID.",
    "All fields fetched from the database will be read-only and disabled.",
    "Students are required to enter the number of accompanying parents and their names. "
    "(Parents must carry a valid ID card for entry.)",
    "Upon successful registration, a QR code and PDF ticket will be generated.",
    "Carrying a soft or hard copy of the ticket is mandatory for entry into the campus and the event.",
]


async def route_entry(session: Optional[SessionContext], store: StoreClient) -> Result[Optional[str]]:
    """Where a signed-in student goes from the entry screen. Ok(None) means stay."""
    if session is None:
        return Ok(None)

    try:
        profile = StudentProfile.model_validate(await store.get_student_info(session))
    except StoreError as e:
        logger.info("Verification failed on entry: %s", e.message)
        return Fail(FailureKind.PROFILE_FETCH_FAILED, e.message or "Verification failed. Please try again.")
    except ValidationError:
        return Fail(FailureKind.PROFILE_FETCH_FAILED, "Verification failed. Please try again.")

    return Ok(TICKET_PATH if profile.is_registered else FORM_PATH)
