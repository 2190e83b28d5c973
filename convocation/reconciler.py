"""
Registration form controller.

Aligns the local draft with the authoritative profile, validates the draft and
submits it once. The profile is fetched fresh on every load.
"""
import logging
from enum import Enum
from typing import Optional, Union

from pydantic import ValidationError

from .draft import RegistrationDraft
from .models import StudentProfile
from .results import Fail, FailureKind, Ok, Result
from .services.store_client import StoreClient, StoreError
from .session import SessionContext, SingleFlight

logger = logging.getLogger(__name__)


class ScreenState(str, Enum):
    LOADING = "loading"
    UNREGISTERED = "unregistered"
    EDITING = "editing"
    SUBMITTING = "submitting"
    REGISTERED = "registered"
    REDIRECTED_TO_TICKET = "redirected_to_ticket"


class RegistrationReconciler:

    def __init__(self, store: StoreClient, guard: Optional[SingleFlight] = None):
        self.store = store
        self.guard = guard or SingleFlight()
        self.state = ScreenState.LOADING
        self.profile: Optional[StudentProfile] = None
        self.draft = RegistrationDraft()
        self.message: Optional[str] = None

    @property
    def already_registered(self) -> bool:
        return self.state in (ScreenState.REGISTERED, ScreenState.REDIRECTED_TO_TICKET)

    async def load(self, session: Optional[SessionContext]) -> Result[StudentProfile]:
        self.state = ScreenState.LOADING
        if session is None:
            return Fail(FailureKind.SESSION_ABSENT)

        try:
            data = await self.store.get_student_info(session)
            profile = StudentProfile.model_validate(data)
        except StoreError as e:
            logger.warning("Profile fetch failed: %s", e.message)
            return Fail(FailureKind.PROFILE_FETCH_FAILED, e.message)
        except ValidationError as e:
            logger.warning("Profile response could not be read: %s", e)
            return Fail(FailureKind.PROFILE_FETCH_FAILED, "Failed to fetch profile")

        self.profile = profile
        if profile.is_registered:
            self.draft = RegistrationDraft.from_profile(profile)
            self.state = ScreenState.REGISTERED
        else:
            self.draft = RegistrationDraft()
            self.state = ScreenState.UNREGISTERED
        return Ok(profile)

    # ---------------- Draft Edits ----------------
    def set_guest_count(self, value: Union[int, str, None]):
        self.draft.set_guest_count(value)
        self._editing()

    def set_guardian(self, slot: int, value: Optional[str]):
        self.draft.set_guardian(slot, value)
        self._editing()

    def _editing(self):
        if self.state in (ScreenState.UNREGISTERED, ScreenState.EDITING):
            self.state = ScreenState.EDITING

    # ---------------- Submit ----------------
    async def submit(self, session: Optional[SessionContext]) -> Optional[Result[None]]:
        """
        Validates and submits the draft. Returns None without doing anything
        when a submit for the same session is still outstanding.
        """
        if self.state is ScreenState.LOADING or self.profile is None:
            return Fail(FailureKind.SUBMIT_FAILED, "Your details are still loading.")
        if self.already_registered:
            return Fail(FailureKind.ALREADY_REGISTERED, "You have already registered.")

        if session is not None and self.guard.busy(session.access_token):
            return None

        errors = self.draft.validate()
        if errors:
            self.state = ScreenState.EDITING
            return Fail(FailureKind.VALIDATION_FAILED, "Please correct the highlighted fields.", errors)

        if session is None:
            return Fail(FailureKind.SESSION_ABSENT)
        if not self.guard.acquire(session.access_token):
            return None

        self.state = ScreenState.SUBMITTING
        self.message = None
        try:
            await self.store.register_student(session, self.draft.payload())
        except StoreError as e:
            logger.info("Registration rejected for %s: %s", self.profile.roll_no, e.message)
            self.state = ScreenState.EDITING
            self.message = e.message
            return Fail(FailureKind.SUBMIT_FAILED, e.message)
        finally:
            self.guard.release(session.access_token)

        logger.info("Registered %s with %s guest(s)", self.profile.roll_no, self.draft.guest_count)
        self.state = ScreenState.REDIRECTED_TO_TICKET
        return Ok()

    def screen(self) -> dict:
        profile = self.profile or StudentProfile()
        return {
            "state": self.state.value,
            "profile": {
                "name": profile.name,
                "programme": profile.programme,
                "year_of_passing": profile.year_of_passing,
                "email": profile.email,
                "roll_no": profile.roll_no,
            },
            "draft": self.draft.as_dict(),
            "can_submit": self.state in (ScreenState.UNREGISTERED, ScreenState.EDITING),
            "message": self.message,
        }
