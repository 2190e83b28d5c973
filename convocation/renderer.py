"""
Ticket screen controller.

Reads the issued pass back out of the store and turns it into the printable
ticket document.
"""
import logging
from typing import Callable, Optional

from PIL import Image
from pydantic import ValidationError

from .models import StudentProfile, TicketDocument, TicketRecord
from .results import Fail, FailureKind, Ok, Result
from .services.pdf_service import build_ticket_pdf, ticket_filename
from .services.qr_service import rasterize_qr_svg
from .services.store_client import StoreClient, StoreError
from .session import SessionContext

logger = logging.getLogger(__name__)

REQUIRED_TICKET_FIELDS = ("qrSvgString", "name", "email", "roll_no")

REGISTRATION_INCOMPLETE_MESSAGE = (
    "Registration incomplete or pass ID missing. Please register first or contact support."
)
INCOMPLETE_TICKET_MESSAGE = "Incomplete QR code data received from server."
MISSING_INFO_MESSAGE = "Cannot generate PDF: Missing required information."
GENERATION_FAILED_MESSAGE = "Failed to generate ticket. Please try again."


class TicketRenderer:

    def __init__(self, store: StoreClient,
                 rasterize: Optional[Callable[[str], Image.Image]] = None):
        self.store = store
        self.rasterize = rasterize or rasterize_qr_svg
        self.pass_id: Optional[str] = None
        self.ticket: Optional[TicketRecord] = None
        self.error: Optional[str] = None

    async def load(self, session: Optional[SessionContext]) -> Result[TicketRecord]:
        self.ticket = None
        self.error = None
        if session is None:
            return Fail(FailureKind.SESSION_ABSENT)

        try:
            profile = StudentProfile.model_validate(await self.store.get_student_info(session))
        except StoreError as e:
            return self._load_failed(e.message or "Failed to load your details. Please ensure you are registered.")
        except ValidationError:
            return self._load_failed("Failed to load your details. Please ensure you are registered.")

        if not profile.is_registered or not profile.pass_id:
            return Fail(FailureKind.REGISTRATION_INCOMPLETE, REGISTRATION_INCOMPLETE_MESSAGE)
        self.pass_id = profile.pass_id

        try:
            data = await self.store.get_qr(session, profile.pass_id)
        except StoreError as e:
            return self._load_failed(e.message)

        if any(not data.get(key) for key in REQUIRED_TICKET_FIELDS):
            return self._load_failed(INCOMPLETE_TICKET_MESSAGE)
        try:
            ticket = TicketRecord.model_validate(data)
        except ValidationError as e:
            logger.warning("Ticket payload for %s rejected: %s", profile.pass_id, e)
            return self._load_failed(INCOMPLETE_TICKET_MESSAGE)

        self.ticket = ticket
        return Ok(ticket)

    def _load_failed(self, message: str) -> Fail:
        logger.warning("Error fetching ticket data: %s", message)
        self.error = message
        return Fail(FailureKind.TICKET_LOAD_FAILED, message)

    def render_document(self) -> Result[TicketDocument]:
        ticket = self.ticket
        if ticket is None:
            self.error = MISSING_INFO_MESSAGE
            return Fail(FailureKind.DOCUMENT_GENERATION_FAILED, MISSING_INFO_MESSAGE)

        self.error = None
        try:
            qr_image = self.rasterize(ticket.qrSvgString)
            content = build_ticket_pdf(ticket, qr_image)
        except Exception:
            logger.exception("PDF generation failed for %s", ticket.roll_no)
            self.error = GENERATION_FAILED_MESSAGE
            return Fail(FailureKind.DOCUMENT_GENERATION_FAILED, GENERATION_FAILED_MESSAGE)

        return Ok(TicketDocument(filename=ticket_filename(ticket.roll_no), content=content))

    def screen(self) -> dict:
        ticket = self.ticket
        if ticket is None:
            return {"error": self.error, "ticket": None}
        return {
            "error": self.error,
            "welcome": f"Welcome, {ticket.name}!",
            "pass_id": self.pass_id,
            "qrSvgString": ticket.qrSvgString,
            "ticket": ticket.model_dump(exclude={"qrSvgString"}),
        }
