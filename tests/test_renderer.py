from __future__ import annotations

import pytest
from PIL import Image

from conftest import (
    PROFILE_PATH,
    QR_PATH,
    RecordingStore,
    blank_qr,
    registered_profile,
    ticket_payload,
    unregistered_profile,
)
from convocation.renderer import (
    GENERATION_FAILED_MESSAGE,
    INCOMPLETE_TICKET_MESSAGE,
    MISSING_INFO_MESSAGE,
    TicketRenderer,
)
from convocation.results import Fail, FailureKind, Ok
from convocation.services.qr_service import QrRasterError
from convocation.session import SessionContext

pytestmark = pytest.mark.anyio


def _store_with_ticket(store: RecordingStore, **ticket: object) -> RecordingStore:
    store.respond("POST", PROFILE_PATH, body=registered_profile())
    store.respond("GET", QR_PATH, body=ticket_payload(**ticket))
    return store


async def test_load_without_session_is_silent_redirect(store: RecordingStore) -> None:
    result = await TicketRenderer(store.client()).load(None)

    assert result == Fail(FailureKind.SESSION_ABSENT)
    assert store.calls == []


@pytest.mark.parametrize("profile", [
    unregistered_profile(),
    registered_profile(pass_id=None),
])
async def test_unissued_pass_redirects_with_message(
    store: RecordingStore, session: SessionContext, profile: dict
) -> None:
    store.respond("POST", PROFILE_PATH, body=profile)

    result = await TicketRenderer(store.client()).load(session)

    assert isinstance(result, Fail)
    assert result.kind is FailureKind.REGISTRATION_INCOMPLETE
    assert result.carries_message and not result.terminates_session
    assert QR_PATH not in store.paths()


async def test_load_fetches_qr_for_pass(store: RecordingStore, session: SessionContext) -> None:
    renderer = TicketRenderer(_store_with_ticket(store).client())

    result = await renderer.load(session)

    assert isinstance(result, Ok)
    assert result.data.roll_no == "CUK21MSC014"
    assert store.paths() == [PROFILE_PATH, QR_PATH]
    assert store.calls[1].url.params["pass_id"] == "CUK25-A1B2C3"
    assert renderer.screen()["welcome"] == "Welcome, Asha Nair!"


@pytest.mark.parametrize("missing", ["qrSvgString", "name", "email", "roll_no"])
async def test_ticket_missing_required_field_is_invalid(
    store: RecordingStore, session: SessionContext, missing: str
) -> None:
    payload = ticket_payload()
    del payload[missing]
    store.respond("POST", PROFILE_PATH, body=registered_profile())
    store.respond("GET", QR_PATH, body=payload)
    renderer = TicketRenderer(store.client(), rasterize=blank_qr)

    result = await renderer.load(session)

    assert result == Fail(FailureKind.TICKET_LOAD_FAILED, INCOMPLETE_TICKET_MESSAGE)
    assert renderer.ticket is None
    assert renderer.render_document() == Fail(FailureKind.DOCUMENT_GENERATION_FAILED, MISSING_INFO_MESSAGE)


@pytest.mark.parametrize("email", ["student@cuk", "a.b@college.local"])
async def test_any_present_email_is_accepted(
    store: RecordingStore, session: SessionContext, email: str
) -> None:
    renderer = TicketRenderer(_store_with_ticket(store, email=email).client(), rasterize=blank_qr)

    result = await renderer.load(session)

    assert isinstance(result, Ok)
    assert result.data.email == email


async def test_qr_lookup_error_is_shown_inline(store: RecordingStore, session: SessionContext) -> None:
    store.respond("POST", PROFILE_PATH, body=registered_profile())
    store.respond("GET", QR_PATH, 404, {"error": "Pass not found."})
    renderer = TicketRenderer(store.client())

    result = await renderer.load(session)

    assert result == Fail(FailureKind.TICKET_LOAD_FAILED, "Pass not found.")
    assert not result.redirects_to_entry
    assert renderer.screen() == {"error": "Pass not found.", "ticket": None}


async def test_render_document_names_file_after_roll_number(
    store: RecordingStore, session: SessionContext
) -> None:
    renderer = TicketRenderer(_store_with_ticket(store).client(), rasterize=blank_qr)
    await renderer.load(session)

    result = renderer.render_document()

    assert isinstance(result, Ok)
    assert result.data.filename == "CUK_Convocation_Ticket_CUK21MSC014.pdf"
    assert result.data.content.startswith(b"%PDF")


async def test_render_document_with_non_latin1_guardian(
    store: RecordingStore, session: SessionContext
) -> None:
    renderer = TicketRenderer(
        _store_with_ticket(store, guest_1_name="Mary D’Souza").client(), rasterize=blank_qr
    )
    await renderer.load(session)

    result = renderer.render_document()

    assert isinstance(result, Ok)
    assert renderer.error is None


async def test_generation_failure_keeps_screen_and_can_be_retried(
    store: RecordingStore, session: SessionContext
) -> None:
    attempts = []

    def flaky(svg: str) -> Image.Image:
        attempts.append(svg)
        if len(attempts) == 1:
            raise QrRasterError("cairo not available")
        return blank_qr(svg)

    renderer = TicketRenderer(_store_with_ticket(store).client(), rasterize=flaky)
    await renderer.load(session)

    first = renderer.render_document()

    assert first == Fail(FailureKind.DOCUMENT_GENERATION_FAILED, GENERATION_FAILED_MESSAGE)
    screen = renderer.screen()
    assert screen["error"] == GENERATION_FAILED_MESSAGE
    assert screen["welcome"] == "Welcome, Asha Nair!"
    assert screen["qrSvgString"]

    second = renderer.render_document()

    assert isinstance(second, Ok)
    assert renderer.error is None
