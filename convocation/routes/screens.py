import logging
from typing import Optional, Union
from urllib.parse import urlencode

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel

from dependencies import get_session, get_store_client
from ..entry import INSTRUCTIONS, route_entry
from ..reconciler import RegistrationReconciler
from ..renderer import TicketRenderer
from ..results import Fail, FailureKind
from ..services.store_client import StoreClient
from ..session import SessionContext, SingleFlight

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Screens"])

# one outstanding registration submit per session, across requests
submit_guard = SingleFlight()


class RegistrationForm(BaseModel):
    guest_count: Union[int, str, None] = None
    guest_1_name: Optional[str] = None
    guest_2_name: Optional[str] = None


def entry_redirect(fail: Fail) -> RedirectResponse:
    url = "/"
    if fail.carries_message and fail.message:
        url = "/?" + urlencode({"error": fail.message})
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


async def handle_redirect(fail: Fail, session: Optional[SessionContext], store: StoreClient) -> RedirectResponse:
    if fail.terminates_session and session is not None:
        await store.sign_out(session)
    return entry_redirect(fail)


# ---------------- Entry ----------------
@router.get("/")
async def entry_screen(
    error: Optional[str] = Query(None),
    session: Optional[SessionContext] = Depends(get_session),
    store: StoreClient = Depends(get_store_client),
):
    screen = {"title": "Convocation 2025", "instructions": INSTRUCTIONS, "error": error}
    # an error shown on entry stays until the student signs in again
    if error:
        return screen

    result = await route_entry(session, store)
    if isinstance(result, Fail):
        if session is not None:
            await store.sign_out(session)
        screen["error"] = result.message
        return screen
    if result.data:
        return RedirectResponse(result.data, status_code=status.HTTP_303_SEE_OTHER)
    return screen


# ---------------- Registration Form ----------------
@router.get("/form")
async def form_screen(
    session: Optional[SessionContext] = Depends(get_session),
    store: StoreClient = Depends(get_store_client),
):
    reconciler = RegistrationReconciler(store, guard=submit_guard)
    result = await reconciler.load(session)
    if isinstance(result, Fail):
        return await handle_redirect(result, session, store)
    return reconciler.screen()


@router.post("/form")
async def submit_form(
    form: RegistrationForm = Body(...),
    session: Optional[SessionContext] = Depends(get_session),
    store: StoreClient = Depends(get_store_client),
):
    reconciler = RegistrationReconciler(store, guard=submit_guard)
    loaded = await reconciler.load(session)
    if isinstance(loaded, Fail):
        return await handle_redirect(loaded, session, store)

    if reconciler.already_registered:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "You have already registered.", **reconciler.screen()},
        )

    # names first, so the count clears slots it does not cover
    reconciler.set_guardian(1, form.guest_1_name)
    reconciler.set_guardian(2, form.guest_2_name)
    reconciler.set_guest_count(form.guest_count)

    result = await reconciler.submit(session)
    if result is None:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "Your registration is already being submitted."},
        )
    if isinstance(result, Fail):
        if result.redirects_to_entry:
            return await handle_redirect(result, session, store)
        code = {
            FailureKind.VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
            FailureKind.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
        }.get(result.kind, status.HTTP_400_BAD_REQUEST)
        return JSONResponse(
            status_code=code,
            content={"error": result.message, "fields": result.field_errors, **reconciler.screen()},
        )
    return RedirectResponse("/your-ticket", status_code=status.HTTP_303_SEE_OTHER)


# ---------------- Ticket ----------------
@router.get("/your-ticket")
async def ticket_screen(
    session: Optional[SessionContext] = Depends(get_session),
    store: StoreClient = Depends(get_store_client),
):
    renderer = TicketRenderer(store)
    result = await renderer.load(session)
    if isinstance(result, Fail):
        if result.redirects_to_entry:
            return await handle_redirect(result, session, store)
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=renderer.screen())
    return renderer.screen()


@router.get("/your-ticket/download")
async def download_ticket(
    session: Optional[SessionContext] = Depends(get_session),
    store: StoreClient = Depends(get_store_client),
):
    renderer = TicketRenderer(store)
    loaded = await renderer.load(session)
    if isinstance(loaded, Fail):
        if loaded.redirects_to_entry:
            return await handle_redirect(loaded, session, store)
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=renderer.screen())

    result = renderer.render_document()
    if isinstance(result, Fail):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"retryable": True, **renderer.screen()},
        )

    document = result.data
    # the student is done once the ticket is saved
    await store.sign_out(session)
    logger.info("Ticket %s downloaded", document.filename)
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )
