# Store functions: profile lookup, registration and ticket/QR lookup

import logging

from fastapi import APIRouter, Depends, Query, status
from supabase import Client

from dependencies import get_current_student_email, get_supabase
from .. import config
from ..errors import FunctionError
from ..models import RegistrationRequest
from ..services.qr_service import make_qr_svg
from ..utils import generate_pass_id
from ..validation import build_registration_payload, validate_registration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["Store Functions"])


def _student_by_email(supabase: Client, email: str) -> dict:
    res = supabase.table(config.STUDENTS_TABLE).select("*").eq("email", email).execute()
    student = res.data[0] if res.data else None
    if not student:
        raise FunctionError(status.HTTP_404_NOT_FOUND, "No student record found for this email.")
    return student


@router.post("/get-student-info-by-auth")
def get_student_info(
    email: str = Depends(get_current_student_email),
    supabase: Client = Depends(get_supabase),
):
    student = _student_by_email(supabase, email)
    info = {
        "name": student.get("name"),
        "email": student.get("email"),
        "roll_no": student.get("roll_no"),
        "programme": student.get("programme"),
        "year_of_passing": student.get("year_of_passing"),
        "is_registered": bool(student.get("is_registered")),
    }
    if info["is_registered"]:
        info.update({
            "guest_count": student.get("guest_count") or 0,
            "guardian1": student.get("guest_1_name"),
            "guardian2": student.get("guest_2_name"),
            "pass_id": student.get("pass_id"),
        })
    return info


@router.post("/register-student-by-auth")
def register_student(
    data: RegistrationRequest,
    email: str = Depends(get_current_student_email),
    supabase: Client = Depends(get_supabase),
):
    # same rules as the form; the form check is only a shortcut
    errors = validate_registration(data.guest_count, data.guest_1_name, data.guest_2_name)
    if errors:
        raise FunctionError(status.HTTP_400_BAD_REQUEST, next(iter(errors.values())), errors)

    student = _student_by_email(supabase, email)
    if student.get("is_registered"):
        raise FunctionError(status.HTTP_409_CONFLICT, "You have already registered.")

    pass_id = generate_pass_id()
    update = build_registration_payload(data.guest_count, data.guest_1_name, data.guest_2_name)
    update.update({"is_registered": True, "pass_id": pass_id})

    result = (
        supabase.table(config.STUDENTS_TABLE)
        .update(update)
        .eq("email", email)
        # a NULL flag counts as not registered
        .or_("is_registered.is.null,is_registered.eq.false")
        .execute()
    )
    if not result.data:
        # lost a race with another submission
        raise FunctionError(status.HTTP_409_CONFLICT, "You have already registered.")

    logger.info("Issued pass %s to %s", pass_id, student.get("roll_no"))
    return {"message": "Registration successful.", "pass_id": pass_id}


@router.get("/get-qr")
def get_qr(
    pass_id: str = Query(...),
    email: str = Depends(get_current_student_email),
    supabase: Client = Depends(get_supabase),
):
    res = (
        supabase.table(config.STUDENTS_TABLE)
        .select("*")
        .eq("pass_id", pass_id)
        .eq("email", email)
        .execute()
    )
    student = res.data[0] if res.data else None
    if not student or not student.get("is_registered"):
        raise FunctionError(status.HTTP_404_NOT_FOUND, "Pass not found.")

    return {
        "qrSvgString": make_qr_svg(pass_id),
        "name": student.get("name"),
        "email": student.get("email"),
        "roll_no": student.get("roll_no"),
        "guest_1_name": student.get("guest_1_name"),
        "guest_2_name": student.get("guest_2_name"),
        "programme": student.get("programme"),
        "year_of_passing": student.get("year_of_passing"),
    }
