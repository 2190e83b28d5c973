from typing import Optional
from pydantic import BaseModel, field_validator


def _as_text(value):
    # roll numbers and years come back as numbers from some store rows
    if value is None or isinstance(value, str):
        return value
    return str(value)


class StudentProfile(BaseModel):
    name: str = ""
    email: str = ""
    roll_no: str = ""
    programme: str = ""
    year_of_passing: str = ""
    is_registered: bool = False
    guest_count: Optional[int] = None
    guardian1: Optional[str] = None
    guardian2: Optional[str] = None
    pass_id: Optional[str] = None

    @field_validator("name", "email", "roll_no", "programme", "year_of_passing", mode="before")
    @classmethod
    def _identity_text(cls, value):
        value = _as_text(value)
        return "" if value is None else value


class RegistrationRequest(BaseModel):
    guest_count: Optional[int] = None
    guest_1_name: Optional[str] = None
    guest_2_name: Optional[str] = None


class TicketRecord(BaseModel):
    qrSvgString: str
    name: str
    email: str
    roll_no: str
    guest_1_name: Optional[str] = None
    guest_2_name: Optional[str] = None
    programme: Optional[str] = None
    year_of_passing: Optional[str] = None

    @field_validator("roll_no", "year_of_passing", mode="before")
    @classmethod
    def _numeric_text(cls, value):
        return _as_text(value)


class TicketDocument(BaseModel):
    filename: str
    content: bytes
