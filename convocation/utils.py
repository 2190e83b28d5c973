import uuid

from . import config


def normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_pass_id() -> str:
    # short, non-guessable token
    token = uuid.uuid4().hex[:6].upper()
    return f"{config.EVENT_CODE}-{token}"
