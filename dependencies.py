from typing import AsyncIterator, Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from supabase import create_client, Client

from convocation import config
from convocation.errors import FunctionError
from convocation.services.store_client import StoreClient
from convocation.session import SessionContext
from convocation.utils import normalize_email

ALGORITHM = "HS256"
AUDIENCE = "authenticated"

# Bearer token of the identity session; absence is not an error here
bearer_scheme = HTTPBearer(auto_error=False)


# Supabase client
def get_supabase() -> Client:
    return create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)


# Store client used by the screens
async def get_store_client() -> AsyncIterator[StoreClient]:
    store = StoreClient()
    try:
        yield store
    finally:
        await store.aclose()


def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[SessionContext]:
    if credentials is None or not credentials.credentials:
        return None
    return SessionContext(access_token=credentials.credentials)


# Caller of a store function, identified by the access token's email claim
def get_current_student_email(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise FunctionError(status.HTTP_401_UNAUTHORIZED, "Missing authorization header")
    try:
        payload = jwt.decode(
            credentials.credentials,
            config.SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=AUDIENCE,
        )
    except JWTError:
        raise FunctionError(status.HTTP_401_UNAUTHORIZED, "Invalid or expired session")

    email = payload.get("email")
    if not email:
        raise FunctionError(status.HTTP_401_UNAUTHORIZED, "Session has no email address")
    return normalize_email(email)
