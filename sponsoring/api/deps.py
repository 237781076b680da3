# sponsoring/api/deps.py
from typing import Optional

from fastapi import Depends, HTTPException, status, Security
from fastapi.security import OAuth2PasswordBearer, APIKeyHeader
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from sponsoring import crud
from sponsoring.core.config import settings
from sponsoring.core.email import EmailService, get_email_service
from sponsoring.models.sponsorship import Sponsorship
from sponsoring.schemas.token import TokenPayload


# The `tokenUrl` doesn't have to be a real endpoint in this service,
# it's just for the OpenAPI documentation.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def get_current_user(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])
        token_data = TokenPayload(**payload)
    except (JWTError, ValueError):
        # Catches any error from jose or Pydantic validation
        raise credentials_exception

    return token_data


def require_org_member(org_id: str, current_user: TokenPayload) -> None:
    """Raise 403 unless the caller belongs to `org_id`."""
    if current_user.org_id != org_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")


# Define the header we expect the key to be in
api_key_header = APIKeyHeader(name="X-Internal-Api-Key", auto_error=False)


def get_internal_api_key(api_key: str = Security(api_key_header)) -> str:
    """
    Checks for and validates the internal API key from the request header.
    """
    if api_key == settings.INTERNAL_API_KEY:
        return api_key
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing Internal API Key",
    )


def get_email() -> Optional[EmailService]:
    """The configured email service, None when sponsor emails are disabled."""
    return get_email_service()


def get_sponsorship_for_org(db: Session, org_id: str, sponsorship_id: str) -> Sponsorship:
    """Load a sponsorship with its sponsor and package, 404 unless it belongs to `org_id`."""
    item = crud.sponsorship.get_with_details(db, sponsorship_id=sponsorship_id)
    if not item or not item.sponsor or item.sponsor.organization_id != org_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sponsorship not found")
    return item
