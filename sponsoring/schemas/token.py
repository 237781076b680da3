# sponsoring/schemas/token.py
from pydantic import BaseModel, Field
from typing import Optional


class TokenPayload(BaseModel):
    sub: str  # "sub" is the standard claim for subject (user ID)
    # Parsed from the 'orgId' claim of platform-issued tokens
    org_id: Optional[str] = Field(default=None, alias="orgId")
    exp: int  # Standard claim for expiration time

    model_config = {
        "populate_by_name": True,  # Allow populating by alias
        "from_attributes": True,
    }
