from pydantic import Field

from app.schemas.base import APIModel

class PinVerify(APIModel):
    pin: str = Field(..., min_length=1, max_length=64)
