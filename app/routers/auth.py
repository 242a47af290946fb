"""
Authentication router: a single shared PIN, no accounts or tokens.
"""
from fastapi import APIRouter

from app.schemas.auth import PinVerify
from app.schemas.stock import SuccessResponse
from app.security import check_pin

router = APIRouter(prefix="/auth", tags=["authentication"])

@router.post("/verify-pin", response_model=SuccessResponse)
def verify_pin(payload: PinVerify):
    """
    Check the shared PIN.
    401 {"detail": "Invalid PIN"} on mismatch.
    """
    check_pin(payload.pin)
    return SuccessResponse()
