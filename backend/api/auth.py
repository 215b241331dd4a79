"""
Auth API endpoints
"""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import Optional

from core.models import Identity
from backend.api.projects import get_sessions

router = APIRouter()


class SignUpRequest(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None


class SignInRequest(BaseModel):
    email: str
    password: str


class IdentityResponse(BaseModel):
    id: str
    email: str

    @classmethod
    def from_identity(cls, identity: Identity):
        return cls(id=identity.id, email=identity.email)


@router.post("/sign-up", response_model=IdentityResponse)
async def sign_up(request: SignUpRequest):
    """Register and sign in."""
    identity = get_sessions().sign_up(request.email, request.password, request.full_name)
    return IdentityResponse.from_identity(identity)


@router.post("/sign-in", response_model=IdentityResponse)
async def sign_in(request: SignInRequest):
    identity = get_sessions().sign_in(request.email, request.password)
    return IdentityResponse.from_identity(identity)


@router.post("/sign-out")
async def sign_out():
    get_sessions().sign_out()
    return {"status": "signed_out"}


@router.get("/me", response_model=Optional[IdentityResponse])
async def me():
    """The signed-in identity, or null."""
    identity = get_sessions().current_identity()
    if identity is None:
        return None
    return IdentityResponse.from_identity(identity)
