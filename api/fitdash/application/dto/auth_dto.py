"""
DTOs de autenticacion y sesion.
"""
from typing import Optional

from pydantic import BaseModel, Field


class LoginRequestDTO(BaseModel):
    """Credenciales de login (email o id de usuario)."""
    
    identifier: str = Field(..., min_length=1, description="Email o id del usuario")
    password: str = Field(..., min_length=1)


class RegisterRequestDTO(BaseModel):
    """Alta de cuenta. Queda PENDING hasta que un admin la apruebe."""
    
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[str] = Field("CLIENT", description="CLIENT o PT (solicitud de PT)")


class SessionUserDTO(BaseModel):
    id: str
    role: str
    email: Optional[str] = None
    name: Optional[str] = None


class LoginResponseDTO(BaseModel):
    ok: bool = True
    user: SessionUserDTO
    access_token: str
    token_type: str = "bearer"


class MeResponseDTO(BaseModel):
    ok: bool = True
    user: SessionUserDTO
    billing_access: bool = False
