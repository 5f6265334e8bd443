"""
Usuario de la sesion actual.

Se reconstruye en cada peticion a partir del token o de las cookies
heredadas. Nunca se persiste desde aqui.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fitdash.shared.constants.roles import Role


@dataclass(frozen=True)
class SessionUser:
    """Identidad minima que necesitan los guards y los loaders."""
    
    id: str
    role: Role
    email: Optional[str] = None
    name: Optional[str] = None
    
    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
    
    @property
    def is_pt(self) -> bool:
        return self.role is Role.PT
    
    @property
    def is_client(self) -> bool:
        return self.role is Role.CLIENT
    
    @property
    def display_name(self) -> str:
        return self.name or self.email or self.id
    
    def to_claims(self) -> Dict[str, Any]:
        """Claims del token de sesion."""
        return {
            "sub": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
        }
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
        }
