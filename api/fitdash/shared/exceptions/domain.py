"""
Excepciones relacionadas con la lógica de dominio.
"""
from typing import Any

from fitdash.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepción base para errores de dominio."""
    
    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details
        )


class EntityNotFoundException(DomainException):
    """Excepción cuando no se encuentra una entidad."""
    
    def __init__(self, entity_name: str, entity_id: Any):
        super().__init__(
            message=f"{entity_name} con ID {entity_id} no encontrado",
            error_code="ENTITY_NOT_FOUND",
            details={"entity": entity_name, "id": str(entity_id)}
        )
        self.status_code = 404


class EntityAlreadyExistsException(DomainException):
    """Excepción cuando una entidad ya existe."""
    
    def __init__(self, entity_name: str, field: str, value: Any):
        super().__init__(
            message=f"{entity_name} con {field}={value} ya existe",
            error_code="ENTITY_ALREADY_EXISTS",
            details={"entity": entity_name, "field": field, "value": str(value)}
        )
        self.status_code = 409


class ValidationException(DomainException):
    """Excepción para errores de validación (campo requerido ausente, etc)."""
    
    def __init__(self, message: str, field: str = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class UpstreamFailureException(AppException):
    """
    Excepcion cuando falla el backend de almacenamiento.
    Los endpoints estrictos la propagan como 500; los dashboards
    la absorben y responden con el fallback.
    """
    
    def __init__(self, operation: str, reason: str = ""):
        super().__init__(
            message=f"Error de almacenamiento durante '{operation}'",
            status_code=500,
            error_code="UPSTREAM_FAILURE",
            details={"operation": operation, "reason": reason} if reason else {"operation": operation}
        )
