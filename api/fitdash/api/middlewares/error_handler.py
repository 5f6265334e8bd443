"""
Middleware de errores no manejados.

Cada peticion lleva un `x-request-id` (el del cliente o uno nuevo) que se
devuelve en la respuesta y aparece en el log junto al usuario de la sesion.
Las excepciones que escapan a los handlers de la app se convierten en un
500 `INTERNAL_SERVER_ERROR` con el cuerpo de error uniforme.
"""
import uuid

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger

from fitdash.infrastructure.security.session_resolver import session_resolver


REQUEST_ID_HEADER = "x-request-id"


class ErrorHandlerMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        try:
            response = await call_next(request)
        except Exception as exc:
            session = session_resolver.resolve(request)
            log = logger.bind(
                request_id=request_id,
                user_id=session.id if session else None,
                role=session.role.value if session else None,
            )
            # loguru interpreta las llaves del mensaje
            error_msg = str(exc).replace("{", "{{").replace("}", "}}")
            log.opt(exception=exc).error(
                f"[{request_id}] {request.method} {request.url.path} "
                f"usuario={session.id if session else '-'}: {exc.__class__.__name__}: {error_msg}"
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "ok": False,
                    "error": "INTERNAL_SERVER_ERROR",
                    "message": "Ha ocurrido un error interno del servidor",
                    "details": {"request_id": request_id},
                },
                headers={REQUEST_ID_HEADER: request_id},
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
