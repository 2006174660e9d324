import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from pydantic import ValidationError

logger = logging.getLogger(__name__)

class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last-resort translation of uncaught errors into JSON responses.

    Routes raise HTTPException for expected failures; those never get here.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)

        except ValidationError as ve:
            return JSONResponse(
                status_code=422,
                content={
                    "success": False,
                    "error": {
                        "code": "VALIDATION_ERROR",
                        "message": str(ve),
                        "details": ve.errors(include_url=False)
                    }
                },
            )

        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": {
                        "code": "INTERNAL_ERROR",
                        "message": "An internal error occurred."
                    }
                },
            )
