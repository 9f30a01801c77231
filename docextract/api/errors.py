from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docextract.auth.exceptions import AuthenticationError
from docextract.database.exceptions import DocumentNotFoundError
from docextract.documents.exceptions import DocumentValidationError, StorageError
from docextract.logging.logger import Log


def _error(status_code: int, error: str, message: str = "") -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


async def _authentication_error(_request: Request, exc: AuthenticationError) -> JSONResponse:
    return _error(401, "Unauthorized", str(exc))


async def _not_found(_request: Request, _exc: DocumentNotFoundError) -> JSONResponse:
    return _error(404, "NotFound", "Document not found")


async def _validation_error(_request: Request, exc: DocumentValidationError) -> JSONResponse:
    return _error(400, exc.code, str(exc))


async def _storage_error(request: Request, exc: StorageError) -> JSONResponse:
    Log.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return _error(500, "StorageError", "The document could not be stored")


async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    Log.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
    return _error(500, "InternalError", "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Map domain exceptions to HTTP responses; raw exception text never leaks for 5xx."""
    app.add_exception_handler(AuthenticationError, _authentication_error)
    app.add_exception_handler(DocumentNotFoundError, _not_found)
    app.add_exception_handler(DocumentValidationError, _validation_error)
    app.add_exception_handler(StorageError, _storage_error)
    app.add_exception_handler(Exception, _unhandled)
