"""FastAPI dependencies for authentication and upload handling."""

import secrets
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from fastapi import Header, HTTPException, Request, UploadFile, status

from api.logging import RequestLog
from api.models.responses import ErrorCodes
from core.config import INVOICE_API_KEY, MAX_UPLOAD_SIZE_BYTES, SUPPORTED_INPUT_SUFFIXES


def error_detail(error: str, code: str, details: list[str] | None = None) -> dict:
    """Standard error body used as HTTPException detail."""
    return {"error": error, "code": code, "details": details or []}


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 500 if no key is configured, 401 if the key does not match
    """
    if not INVOICE_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("API key not configured on server", ErrorCodes.INTERNAL_ERROR),
        )

    # Constant-time comparison
    if not secrets.compare_digest(x_api_key, INVOICE_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail("Invalid or missing API key", ErrorCodes.UNAUTHORIZED),
        )

    return x_api_key


@contextmanager
def uploaded_file_path(content: bytes, suffix: str) -> Iterator[Path]:
    """
    Write an upload to a temporary file and yield its path.

    The booking plan readers need a real file; the file is removed afterwards.
    """
    # delete=False with explicit cleanup so the file can be reopened by path
    tmp = tempfile.NamedTemporaryFile(suffix=suffix, delete=False)
    tmp_path = Path(tmp.name)
    try:
        tmp.write(content)
        tmp.flush()
        tmp.close()
        yield tmp_path
    finally:
        tmp.close()
        tmp_path.unlink(missing_ok=True)


async def read_booking_plan_upload(file: UploadFile, request_log: RequestLog) -> bytes:
    """
    Validate and read an uploaded booking plan.

    Raises:
        HTTPException: 400 no file, 415 unsupported format, 413 too large
    """
    if not file or not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("No file provided", ErrorCodes.INVALID_REQUEST),
        )

    suffix = Path(file.filename).suffix.lower()
    if suffix not in SUPPORTED_INPUT_SUFFIXES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=error_detail(
                "File is not an Excel or Numbers booking plan",
                ErrorCodes.UNSUPPORTED_MEDIA_TYPE,
                [f"Received: {file.filename}"],
            ),
        )

    content = await file.read()
    request_log.file_size_bytes = len(content)

    if len(content) > MAX_UPLOAD_SIZE_BYTES:
        max_mb = MAX_UPLOAD_SIZE_BYTES // (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=error_detail(
                f"File exceeds maximum size of {max_mb} MB",
                ErrorCodes.FILE_TOO_LARGE,
                [f"File size: {len(content) / (1024 * 1024):.1f} MB"],
            ),
        )

    return content


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
