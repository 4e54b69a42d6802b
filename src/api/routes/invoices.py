"""Invoice generation endpoint."""

import asyncio
import time
from datetime import date, datetime
from pathlib import Path
from typing import Annotated
from urllib.parse import quote

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)
from fastapi.responses import Response

from api.dependencies import (
    error_detail,
    get_client_ip,
    read_booking_plan_upload,
    uploaded_file_path,
    verify_api_key,
)
from api.errors import record_http_error, service_error_to_http
from api.logging import RequestLog, write_request_log
from api.models.responses import ErrorCodes
from core import config
from services.invoices import InvoiceResult, generate_invoice_to_bytes

router = APIRouter(prefix="/v1")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def parse_invoice_date(date_str: str | None) -> date | None:
    """Parse invoice date string to date object."""
    if not date_str:
        return None
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                "Invalid invoice_date format",
                ErrorCodes.INVALID_REQUEST,
                ["Expected format: YYYY-MM-DD"],
            ),
        )


def _process_in_thread(
    file_content: bytes,
    suffix: str,
    customer: str,
    invoice_date: date | None,
) -> tuple[bytes, InvoiceResult]:
    """Write the upload to a temp file and run invoice generation on it."""
    with uploaded_file_path(file_content, suffix) as path:
        return generate_invoice_to_bytes(
            path, customer, invoice_date, template_path=config.TEMPLATE_PATH
        )


@router.post("/invoices/generate")
async def generate_invoice_endpoint(
    request: Request,
    file: Annotated[UploadFile, File(description="Booking plan (.xlsx or .numbers)")],
    customer: Annotated[str, Form(description="Customer name as in the Name column")],
    invoice_date: Annotated[
        str | None, Form(description="Override invoice date (YYYY-MM-DD)")
    ] = None,
    _api_key: str = Depends(verify_api_key),
):
    """
    Generate the invoice of one customer from an uploaded booking plan.

    Returns the filled Excel invoice as an attachment.
    """
    start_time = time.time()

    request_log = RequestLog(
        endpoint="/v1/invoices/generate",
        method="POST",
        client_ip=get_client_ip(request),
        file_name=file.filename,
        customer_name=customer,
        invoice_date_override=invoice_date,
    )

    try:
        if not config.TEMPLATE_PATH.is_file():
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=error_detail(
                    "Server configuration error",
                    ErrorCodes.INTERNAL_ERROR,
                    [f"Template file not found: {config.TEMPLATE_PATH}"],
                ),
            )

        content = await read_booking_plan_upload(file, request_log)
        parsed_date = parse_invoice_date(invoice_date)

        excel_bytes, result = await asyncio.to_thread(
            _process_in_thread,
            content,
            Path(file.filename).suffix.lower(),
            customer,
            parsed_date,
        )

        request_log.status_code = 200
        request_log.blocks_generated = len(result.blocks)
        request_log.gross_total = str(result.totals.gross)
        for warning in result.warnings:
            request_log.add_detail("warning", warning)
        for block in result.blocks:
            request_log.add_detail(
                "block_processed", f"{block.sheet_name} {block.court or '-'} {block.start}-{block.end}"
            )

        return Response(
            content=excel_bytes,
            media_type=XLSX_MEDIA_TYPE,
            headers={
                "Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.filename)}"
            },
        )

    except HTTPException as e:
        record_http_error(request_log, e)
        raise

    except Exception as e:
        raise service_error_to_http(e, request_log) from e

    finally:
        write_request_log(request_log, start_time)
