"""Customer listing and detail endpoints."""

import asyncio
import time
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from api.dependencies import (
    get_client_ip,
    read_booking_plan_upload,
    uploaded_file_path,
    verify_api_key,
)
from api.errors import record_http_error, service_error_to_http
from api.logging import RequestLog, write_request_log
from api.models.responses import CustomerDetailResponse, CustomerListResponse, CustomerSummary
from core.errors import NoBookingsError
from models.bookings import CustomerRecord, RowRef, TimeBlock
from services.blocks import compress_bookings
from services.spreadsheet import list_customers, read_customer, sorted_customer_names

router = APIRouter(prefix="/v1")


def _list_in_thread(content: bytes, suffix: str) -> dict[str, list[RowRef]]:
    with uploaded_file_path(content, suffix) as path:
        return list_customers(path)


def _detail_in_thread(
    content: bytes, suffix: str, customer: str
) -> tuple[CustomerRecord, list[TimeBlock]]:
    with uploaded_file_path(content, suffix) as path:
        # An unknown customer is answered with 404 below
        record = read_customer(path, customer, warn=False)
    return record, compress_bookings(record.bookings)


@router.post("/customers", response_model=CustomerListResponse)
async def list_customers_endpoint(
    request: Request,
    file: Annotated[UploadFile, File(description="Booking plan (.xlsx or .numbers)")],
    _api_key: str = Depends(verify_api_key),
):
    """List all customer names of a booking plan, sorted case-insensitively."""
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/customers",
        method="POST",
        client_ip=get_client_ip(request),
        file_name=file.filename,
    )

    try:
        content = await read_booking_plan_upload(file, request_log)
        grouped = await asyncio.to_thread(
            _list_in_thread, content, Path(file.filename).suffix.lower()
        )

        request_log.status_code = 200
        return CustomerListResponse(
            customers=[
                CustomerSummary(name=name, occurrences=len(grouped[name]))
                for name in sorted_customer_names(grouped)
            ]
        )

    except HTTPException as e:
        record_http_error(request_log, e)
        raise

    except Exception as e:
        raise service_error_to_http(e, request_log) from e

    finally:
        write_request_log(request_log, start_time)


@router.post("/customers/detail", response_model=CustomerDetailResponse)
async def customer_detail_endpoint(
    request: Request,
    file: Annotated[UploadFile, File(description="Booking plan (.xlsx or .numbers)")],
    customer: Annotated[str, Form(description="Customer name as in the Name column")],
    _api_key: str = Depends(verify_api_key),
):
    """Return contact data, single bookings and merged blocks of one customer."""
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/customers/detail",
        method="POST",
        client_ip=get_client_ip(request),
        file_name=file.filename,
        customer_name=customer,
    )

    try:
        content = await read_booking_plan_upload(file, request_log)
        record, blocks = await asyncio.to_thread(
            _detail_in_thread, content, Path(file.filename).suffix.lower(), customer
        )
        if not record.bookings:
            raise NoBookingsError(f"No bookings found for customer '{customer}'")

        request_log.status_code = 200
        request_log.blocks_generated = len(blocks)
        return CustomerDetailResponse.from_customer(record, blocks)

    except HTTPException as e:
        record_http_error(request_log, e)
        raise

    except Exception as e:
        raise service_error_to_http(e, request_log) from e

    finally:
        write_request_log(request_log, start_time)
