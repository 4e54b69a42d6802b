"""SQLite request log of the invoice API."""

import sqlite3
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from core.config import DB_PATH

DETAIL_TYPES = ("validation_error", "block_processed", "warning")

# Columns of api_requests, in insert order (RequestLog attribute names)
REQUEST_COLUMNS = (
    "request_id",
    "timestamp",
    "endpoint",
    "method",
    "client_ip",
    "file_size_bytes",
    "file_name",
    "customer_name",
    "invoice_date_override",
    "status_code",
    "error_code",
    "error_message",
    "processing_time_ms",
    "blocks_generated",
    "gross_total",
)


@dataclass
class RequestLog:
    """Captured request/response data for one API call."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    endpoint: str = ""
    method: str = "POST"
    client_ip: str | None = None
    file_size_bytes: int | None = None
    file_name: str | None = None
    customer_name: str | None = None
    invoice_date_override: str | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    blocks_generated: int | None = None
    gross_total: str | None = None  # Decimal as string
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)

    def add_detail(self, detail_type: str, message: str) -> None:
        if detail_type not in DETAIL_TYPES:
            raise ValueError(f"Unknown detail type: {detail_type}")
        self.details.append((detail_type, message))


def log_request(log: RequestLog, db_path: Path | None = None) -> None:
    """Insert the request row and its detail rows."""
    placeholders = ", ".join("?" for _ in REQUEST_COLUMNS)
    conn = sqlite3.connect(db_path or DB_PATH)
    try:
        conn.execute(
            f"INSERT INTO api_requests ({', '.join(REQUEST_COLUMNS)}) VALUES ({placeholders})",
            [getattr(log, column) for column in REQUEST_COLUMNS],
        )
        conn.executemany(
            "INSERT INTO api_request_details (request_id, detail_type, message) VALUES (?, ?, ?)",
            [(log.request_id, detail_type, message) for detail_type, message in log.details],
        )
        conn.commit()
    finally:
        conn.close()


def write_request_log(log: RequestLog, start_time: float) -> None:
    """Stamp the processing time and store the log; a failed write is only printed."""
    log.processing_time_ms = int((time.time() - start_time) * 1000)
    try:
        log_request(log)
    except sqlite3.Error as e:
        print(f"Request logging failed: {e}")
