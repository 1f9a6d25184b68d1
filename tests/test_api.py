"""Tests for the FastAPI application."""

from collections.abc import AsyncIterator
from datetime import datetime
from unittest.mock import patch

import httpx
import pytest
from fastapi import status

from spreadsheet_pdf.api import create_app, download_headers
from spreadsheet_pdf.models import ErrorDetail
from spreadsheet_pdf.utils.exceptions import ErrorCode

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture
async def client() -> AsyncIterator[httpx.AsyncClient]:
    """Create an async test client for the FastAPI application."""
    app = create_app()
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


def upload(content: bytes, filename: str = "people.xlsx") -> dict[str, tuple]:
    return {"file": (filename, content, XLSX_MEDIA_TYPE)}


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    async def test_health_check_returns_200(self, client: httpx.AsyncClient) -> None:
        """Test that health check returns 200 OK."""
        response = await client.get("/health")
        assert response.status_code == status.HTTP_200_OK

    async def test_health_check_response_body(
        self, client: httpx.AsyncClient
    ) -> None:
        """Test health check response structure."""
        data = (await client.get("/health")).json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        datetime.fromisoformat(data["timestamp"])

    async def test_request_id_is_generated(self, client: httpx.AsyncClient) -> None:
        """Test every response carries a request ID."""
        response = await client.get("/health")
        assert response.headers["X-Request-ID"]

    async def test_request_id_is_echoed(self, client: httpx.AsyncClient) -> None:
        """Test a caller supplied request ID is returned unchanged."""
        response = await client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"


class TestConvertEndpoint:
    """Tests for POST /convert-excel-to-pdf."""

    async def test_converts_workbook(
        self, client: httpx.AsyncClient, people_xlsx: bytes
    ) -> None:
        """Test a workbook upload returns a PDF download."""
        response = await client.post("/convert-excel-to-pdf", files=upload(people_xlsx))

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert (
            response.headers["content-disposition"]
            == "attachment; filename=people.pdf"
        )
        assert response.headers["cache-control"] == (
            "no-cache, no-store, must-revalidate"
        )
        assert response.headers["pragma"] == "no-cache"
        assert response.headers["expires"] == "0"

    async def test_converts_calendar_workbook(
        self, client: httpx.AsyncClient, calendar_xlsx: bytes
    ) -> None:
        """Test calendar workbooks convert as well."""
        response = await client.post(
            "/convert-excel-to-pdf", files=upload(calendar_xlsx, "calendar.xlsx")
        )

        assert response.status_code == status.HTTP_200_OK
        assert "filename=calendar.pdf" in response.headers["content-disposition"]

    async def test_empty_upload(self, client: httpx.AsyncClient) -> None:
        """Test an empty file is rejected before conversion."""
        response = await client.post("/convert-excel-to-pdf", files=upload(b""))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["error_code"] == "E1001"
        assert data["detail"] == "Uploaded file is empty"
        assert data["request_id"] == response.headers["X-Request-ID"]

    async def test_not_a_workbook(self, client: httpx.AsyncClient) -> None:
        """Test non-XLSX content is rejected."""
        response = await client.post(
            "/convert-excel-to-pdf", files=upload(b"name,age\nAna,30\n", "a.csv")
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["error_code"] == "E1003"
        assert data["details"]["filename"] == "a.csv"

    async def test_file_too_large(
        self, client: httpx.AsyncClient, people_xlsx: bytes
    ) -> None:
        """Test uploads above the size limit are rejected."""
        with patch("spreadsheet_pdf.api.settings.max_file_size_mb", 1):
            response = await client.post(
                "/convert-excel-to-pdf",
                files=upload(people_xlsx + b"\0" * (1024 * 1024)),
            )

        assert response.status_code == 413
        assert response.json()["error_code"] == "E1002"

    async def test_missing_file_field(self, client: httpx.AsyncClient) -> None:
        """Test a request without a file is a validation error."""
        response = await client.post("/convert-excel-to-pdf")
        assert response.status_code == 422

    async def test_unexpected_error_is_generic(self, people_xlsx: bytes) -> None:
        """Test unexpected failures return a structured 500."""
        transport = httpx.ASGITransport(app=create_app(), raise_app_exceptions=False)
        with patch(
            "spreadsheet_pdf.services.converter.WorkbookConverter.convert",
            side_effect=RuntimeError("boom"),
        ):
            async with httpx.AsyncClient(
                transport=transport, base_url="http://test"
            ) as client:
                response = await client.post(
                    "/convert-excel-to-pdf", files=upload(people_xlsx)
                )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error_code"] == "E9001"


class TestDownloadHeaders:
    """Tests for download_headers."""

    def test_latin1_name(self) -> None:
        """Test plain names are used as-is."""
        headers = download_headers("report.pdf")
        assert headers["Content-Disposition"] == "attachment; filename=report.pdf"

    def test_non_latin1_name(self) -> None:
        """Test other names get an RFC 5987 parameter."""
        disposition = download_headers("日程.pdf")["Content-Disposition"]
        assert "filename*=UTF-8''%E6%97%A5%E7%A8%8B.pdf" in disposition
        assert "filename=??.pdf" in disposition


class TestErrorDetail:
    """Tests for ErrorDetail.from_error_code."""

    def test_from_error_code(self) -> None:
        """Test the code enum is stored by value."""
        detail = ErrorDetail.from_error_code(
            ErrorCode.RENDER_FAILED,
            "PDF layout failed",
            details={"stage": "render"},
            request_id="req-1",
        )

        assert detail.model_dump(exclude_none=True) == {
            "detail": "PDF layout failed",
            "error_code": ErrorCode.RENDER_FAILED.value,
            "details": {"stage": "render"},
            "request_id": "req-1",
        }

    def test_optional_fields_are_omitted(self) -> None:
        """Test missing details and request id stay out of the body."""
        detail = ErrorDetail.from_error_code(ErrorCode.INTERNAL_ERROR, "boom")
        assert detail.model_dump(exclude_none=True) == {
            "detail": "boom",
            "error_code": "E9001",
        }
