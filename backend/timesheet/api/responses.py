"""Download response helpers shared by the export endpoints."""

from __future__ import annotations

from fastapi import Response

from timesheet.services.export import MEDIA_TYPES, ExportFormat


def download_response(content: bytes, export_format: ExportFormat, stem: str) -> Response:
    """Wrap an export document in an attachment response."""
    return Response(
        content=content,
        media_type=MEDIA_TYPES[export_format],
        headers={
            "Content-Disposition": f'attachment; filename="{stem}.{export_format}"',
        },
    )
