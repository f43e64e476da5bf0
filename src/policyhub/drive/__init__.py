"""Google Drive integration."""

from policyhub.drive.proxy import (
    DriveProxy,
    build_drive_client,
    extract_error_details,
    forwarded_headers,
)

__all__ = ["DriveProxy", "build_drive_client", "extract_error_details", "forwarded_headers"]
