"""Google Drive download proxy endpoint."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError
from starlette.background import BackgroundTask

from policyhub.api.dependencies import get_drive_proxy
from policyhub.api.schemas.drive import DriveDownloadRequest
from policyhub.api.schemas.errors import DriveErrorResponse
from policyhub.core.exceptions import DriveUnavailableError, DriveUpstreamError
from policyhub.core.logging import log_exception
from policyhub.drive.proxy import DriveProxy, forwarded_headers

logger = structlog.get_logger()

router = APIRouter(prefix="/google-drive", tags=["google-drive"])


def _drive_error(status_code: int, error: str, details) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=DriveErrorResponse(error=error, details=details).model_dump(mode="json"),
    )


@router.post("/download", summary="Download a Google Drive file")
async def download_file(
    request: Request,
    proxy: Annotated[DriveProxy, Depends(get_drive_proxy)],
) -> Response:
    """Stream a Drive file back to the caller.

    The access token travels in the body; no session is needed. Upstream
    failures are mirrored with their status code.
    """
    try:
        payload = await request.json()
        body = DriveDownloadRequest.model_validate(payload)
    except ValidationError as exc:
        return _drive_error(
            400,
            "Invalid input",
            [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in exc.errors()
            ],
        )
    except ValueError:
        return _drive_error(400, "Invalid input", "Request body must be a JSON object.")

    logger.info("drive_download_requested", file_id=body.file_id)

    try:
        upstream = await proxy.open_download(body.file_id, body.access_token)
    except DriveUpstreamError as exc:
        return _drive_error(
            exc.status_code, "Failed to download file from Google Drive.", exc.details
        )
    except DriveUnavailableError as exc:
        log_exception(logger, exc, file_id=body.file_id)
        return _drive_error(
            500, "An internal server error occurred.", "Failed to reach Google Drive."
        )

    return StreamingResponse(
        upstream.aiter_bytes(),
        status_code=200,
        headers=forwarded_headers(upstream),
        background=BackgroundTask(upstream.aclose),
    )
