"""Google Drive download proxy.

The browser hands over a Drive file id and the user's OAuth access token;
the file is fetched server-side and streamed back with a small, fixed set
of headers so upstream details do not leak to the client.
"""

import time
from urllib.parse import quote

import httpx
import structlog

from policyhub.config.settings import Settings
from policyhub.core.exceptions import DriveUnavailableError, DriveUpstreamError
from policyhub.core.logging import log_external_call

logger = structlog.get_logger()

FORWARDED_HEADERS = ("content-type", "content-disposition", "content-length")


def extract_error_details(response: httpx.Response) -> str:
    """Pull a human-readable error out of an already-read upstream response.

    Prefers ``error.message`` from a JSON body, then the raw text, then a
    generic message naming the status.
    """
    fallback = f"Google Drive API responded with status {response.status_code}."
    try:
        body = response.json()
    except ValueError:
        return response.text or fallback

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if error:
        return str(error)
    return response.text or fallback


def build_drive_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client shared by every download for the life of the app."""
    return httpx.AsyncClient(timeout=settings.GOOGLE_DRIVE_TIMEOUT_SECONDS)


def forwarded_headers(response: httpx.Response) -> dict[str, str]:
    """Select the upstream headers that are passed on to the client."""
    return {name: response.headers[name] for name in FORWARDED_HEADERS if name in response.headers}


class DriveProxy:
    """Fetches file content from the Google Drive API.

    The HTTP client is shared across requests and owned by the caller.
    No retries: a failed upstream call is reported straight back.
    """

    def __init__(self, client: httpx.AsyncClient, api_base: str):
        self.client = client
        self.api_base = api_base.rstrip("/")

    def file_url(self, file_id: str) -> str:
        return f"{self.api_base}/files/{quote(file_id, safe='')}"

    async def open_download(self, file_id: str, access_token: str) -> httpx.Response:
        """Start a streamed download of a Drive file.

        The returned response has not been read; the caller must close it
        once the body has been consumed.

        Raises:
            DriveUpstreamError: Drive answered with a non-success status
            DriveUnavailableError: The request could not be completed
        """
        request = self.client.build_request(
            "GET",
            self.file_url(file_id),
            params={"alt": "media"},
            headers={
                "Authorization": f"Bearer {access_token}",
                # Raw bytes are forwarded as-is, so they must not be compressed
                "Accept-Encoding": "identity",
            },
        )

        start = time.perf_counter()
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            log_external_call(
                logger,
                service="google_drive",
                operation="download",
                duration_ms=duration_ms,
                success=False,
                error=str(exc),
            )
            raise DriveUnavailableError(str(exc)) from exc

        duration_ms = (time.perf_counter() - start) * 1000

        if response.is_success:
            log_external_call(
                logger,
                service="google_drive",
                operation="download",
                duration_ms=duration_ms,
                success=True,
                status_code=response.status_code,
            )
            return response

        try:
            await response.aread()
        finally:
            await response.aclose()

        details = extract_error_details(response)
        log_external_call(
            logger,
            service="google_drive",
            operation="download",
            duration_ms=duration_ms,
            success=False,
            status_code=response.status_code,
            details=details,
        )
        raise DriveUpstreamError(response.status_code, details)
