"""Google Drive proxy schemas."""

from pydantic import Field

from policyhub.api.schemas.base import CamelModel


class DriveDownloadRequest(CamelModel):
    file_id: str = Field(..., min_length=1, description="Google Drive file id")
    access_token: str = Field(..., min_length=1, description="User's OAuth access token")
