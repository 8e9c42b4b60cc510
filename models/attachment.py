"""
Match Attachments
-----------------
Files, links, or text attached to a match.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional, Tuple

from pydantic import BaseModel, model_validator

from .base import ChallongeModel, FormPairs, form_value

PREFIX = "match_attachment"


class Asset(BaseModel):
    """Uploaded file of an attachment."""
    file_name: Optional[str] = None
    content_type: Optional[str] = None  # MIME type
    file_size: Optional[int] = None
    url: Optional[str] = None


class Attachment(ChallongeModel):
    """Challonge match attachment."""

    ENVELOPE: ClassVar[str] = "match_attachment"

    id: int
    match_id: int
    user_id: Optional[int] = None
    description: Optional[str] = None
    url: Optional[str] = None
    original_file_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    asset: Asset = Asset()

    @model_validator(mode="before")
    @classmethod
    def _collect_asset(cls, data: Any) -> Any:
        # asset_* keys are flat in the payload
        if isinstance(data, dict) and "asset" not in data:
            data = dict(data)
            data["asset"] = {
                "file_name": data.pop("asset_file_name", None),
                "content_type": data.pop("asset_content_type", None),
                "file_size": data.pop("asset_file_size", None),
                "url": data.pop("asset_url", None),
            }
        return data


@dataclass
class AttachmentCreate:
    """
    Payload for creating or updating an attachment.

    At least one of asset, url or description must be given. Uploads are
    limited to 250KB (25MB for Premier accounts) and four per match; when
    an asset is provided the url is ignored by the service.
    """
    asset: Optional[bytes] = None
    asset_filename: str = "attachment"
    asset_content_type: str = "application/octet-stream"
    url: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if self.asset is None and self.url is None and self.description is None:
            raise ValueError("Attachment needs an asset, a url or a description")

    def to_params(self) -> FormPairs:
        params: FormPairs = []
        if self.url is not None:
            params.append((f"{PREFIX}[url]", form_value(self.url)))
        if self.description is not None:
            params.append((f"{PREFIX}[description]", form_value(self.description)))
        return params

    def to_files(self) -> Optional[Dict[str, Tuple[str, bytes, str]]]:
        """Multipart file part, or None when there is nothing to upload."""
        if self.asset is None:
            return None
        return {f"{PREFIX}[asset]": (self.asset_filename, self.asset, self.asset_content_type)}
