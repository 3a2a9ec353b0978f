"""Image uploads to Cloudinary.

Files are sent as base64 data URIs, so nothing is written to local disk.
"""
import base64
import logging
import os
from typing import Dict, Optional

import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
from dotenv import load_dotenv

from article_publisher.errors import MissingFileError, PayloadTooLargeError, UploadError

load_dotenv()

logger = logging.getLogger(__name__)

UPLOAD_FOLDER = "rbiomeds_articles"
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class CloudinaryGateway:
    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = UPLOAD_FOLDER,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    @classmethod
    def from_env(cls) -> "CloudinaryGateway":
        # Values pasted into dashboards often carry stray whitespace.
        return cls(
            cloud_name=(os.getenv("CLOUDINARY_CLOUD_NAME") or "").strip(),
            api_key=(os.getenv("CLOUDINARY_API_KEY") or "").strip(),
            api_secret=(os.getenv("CLOUDINARY_API_SECRET") or "").strip(),
        )

    def describe(self) -> Dict[str, object]:
        """Configuration summary that is safe to log."""
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "secret_length": len(self.api_secret),
        }

    def upload(self, file_bytes: Optional[bytes], mime_type: Optional[str]) -> str:
        """Upload one image and return its public HTTPS URL.

        Raises MissingFileError when no file was given, PayloadTooLargeError
        above ``MAX_UPLOAD_BYTES`` and UploadError for anything Cloudinary
        reports. Size is checked before Cloudinary is contacted.
        """
        if file_bytes is None:
            raise MissingFileError("Please upload a file")
        if len(file_bytes) > MAX_UPLOAD_BYTES:
            raise PayloadTooLargeError(
                f"File is {len(file_bytes)} bytes, limit is {MAX_UPLOAD_BYTES}"
            )

        encoded = base64.b64encode(file_bytes).decode("ascii")
        data_uri = f"data:{mime_type or 'application/octet-stream'};base64,{encoded}"
        try:
            result = cloudinary.uploader.upload(data_uri, folder=self.folder)
        except cloudinary.exceptions.Error as e:
            raise UploadError(str(e)) from e

        secure_url = result.get("secure_url")
        if not secure_url:
            raise UploadError("Cloudinary response has no secure_url")
        logger.info("Upload successful: %s", secure_url)
        return secure_url

    def ping(self) -> dict:
        """Check that the credentials are accepted by the admin API."""
        try:
            return dict(cloudinary.api.ping())
        except cloudinary.exceptions.Error as e:
            raise UploadError(str(e)) from e
