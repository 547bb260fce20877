import boto3
import io
import logging
import streamlit as st
from typing import Callable, Dict, List, Optional, Tuple
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from config.config import SETTINGS
from models.errors import AuthenticationFailed

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most this many keys per request
DELETE_BATCH_SIZE = 1000


@st.cache_resource(show_spinner=False, max_entries=32)
def _get_s3_client(endpoint: str, region: str, access_key_id: str, session_token: str):
    return boto3.client(
        "s3",
        endpoint_url=endpoint,
        region_name=region,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=SETTINGS.supabase_anon_key,
        aws_session_token=session_token,
        config=Config(s3={"addressing_style": "path"}, signature_version="s3v4"),
    )


class S3Client:
    """Photo binaries in the Supabase Storage bucket via its S3 endpoint.

    Requests are signed with the signed-in user's session token so storage
    policies (admin-only write) apply exactly as they do for the browser.
    """

    def __init__(
        self,
        token_provider: Callable[[], Optional[str]],
        bucket: str | None = None,
        s3=None,
    ):
        self.bucket = bucket or SETTINGS.storage_bucket
        assert self.bucket, "Storage bucket not found."
        self.token_provider = token_provider
        self._s3 = s3

    @property
    def s3(self):
        if self._s3 is not None:
            return self._s3
        token = self.token_provider()
        if not token:
            raise AuthenticationFailed("Storage request failed: no signed-in session")
        return _get_s3_client(
            SETTINGS.storage_s3_endpoint,
            SETTINGS.storage_s3_region,
            SETTINGS.storage_s3_access_key_id,
            token,
        )

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> str:
        self.s3.upload_fileobj(
            Fileobj=io.BytesIO(data),
            Bucket=self.bucket,
            Key=key,
            ExtraArgs={"ContentType": content_type},
        )
        logger.info(f"Uploaded {len(data)} bytes to {self.bucket}/{key}")
        return key

    def delete_object(self, key: str) -> None:
        self.s3.delete_object(Bucket=self.bucket, Key=key)
        logger.info(f"Deleted {self.bucket}/{key}")

    def delete_objects(self, keys: List[str]) -> Tuple[List[str], Dict[str, str]]:
        """Bulk delete; returns (deleted keys, {failed key: error code}).

        A request error is raised only while nothing has been deleted yet.
        Once a batch has gone through, a failing batch and every batch after
        it are reported as failed keys instead.
        """
        deleted: List[str] = []
        failed: Dict[str, str] = {}
        for i in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[i : i + DELETE_BATCH_SIZE]
            try:
                resp = self.s3.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": False},
                )
            except (ClientError, BotoCoreError) as e:
                if not deleted:
                    raise
                if isinstance(e, ClientError):
                    code = e.response.get("Error", {}).get("Code", "Unknown")
                else:
                    code = type(e).__name__
                failed.update((k, code) for k in keys[i:])
                break
            deleted.extend(d["Key"] for d in resp.get("Deleted", []))
            for err in resp.get("Errors", []):
                failed[err["Key"]] = err.get("Code", "Unknown")
        if failed:
            logger.warning(f"Could not delete {len(failed)} object(s): {sorted(failed)}")
        return deleted, failed

    def get_url(self, key: str) -> str:
        return self.s3.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=SETTINGS.signed_url_ttl_seconds,
        )
