import os
from dataclasses import dataclass

from utils.load_secrets import load_env_vars


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_anon_key: str
    storage_bucket: str
    storage_s3_endpoint: str
    storage_s3_region: str
    storage_s3_access_key_id: str
    signed_url_ttl_seconds: int
    log_level: str

    def __init__(self):
        load_env_vars()
        supabase_url = os.getenv("SUPABASE_URL", "").strip().rstrip("/")
        object.__setattr__(self, "supabase_url", supabase_url)
        object.__setattr__(
            self, "supabase_anon_key", os.getenv("SUPABASE_ANON_KEY", "").strip()
        )
        object.__setattr__(
            self, "storage_bucket", os.getenv("STORAGE_BUCKET", "poi-photos").strip()
        )
        object.__setattr__(
            self,
            "storage_s3_endpoint",
            os.getenv(
                "STORAGE_S3_ENDPOINT",
                f"{supabase_url}/storage/v1/s3" if supabase_url else "",
            ).strip(),
        )
        object.__setattr__(
            self, "storage_s3_region", os.getenv("STORAGE_S3_REGION", "us-east-1").strip()
        )
        # Supabase S3 session auth: access key id is the project ref
        object.__setattr__(
            self,
            "storage_s3_access_key_id",
            os.getenv("STORAGE_S3_ACCESS_KEY_ID", "").strip(),
        )
        object.__setattr__(
            self,
            "signed_url_ttl_seconds",
            int(os.getenv("SIGNED_URL_TTL_SECONDS", "3600").strip()),
        )
        object.__setattr__(self, "log_level", os.getenv("LOG_LEVEL", "INFO").strip())


SETTINGS = Settings()
