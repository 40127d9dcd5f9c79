import logging
from typing import Optional

from infrastructure.supabase_api import build_headers, send

log = logging.getLogger(__name__)


class SupabaseStorage:
    def __init__(self, url: str, anon_key: str):
        self.storage_url = f"{url.rstrip('/')}/storage/v1" if url else "/storage/v1"
        self.anon_key = anon_key

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        access_token: Optional[str] = None,
    ) -> None:
        headers = build_headers(self.anon_key, access_token, {"Content-Type": content_type})
        # Raw body upload; the object is stored byte for byte.
        send("POST", f"{self.storage_url}/object/{bucket}/{path}", headers=headers, data=content)
        log.info(f"✅ Uploaded {len(content)} bytes to {bucket}/{path}")

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.storage_url}/object/public/{bucket}/{path}"
