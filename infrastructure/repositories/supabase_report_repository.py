import logging
from typing import Optional

from infrastructure.supabase_api import RemoteServiceError, build_headers, send

log = logging.getLogger(__name__)


class SupabaseReportRepository:
    """`reports` table over PostgREST."""

    def __init__(self, url: str, anon_key: str):
        self.rest_url = f"{url.rstrip('/')}/rest/v1" if url else "/rest/v1"
        self.anon_key = anon_key

    def list_for_user(self, user_id: str, access_token: Optional[str] = None) -> list[dict]:
        resp = send(
            "GET",
            f"{self.rest_url}/reports",
            headers=build_headers(self.anon_key, access_token),
            params={"select": "*", "user_id": f"eq.{user_id}", "order": "created_at.desc"},
        )
        return resp.json()

    def insert(self, row: dict, access_token: Optional[str] = None) -> dict:
        """Insert one report and return the stored record."""
        resp = send(
            "POST",
            f"{self.rest_url}/reports",
            headers=build_headers(self.anon_key, access_token, {"Prefer": "return=representation"}),
            json=[row],
        )
        rows = resp.json()
        if not rows:
            raise RemoteServiceError("Insert returned no rows", status_code=resp.status_code)
        log.info(f"✅ Report {rows[0].get('id')} stored for user {row.get('user_id')}")
        return rows[0]
