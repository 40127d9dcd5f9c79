from typing import Optional

from infrastructure.supabase_api import build_headers, send


class SupabaseProfileRepository:
    """`profiles` table over PostgREST."""

    def __init__(self, url: str, anon_key: str):
        self.rest_url = f"{url.rstrip('/')}/rest/v1" if url else "/rest/v1"
        self.anon_key = anon_key

    def get(self, user_id: str, access_token: Optional[str] = None) -> Optional[dict]:
        resp = send(
            "GET",
            f"{self.rest_url}/profiles",
            headers=build_headers(self.anon_key, access_token),
            params={"select": "name,phone,avatar_url", "id": f"eq.{user_id}", "limit": 1},
        )
        rows = resp.json()
        return rows[0] if rows else None

    def insert(self, row: dict, access_token: Optional[str] = None) -> None:
        send(
            "POST",
            f"{self.rest_url}/profiles",
            headers=build_headers(self.anon_key, access_token, {"Prefer": "return=minimal"}),
            json=[row],
        )

    def upsert(self, row: dict, access_token: Optional[str] = None) -> None:
        send(
            "POST",
            f"{self.rest_url}/profiles",
            headers=build_headers(
                self.anon_key,
                access_token,
                {"Prefer": "resolution=merge-duplicates,return=minimal"},
            ),
            params={"on_conflict": "id"},
            json=[row],
        )
