import logging
from typing import Any, Dict, List, Optional
from supabase import AuthError, Client, create_client
from config.config import SETTINGS
from models.errors import AuthenticationFailed
from models.models import Profile
from utils.constants import PHOTOS_TABLE, POIS_TABLE, PROFILES_TABLE
from utils.error_utils import translate_errors

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, display_name, is_admin"
POI_COLUMNS = (
    "id, name, lat, lng, visited_date, notes, trail_name, "
    "distance_miles, elevation_gain_ft, difficulty"
)
PHOTO_COLUMNS = "id, poi_id, storage_url, caption, is_hero"


class SupabaseClient:
    """Session-scoped access to Supabase Auth and the POI tables.

    Table methods return plain row dicts and let postgrest/httpx errors
    propagate; callers classify them.
    """

    def __init__(self, client: Client | None = None):
        if client is None:
            assert SETTINGS.supabase_url, "SUPABASE_URL not found."
            assert SETTINGS.supabase_anon_key, "SUPABASE_ANON_KEY not found."
            client = create_client(SETTINGS.supabase_url, SETTINGS.supabase_anon_key)
        self.client = client
        self.profile: Optional[Profile] = None

    # Auth

    def sign_in(self, email: str, password: str) -> Profile:
        try:
            resp: Any = self.client.auth.sign_in_with_password(
                {"email": email.strip(), "password": password}
            )
        except AuthError as e:
            logger.info(f"Sign-in rejected for {email.strip()}")
            raise AuthenticationFailed("Sign-in rejected", cause=e) from e
        if not resp.user:
            raise AuthenticationFailed("Sign-in returned no user")

        with translate_errors(AuthenticationFailed, "Loading profile"):
            profile = self.fetch_profile(resp.user.id)
        if profile is None:
            self.client.auth.sign_out()
            raise AuthenticationFailed("No profile is provisioned for this account")
        self.profile = profile
        logger.info(f"Signed in {profile.display_name or profile.id} (admin={profile.is_admin})")
        return profile

    def sign_out(self):
        self.profile = None
        self.client.auth.sign_out()

    def current_profile(self) -> Optional[Profile]:
        return self.profile

    def access_token(self) -> Optional[str]:
        session = self.client.auth.get_session()
        return session.access_token if session else None

    def fetch_profile(self, user_id: str) -> Optional[Profile]:
        resp = (
            self.client.table(PROFILES_TABLE)
            .select(PROFILE_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        return Profile.model_validate(resp.data[0]) if resp.data else None

    # POIs

    def fetch_pois_with_hero(self) -> List[Dict[str, Any]]:
        resp = (
            self.client.table(POIS_TABLE)
            .select(f"{POI_COLUMNS}, {PHOTOS_TABLE}({PHOTO_COLUMNS})")
            .eq(f"{PHOTOS_TABLE}.is_hero", "true")
            .order("name")
            .execute()
        )
        return resp.data or []

    def fetch_poi(self, poi_id: str) -> Optional[Dict[str, Any]]:
        resp = (
            self.client.table(POIS_TABLE)
            .select(POI_COLUMNS)
            .eq("id", poi_id)
            .limit(1)
            .execute()
        )
        return resp.data[0] if resp.data else None

    def insert_poi(self, row: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.client.table(POIS_TABLE).insert(row).execute()
        return resp.data[0]

    def update_poi(self, poi_id: str, row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        resp = self.client.table(POIS_TABLE).update(row).eq("id", poi_id).execute()
        return resp.data[0] if resp.data else None

    def delete_poi(self, poi_id: str) -> bool:
        resp = self.client.table(POIS_TABLE).delete().eq("id", poi_id).execute()
        return bool(resp.data)

    # Photos

    def fetch_photos(self, poi_id: str) -> List[Dict[str, Any]]:
        resp = (
            self.client.table(PHOTOS_TABLE)
            .select(PHOTO_COLUMNS)
            .eq("poi_id", poi_id)
            .order("id")
            .execute()
        )
        return resp.data or []

    def fetch_photo(self, photo_id: str) -> Optional[Dict[str, Any]]:
        resp = (
            self.client.table(PHOTOS_TABLE)
            .select(PHOTO_COLUMNS)
            .eq("id", photo_id)
            .limit(1)
            .execute()
        )
        return resp.data[0] if resp.data else None

    def insert_photo(self, row: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.client.table(PHOTOS_TABLE).insert(row).execute()
        return resp.data[0]

    def clear_hero(self, poi_id: str, keep_photo_id: str) -> None:
        (
            self.client.table(PHOTOS_TABLE)
            .update({"is_hero": False})
            .eq("poi_id", poi_id)
            .neq("id", keep_photo_id)
            .execute()
        )

    def set_hero(self, photo_id: str) -> Optional[Dict[str, Any]]:
        resp = (
            self.client.table(PHOTOS_TABLE)
            .update({"is_hero": True})
            .eq("id", photo_id)
            .execute()
        )
        return resp.data[0] if resp.data else None

    def delete_photo(self, photo_id: str) -> bool:
        resp = self.client.table(PHOTOS_TABLE).delete().eq("id", photo_id).execute()
        return bool(resp.data)

    def delete_photos_for_poi(self, poi_id: str) -> None:
        self.client.table(PHOTOS_TABLE).delete().eq("poi_id", poi_id).execute()
