import logging
from typing import Any, BinaryIO, Dict, List, Optional
from cache.poi_cache import PoiCache
from clients.s3_client import S3Client
from clients.supabase_client import SupabaseClient
from models.errors import (
    AuthenticationFailed,
    FetchFailed,
    NotFound,
    PartialDeleteFailure,
    PoiStoreError,
    ValidationFailed,
    WriteRejected,
)
from models.models import Poi, PoiFields, PoiPhoto
from utils.error_utils import BACKEND_ERRORS, translate_errors
from utils.geo import BoundingBox
from utils.storage_utils import (
    detect_content_type,
    is_image_type,
    make_photo_prefix,
    read_bytes,
    safe_filename,
)
from utils.validation import validate_poi_fields

logger = logging.getLogger(__name__)


class MutationCoordinator:
    """Admin writes against the store, reconciled into the PoiCache.

    The cache only changes after the backend confirms a write. When a
    multi-step write fails half way, the affected part of the cache is
    re-read or invalidated rather than patched by guesswork.
    """

    def __init__(
        self,
        supabase_client: SupabaseClient,
        s3_client: S3Client,
        poi_cache: PoiCache,
        bounds: BoundingBox,
    ):
        self.supabase_client = supabase_client
        self.s3_client = s3_client
        self.poi_cache = poi_cache
        self.bounds = bounds

    def _require_admin(self, action: str):
        profile = self.supabase_client.current_profile()
        if profile is None or not profile.is_admin:
            raise WriteRejected(f"{action} failed: admin sign-in required")

    # POIs

    def create_poi(self, fields: Dict[str, Any] | PoiFields) -> Poi:
        parsed = validate_poi_fields(fields, self.bounds)
        self._require_admin("Creating POI")
        with translate_errors(WriteRejected, "Creating POI"):
            row = self.supabase_client.insert_poi(parsed.to_row())
        poi = Poi.from_row(row)
        self.poi_cache.put_poi(poi)
        logger.info(f"Created POI {poi.id} ({poi.name})")
        return poi

    def update_poi(self, poi_id: str, fields: Dict[str, Any] | PoiFields) -> Poi:
        parsed = validate_poi_fields(fields, self.bounds)
        self._require_admin("Updating POI")
        with translate_errors(WriteRejected, "Updating POI"):
            row = self.supabase_client.update_poi(poi_id, parsed.to_row())
        if row is None:
            # row-level security filters an update to zero rows without an error
            with translate_errors(WriteRejected, "Updating POI"):
                still_there = self.supabase_client.fetch_poi(poi_id) is not None
            if still_there:
                raise WriteRejected(f"Updating POI {poi_id} failed: the server did not apply the change")
            self.poi_cache.remove_poi(poi_id)
            raise NotFound(f"POI {poi_id} no longer exists")
        poi = Poi.from_row(row)
        self.poi_cache.put_poi(poi)
        logger.info(f"Updated POI {poi.id} ({poi.name})")
        return poi

    def delete_poi(self, poi_id: str) -> None:
        """Delete a POI with its photos: binaries, then photo rows, then the POI row.

        Each step is idempotent, so re-running after a PartialDeleteFailure
        picks up where the failed attempt stopped.
        """
        self._require_admin("Deleting POI")
        with translate_errors(WriteRejected, "Deleting POI"):
            if self.supabase_client.fetch_poi(poi_id) is None:
                self.poi_cache.remove_poi(poi_id)
                raise NotFound(f"POI {poi_id} no longer exists")
            photos = self.supabase_client.fetch_photos(poi_id)

        paths = [row["storage_url"] for row in photos]
        if paths:
            # delete_objects raises only when no batch went through
            with translate_errors(WriteRejected, "Deleting photo files"):
                _, failed = self.s3_client.delete_objects(paths)
            if failed:
                self.poi_cache.invalidate()
                raise PartialDeleteFailure(
                    f"Deleting POI {poi_id} failed: {len(failed)} photo file(s) could not be removed",
                    orphaned_paths=sorted(failed),
                )

        completed: List[str] = ["photo_files"]
        try:
            self.supabase_client.delete_photos_for_poi(poi_id)
            completed.append("photo_rows")
            if not self.supabase_client.delete_poi(poi_id):
                self._confirm_poi_gone(poi_id, paths, completed)
            completed.append("poi_row")
        except BACKEND_ERRORS as e:
            self.poi_cache.invalidate()
            logger.warning(f"Deleting POI {poi_id} stopped after {completed}: {e}")
            raise PartialDeleteFailure(
                f"Deleting POI {poi_id} failed after: {', '.join(completed)}",
                completed=completed,
                cause=e,
            ) from e

        self.poi_cache.remove_poi(poi_id)
        logger.info(f"Deleted POI {poi_id} with {len(paths)} photo(s)")

    def _confirm_poi_gone(self, poi_id: str, paths: List[str], completed: List[str]):
        """A DELETE that matched nothing either lost a race or was filtered by RLS."""
        if self.supabase_client.fetch_poi(poi_id) is None:
            return
        self.poi_cache.invalidate()
        message = f"Deleting POI {poi_id} failed: the server kept the row"
        logger.warning(message)
        if not paths:
            raise WriteRejected(message)
        raise PartialDeleteFailure(message, completed=list(completed))

    # Photos

    def upload_photo(
        self,
        poi_id: str,
        file: BinaryIO,
        caption: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> PoiPhoto:
        name = filename or getattr(file, "name", "") or "photo"
        data = read_bytes(file)
        content_type = getattr(file, "type", None) or detect_content_type(name)
        errors = {}
        if not data:
            errors["file"] = "The selected file is empty."
        elif not is_image_type(content_type):
            errors["file"] = f"Only image files can be uploaded (got {content_type})."
        if errors:
            raise ValidationFailed(errors)
        self._require_admin("Uploading photo")

        key = make_photo_prefix(poi_id) + safe_filename(name, data)
        with translate_errors(WriteRejected, "Uploading photo"):
            self.s3_client.upload_bytes(key, data, content_type)

        row = {
            "poi_id": poi_id,
            "storage_url": key,
            "caption": (caption or "").strip() or None,
            "is_hero": False,
        }
        try:
            with translate_errors(WriteRejected, "Saving photo"):
                saved = self.supabase_client.insert_photo(row)
        except WriteRejected:
            self._remove_orphan(key)
            raise

        photo = PoiPhoto.model_validate(saved)
        self.poi_cache.put_photo(photo)
        logger.info(f"Uploaded photo {photo.id} for POI {poi_id}")
        return photo

    def _remove_orphan(self, key: str):
        try:
            self.s3_client.delete_object(key)
            logger.info(f"Removed orphaned upload {key}")
        except (*BACKEND_ERRORS, AuthenticationFailed) as e:
            logger.error(f"Orphaned upload left in storage: {key} ({e})")

    def set_hero_photo(self, poi_id: str, photo_id: str) -> PoiPhoto:
        self._require_admin("Setting hero photo")
        with translate_errors(WriteRejected, "Setting hero photo"):
            target = self.supabase_client.fetch_photo(photo_id)
        if target is None or str(target["poi_id"]) != str(poi_id):
            self.poi_cache.invalidate_photos(poi_id)
            raise NotFound(f"Photo {photo_id} does not belong to POI {poi_id}")

        with translate_errors(WriteRejected, "Clearing hero photo"):
            self.supabase_client.clear_hero(poi_id, photo_id)
        try:
            with translate_errors(WriteRejected, "Setting hero photo"):
                updated = self.supabase_client.set_hero(photo_id)
            if updated is None:
                raise NotFound(f"Photo {photo_id} no longer exists")
        except PoiStoreError:
            # siblings may already be cleared
            self._resync_photos(poi_id)
            raise

        hero = PoiPhoto.model_validate(updated)
        self.poi_cache.apply_hero(poi_id, hero)
        logger.info(f"Photo {photo_id} is now the hero of POI {poi_id}")
        return hero

    def _resync_photos(self, poi_id: str):
        try:
            self.poi_cache.load_photos(poi_id)
        except FetchFailed:
            # hero state of this POI is unknown until the next full load
            self.poi_cache.invalidate()
            logger.warning(f"Could not re-read photos for POI {poi_id}; dropped from cache")
            raise

    def delete_photo(self, photo_id: str) -> None:
        self._require_admin("Deleting photo")
        with translate_errors(WriteRejected, "Deleting photo"):
            row = self.supabase_client.fetch_photo(photo_id)
        if row is None:
            raise NotFound(f"Photo {photo_id} no longer exists")
        photo = PoiPhoto.model_validate(row)

        with translate_errors(WriteRejected, "Deleting photo file"):
            self.s3_client.delete_object(photo.storage_url)
        try:
            with translate_errors(PartialDeleteFailure, "Deleting photo record"):
                deleted = self.supabase_client.delete_photo(photo_id)
                if not deleted and self.supabase_client.fetch_photo(photo_id) is not None:
                    raise PartialDeleteFailure(
                        f"Deleting photo {photo_id} failed: the server kept the row"
                    )
        except PartialDeleteFailure as e:
            e.completed = ["photo_file"]
            self.poi_cache.invalidate_photos(photo.poi_id)
            raise

        self.poi_cache.remove_photo(photo.poi_id, photo_id)
        logger.info(f"Deleted photo {photo_id} of POI {photo.poi_id}")
