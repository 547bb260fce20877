import logging
from enum import Enum
from typing import Dict, List, Optional
from clients.supabase_client import SupabaseClient
from models.errors import FetchFailed
from models.models import Poi, PoiPhoto
from utils.error_utils import translate_errors

logger = logging.getLogger(__name__)


class CacheStatus(Enum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"
    FAILED = "failed"


def order_photos(photos: List[PoiPhoto]) -> List[PoiPhoto]:
    """Hero first, then captioned photos by caption, then the rest in insertion order."""
    return sorted(
        photos,
        key=lambda p: (not p.is_hero, not p.caption, (p.caption or "").casefold()),
    )


class PoiCache:
    """In-memory snapshot of the POIs (and their photos) visible to the session.

    Reads go through `load` / `load_photos`. Only the MutationCoordinator
    calls the mutation entry points below the divider.
    """

    def __init__(self, supabase_client: SupabaseClient):
        self.supabase_client = supabase_client
        self._pois: Dict[str, Poi] = {}
        self._photos: Dict[str, List[PoiPhoto]] = {}
        self.status = CacheStatus.EMPTY

    def load(self) -> List[Poi]:
        try:
            with translate_errors(FetchFailed, "Loading POIs"):
                rows = self.supabase_client.fetch_pois_with_hero()
        except FetchFailed:
            self._clear()
            self.status = CacheStatus.FAILED
            raise
        pois = [Poi.from_row(row) for row in rows]
        self._pois = {poi.id: poi for poi in sorted(pois, key=lambda p: p.name.casefold())}
        self._photos = {}
        self.status = CacheStatus.FRESH
        logger.info(f"Loaded {len(self._pois)} POI(s)")
        return self.get_all()

    def load_photos(self, poi_id: str) -> List[PoiPhoto]:
        try:
            with translate_errors(FetchFailed, "Loading photos"):
                rows = self.supabase_client.fetch_photos(poi_id)
        except FetchFailed:
            self._photos.pop(poi_id, None)
            raise
        photos = [PoiPhoto.model_validate(row) for row in rows]
        self.set_photos(poi_id, photos)
        return self.photos_for(poi_id) or []

    def get_all(self) -> List[Poi]:
        return list(self._pois.values())

    def get(self, poi_id: str) -> Optional[Poi]:
        return self._pois.get(poi_id)

    def photos_for(self, poi_id: str) -> Optional[List[PoiPhoto]]:
        photos = self._photos.get(poi_id)
        return list(photos) if photos is not None else None

    @property
    def is_fresh(self) -> bool:
        return self.status == CacheStatus.FRESH

    def _clear(self):
        self._pois = {}
        self._photos = {}

    # -- mutation entry points (MutationCoordinator only) --

    def put_poi(self, poi: Poi):
        existing = self._pois.get(poi.id)
        if existing is not None and poi.hero_photo is None:
            poi = poi.model_copy(update={"hero_photo": existing.hero_photo})
        self._pois[poi.id] = poi
        self._pois = dict(sorted(self._pois.items(), key=lambda kv: kv[1].name.casefold()))

    def remove_poi(self, poi_id: str):
        self._pois.pop(poi_id, None)
        self._photos.pop(poi_id, None)

    def set_photos(self, poi_id: str, photos: List[PoiPhoto]):
        """Replace a POI's photo list and re-derive its hero in one step."""
        ordered = order_photos(photos)
        self._photos[poi_id] = ordered
        poi = self._pois.get(poi_id)
        if poi is not None:
            hero = next((p for p in ordered if p.is_hero), None)
            self._pois[poi_id] = poi.model_copy(update={"hero_photo": hero})

    def put_photo(self, photo: PoiPhoto):
        photos = self._photos.get(photo.poi_id)
        if photos is None:
            # gallery not loaded yet; it will be fetched on demand
            return
        self.set_photos(
            photo.poi_id, [p for p in photos if p.id != photo.id] + [photo]
        )

    def apply_hero(self, poi_id: str, hero: PoiPhoto):
        """Make `hero` the only hero of its POI, siblings cleared in the same step."""
        photos = self._photos.get(poi_id)
        if photos is not None:
            self.set_photos(
                poi_id,
                [
                    p.model_copy(update={"is_hero": False})
                    for p in photos
                    if p.id != hero.id
                ]
                + [hero],
            )
            return
        poi = self._pois.get(poi_id)
        if poi is not None:
            self._pois[poi_id] = poi.model_copy(update={"hero_photo": hero})

    def remove_photo(self, poi_id: str, photo_id: str):
        photos = self._photos.get(poi_id)
        if photos is not None:
            self.set_photos(poi_id, [p for p in photos if p.id != photo_id])
            return
        poi = self._pois.get(poi_id)
        if poi is not None and poi.hero_photo and poi.hero_photo.id == photo_id:
            self._pois[poi_id] = poi.model_copy(update={"hero_photo": None})

    def invalidate(self):
        self.status = CacheStatus.STALE
        logger.info("POI snapshot invalidated; reload required")

    def invalidate_photos(self, poi_id: str):
        self._photos.pop(poi_id, None)
