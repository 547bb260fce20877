import httpx
import pytest

from cache.poi_cache import CacheStatus
from fakes import api_error, client_error
from models.errors import (
    FetchFailed,
    NotFound,
    PartialDeleteFailure,
    ValidationFailed,
    WriteRejected,
)
from models.models import Difficulty


@pytest.fixture
def falls(coordinator, cache, falls_fields):
    cache.load()
    return coordinator.create_poi(falls_fields)


def _heroes(store, poi_id):
    return [p["id"] for p in store.photos.values() if p["poi_id"] == poi_id and p["is_hero"]]


# create / update


def test_create_poi_adds_to_cache(coordinator, cache, falls_fields):
    cache.load()
    poi = coordinator.create_poi(falls_fields)

    assert [p.name for p in cache.get_all()] == ["Cunningham Falls"]
    assert cache.get(poi.id).difficulty == Difficulty.MODERATE
    assert poi.hero_photo is None


def test_create_then_load_round_trips_fields(coordinator, cache, falls_fields):
    created = coordinator.create_poi(
        {**falls_fields, "trail_name": "Lower Trail", "distance_miles": 0.5, "notes": "Cold!"}
    )
    loaded = cache.load()

    assert len(loaded) == 1
    assert loaded[0].model_dump() == created.model_dump()


def test_create_outside_park_fails_before_network(coordinator, store, falls_fields):
    with pytest.raises(ValidationFailed) as exc:
        coordinator.create_poi({**falls_fields, "lat": 38.9})

    assert "lat" in exc.value.errors
    assert store.calls == []


def test_create_requires_admin(coordinator, store, member_profile, falls_fields):
    store.profile = member_profile
    with pytest.raises(WriteRejected):
        coordinator.create_poi(falls_fields)
    assert store.calls == []


def test_create_rejected_by_server(coordinator, store, cache, falls_fields):
    cache.load()
    store.fail_next("insert_poi", api_error("42501"))

    with pytest.raises(WriteRejected) as exc:
        coordinator.create_poi(falls_fields)

    assert "permission denied" in exc.value.message
    assert cache.get_all() == []


def test_update_poi_replaces_in_place_and_keeps_hero(coordinator, store, cache, falls, falls_fields):
    hero = store.seed_photo(falls.id, "pois/x/hero.jpg", is_hero=True)
    cache.load()

    updated = coordinator.update_poi(falls.id, {**falls_fields, "name": "Cunningham Falls (upper)"})

    assert updated.name == "Cunningham Falls (upper)"
    assert cache.get(falls.id).name == "Cunningham Falls (upper)"
    assert cache.get(falls.id).hero_photo.id == hero
    assert len(cache.get_all()) == 1


def test_update_missing_poi(coordinator, store, cache, falls, falls_fields):
    del store.pois[falls.id]
    with pytest.raises(NotFound):
        coordinator.update_poi(falls.id, falls_fields)
    assert cache.get(falls.id) is None


def test_update_filtered_by_server_keeps_poi(coordinator, store, cache, falls, falls_fields):
    store.silently_filtered.add("update_poi")

    with pytest.raises(WriteRejected):
        coordinator.update_poi(falls.id, {**falls_fields, "name": "Renamed"})

    assert cache.get(falls.id).name == "Cunningham Falls"
    assert store.pois[falls.id]["name"] == "Cunningham Falls"


def test_update_validates_first(coordinator, store, falls, falls_fields):
    store.calls.clear()
    with pytest.raises(ValidationFailed):
        coordinator.update_poi(falls.id, {**falls_fields, "name": ""})
    assert store.calls == []


# delete POI


def test_delete_poi_cascades(coordinator, store, s3, cache, falls, jpeg):
    coordinator.upload_photo(falls.id, jpeg(b"one"), filename="one.jpg")
    coordinator.upload_photo(falls.id, jpeg(b"two"), filename="two.jpg")

    coordinator.delete_poi(falls.id)

    assert cache.get(falls.id) is None
    assert s3.objects == {}
    reloaded = cache.load()
    assert all(p.id != falls.id for p in reloaded)
    assert not any(p["poi_id"] == falls.id for p in store.photos.values())


def test_delete_poi_kept_by_server_is_partial(coordinator, store, s3, cache, falls, jpeg):
    photo = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    store.silently_filtered.add("delete_poi")

    with pytest.raises(PartialDeleteFailure) as exc:
        coordinator.delete_poi(falls.id)

    assert exc.value.completed == ["photo_files", "photo_rows"]
    assert photo.storage_url not in s3.objects
    assert cache.status == CacheStatus.STALE
    assert [p.id for p in cache.load()] == [falls.id]


def test_delete_poi_without_photos_kept_by_server(coordinator, store, cache, falls):
    store.silently_filtered.add("delete_poi")

    with pytest.raises(WriteRejected):
        coordinator.delete_poi(falls.id)

    assert falls.id in store.pois
    assert cache.status == CacheStatus.STALE
    assert [p.id for p in cache.load()] == [falls.id]


def test_delete_poi_file_request_failure_changes_nothing(coordinator, store, s3, cache, falls, jpeg):
    photo = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    s3.fail_next("delete_objects", client_error("InternalError", "DeleteObjects"))

    with pytest.raises(WriteRejected):
        coordinator.delete_poi(falls.id)

    assert photo.storage_url in s3.objects
    assert photo.id in store.photos
    assert falls.id in store.pois
    assert cache.get(falls.id) is not None
    assert cache.status == CacheStatus.FRESH


def test_delete_missing_poi(coordinator, store, falls):
    del store.pois[falls.id]
    with pytest.raises(NotFound):
        coordinator.delete_poi(falls.id)


def test_delete_poi_partial_when_files_remain(coordinator, store, s3, cache, falls, jpeg):
    photo = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    s3.undeletable.add(photo.storage_url)

    with pytest.raises(PartialDeleteFailure) as exc:
        coordinator.delete_poi(falls.id)

    assert exc.value.orphaned_paths == [photo.storage_url]
    assert exc.value.completed == []
    # nothing guessed: rows untouched, cache must be reloaded
    assert falls.id in store.pois
    assert cache.status == CacheStatus.STALE


def test_delete_poi_partial_when_row_delete_fails(coordinator, store, s3, cache, falls, jpeg):
    coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    store.fail_next("delete_poi", httpx.ConnectError("offline"))

    with pytest.raises(PartialDeleteFailure) as exc:
        coordinator.delete_poi(falls.id)

    assert exc.value.completed == ["photo_files", "photo_rows"]
    assert exc.value.orphaned_paths == []
    assert cache.status == CacheStatus.STALE

    # re-running converges
    cache.load()
    coordinator.delete_poi(falls.id)
    assert cache.load() == []


# photos


def test_upload_photo(coordinator, store, s3, cache, falls, jpeg):
    cache.load_photos(falls.id)
    photo = coordinator.upload_photo(falls.id, jpeg(), caption="  Spray  ", filename="Falls.JPG")

    assert photo.storage_url.startswith(f"pois/{falls.id}/falls-")
    assert photo.storage_url in s3.objects
    assert photo.caption == "Spray"
    assert photo.is_hero is False
    assert [p.id for p in cache.photos_for(falls.id)] == [photo.id]


def test_upload_compensates_when_metadata_insert_fails(coordinator, store, s3, cache, falls, jpeg):
    cache.load_photos(falls.id)
    store.fail_next("insert_photo", api_error("42501"))

    with pytest.raises(WriteRejected):
        coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")

    assert s3.objects == {}
    assert "delete_object" in s3.calls
    assert cache.photos_for(falls.id) == []


def test_upload_keeps_failure_when_compensation_fails(coordinator, store, s3, falls, jpeg):
    store.fail_next("insert_photo", api_error("23503", "foreign key violation"))
    s3.fail_next("delete_object", client_error("InternalError", "DeleteObject"))

    with pytest.raises(WriteRejected) as exc:
        coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")

    assert "constraint violation" in exc.value.message
    assert len(s3.objects) == 1


def test_upload_rejects_empty_and_non_images(coordinator, s3, falls, jpeg):
    with pytest.raises(ValidationFailed):
        coordinator.upload_photo(falls.id, jpeg(b""), filename="a.jpg")
    with pytest.raises(ValidationFailed):
        coordinator.upload_photo(falls.id, jpeg(b"%PDF"), filename="a.pdf")
    assert s3.calls == []


def test_upload_binary_failure(coordinator, store, s3, falls, jpeg):
    s3.fail_next("upload_bytes", client_error("AccessDenied"))
    with pytest.raises(WriteRejected):
        coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    assert store.photos == {}


def test_upload_then_set_hero(coordinator, cache, falls, jpeg):
    photo = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")

    coordinator.set_hero_photo(falls.id, photo.id)

    photos = cache.load_photos(falls.id)
    assert len(photos) == 1
    assert photos[0].is_hero is True
    assert cache.get(falls.id).hero_photo.id == photo.id


def test_set_hero_clears_siblings(coordinator, store, cache, falls, jpeg):
    a = coordinator.upload_photo(falls.id, jpeg(b"a"), filename="a.jpg")
    b = coordinator.upload_photo(falls.id, jpeg(b"b"), filename="b.jpg")
    coordinator.set_hero_photo(falls.id, a.id)
    cache.load_photos(falls.id)

    coordinator.set_hero_photo(falls.id, b.id)

    assert [p.id for p in cache.photos_for(falls.id) if p.is_hero] == [b.id]
    assert cache.photos_for(falls.id)[0].id == b.id
    assert _heroes(store, falls.id) == [b.id]
    assert [p.id for p in cache.load_photos(falls.id) if p.is_hero] == [b.id]


def test_set_hero_without_loaded_gallery_updates_poi(coordinator, cache, falls, jpeg):
    photo = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    coordinator.set_hero_photo(falls.id, photo.id)

    assert cache.photos_for(falls.id) is None
    assert cache.get(falls.id).hero_photo.id == photo.id


def test_set_hero_for_other_poi(coordinator, store, falls, falls_fields, jpeg):
    other = coordinator.create_poi({**falls_fields, "name": "Hog Rock"})
    photo = coordinator.upload_photo(other.id, jpeg(), filename="a.jpg")
    with pytest.raises(NotFound):
        coordinator.set_hero_photo(falls.id, photo.id)
    assert _heroes(store, other.id) == []


def test_set_hero_partial_failure_resyncs_from_server(coordinator, store, cache, falls, jpeg):
    a = coordinator.upload_photo(falls.id, jpeg(b"a"), filename="a.jpg")
    b = coordinator.upload_photo(falls.id, jpeg(b"b"), filename="b.jpg")
    coordinator.set_hero_photo(falls.id, a.id)
    cache.load_photos(falls.id)
    store.fail_next("set_hero", httpx.ReadTimeout("slow"))

    with pytest.raises(WriteRejected):
        coordinator.set_hero_photo(falls.id, b.id)

    # siblings were cleared server-side; the cache shows that, not the old hero
    assert _heroes(store, falls.id) == []
    assert not any(p.is_hero for p in cache.photos_for(falls.id))
    assert cache.get(falls.id).hero_photo is None


def test_set_hero_resync_failure_invalidates(coordinator, store, cache, falls, jpeg):
    a = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    cache.load_photos(falls.id)
    store.fail_next("set_hero", httpx.ReadTimeout("slow"))
    store.fail_next("fetch_photos", httpx.ConnectError("offline"))

    with pytest.raises(FetchFailed):
        coordinator.set_hero_photo(falls.id, a.id)

    assert cache.photos_for(falls.id) is None
    assert cache.status == CacheStatus.STALE


def test_set_hero_clear_failure_changes_nothing(coordinator, store, cache, falls, jpeg):
    a = coordinator.upload_photo(falls.id, jpeg(b"a"), filename="a.jpg")
    b = coordinator.upload_photo(falls.id, jpeg(b"b"), filename="b.jpg")
    coordinator.set_hero_photo(falls.id, a.id)
    store.fail_next("clear_hero", api_error("42501"))

    with pytest.raises(WriteRejected):
        coordinator.set_hero_photo(falls.id, b.id)

    assert _heroes(store, falls.id) == [a.id]
    assert cache.get(falls.id).hero_photo.id == a.id


def test_delete_hero_photo_does_not_promote(coordinator, store, s3, cache, falls, jpeg):
    a = coordinator.upload_photo(falls.id, jpeg(b"a"), filename="a.jpg")
    b = coordinator.upload_photo(falls.id, jpeg(b"b"), filename="b.jpg")
    c = coordinator.upload_photo(falls.id, jpeg(b"c"), filename="c.jpg")
    coordinator.set_hero_photo(falls.id, a.id)
    cache.load_photos(falls.id)

    coordinator.delete_photo(a.id)

    photos = cache.load_photos(falls.id)
    assert {p.id for p in photos} == {b.id, c.id}
    assert not any(p.is_hero for p in photos)
    assert cache.get(falls.id).hero_photo is None
    assert a.storage_url not in s3.objects


def test_delete_hero_without_loaded_gallery(coordinator, cache, falls, jpeg):
    a = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    coordinator.set_hero_photo(falls.id, a.id)

    coordinator.delete_photo(a.id)

    assert cache.get(falls.id).hero_photo is None


def test_delete_missing_photo(coordinator):
    with pytest.raises(NotFound):
        coordinator.delete_photo("photo-404")


def test_delete_photo_binary_failure_changes_nothing(coordinator, store, s3, cache, falls, jpeg):
    a = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    cache.load_photos(falls.id)
    s3.fail_next("delete_object", client_error("AccessDenied", "DeleteObject"))

    with pytest.raises(WriteRejected):
        coordinator.delete_photo(a.id)

    assert a.id in store.photos
    assert [p.id for p in cache.photos_for(falls.id)] == [a.id]


def test_delete_photo_row_failure_is_partial(coordinator, store, cache, falls, jpeg):
    a = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    cache.load_photos(falls.id)
    store.fail_next("delete_photo", api_error("42501"))

    with pytest.raises(PartialDeleteFailure) as exc:
        coordinator.delete_photo(a.id)

    assert exc.value.completed == ["photo_file"]
    assert cache.photos_for(falls.id) is None


def test_delete_photo_kept_by_server_is_partial(coordinator, store, s3, cache, falls, jpeg):
    a = coordinator.upload_photo(falls.id, jpeg(), filename="a.jpg")
    cache.load_photos(falls.id)
    store.silently_filtered.add("delete_photo")

    with pytest.raises(PartialDeleteFailure) as exc:
        coordinator.delete_photo(a.id)

    assert exc.value.completed == ["photo_file"]
    assert a.id in store.photos
    assert cache.photos_for(falls.id) is None


def test_hero_invariant_holds_across_operations(coordinator, store, cache, falls, jpeg):
    photos = [
        coordinator.upload_photo(falls.id, jpeg(bytes([i])), filename=f"{i}.jpg")
        for i in range(4)
    ]
    cache.load_photos(falls.id)
    for photo in photos + photos[::-1]:
        coordinator.set_hero_photo(falls.id, photo.id)
        assert len([p for p in cache.photos_for(falls.id) if p.is_hero]) == 1
        assert len(_heroes(store, falls.id)) == 1
