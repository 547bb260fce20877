import io
import pytest
from cache.poi_cache import PoiCache
from coordinator.mutation_coordinator import MutationCoordinator
from fakes import FakeS3Client, FakeSupabaseClient
from models.models import Profile
from utils.constants import PARK_BOUNDS


@pytest.fixture
def admin_profile():
    return Profile(id="u-admin", display_name="Dad", is_admin=True)


@pytest.fixture
def member_profile():
    return Profile(id="u-kid", display_name="Kiddo", is_admin=False)


@pytest.fixture
def store(admin_profile):
    return FakeSupabaseClient(profile=admin_profile)


@pytest.fixture
def s3():
    return FakeS3Client()


@pytest.fixture
def cache(store):
    return PoiCache(supabase_client=store)


@pytest.fixture
def coordinator(store, s3, cache):
    return MutationCoordinator(
        supabase_client=store, s3_client=s3, poi_cache=cache, bounds=PARK_BOUNDS
    )


@pytest.fixture
def falls_fields():
    return {
        "name": "Cunningham Falls",
        "lat": 39.6298,
        "lng": -77.4602,
        "visited_date": "2024-07-04",
        "difficulty": "moderate",
    }


@pytest.fixture
def jpeg():
    def _make(content: bytes = b"\xff\xd8\xff\xe0fake-jpeg"):
        return io.BytesIO(content)

    return _make
