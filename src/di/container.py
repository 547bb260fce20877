from dependency_injector import containers, providers
from cache.poi_cache import PoiCache
from cache.requests import RequestTracker
from clients.s3_client import S3Client
from clients.supabase_client import SupabaseClient
from coordinator.mutation_coordinator import MutationCoordinator
from ui.admin_page import AdminPage
from ui.map_page import MapPage
from utils.constants import PARK_BOUNDS


class Container(containers.DeclarativeContainer):
    # Clients
    supabase_client = providers.Singleton(SupabaseClient)
    s3_client = providers.Singleton(
        S3Client, token_provider=supabase_client.provided.access_token
    )

    # Core
    poi_cache = providers.Singleton(PoiCache, supabase_client=supabase_client)
    request_tracker = providers.Singleton(RequestTracker)
    mutation_coordinator = providers.Singleton(
        MutationCoordinator,
        supabase_client=supabase_client,
        s3_client=s3_client,
        poi_cache=poi_cache,
        bounds=PARK_BOUNDS,
    )

    # UI Pages
    map_page = providers.Singleton(
        MapPage,
        poi_cache=poi_cache,
        s3_client=s3_client,
        request_tracker=request_tracker,
    )
    admin_page = providers.Singleton(
        AdminPage,
        poi_cache=poi_cache,
        mutation_coordinator=mutation_coordinator,
        s3_client=s3_client,
        request_tracker=request_tracker,
    )
