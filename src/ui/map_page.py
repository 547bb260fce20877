import folium
import streamlit as st
from streamlit_folium import st_folium
from cache.poi_cache import PoiCache
from cache.requests import RequestState, RequestTracker
from clients.s3_client import S3Client
from models.models import Poi
from ui.net_action import net_action, show_error
from ui.Page import Page
from ui.photos import render_gallery, render_hero
from ui.state import select_poi
from utils.constants import (
    ESRI_ATTRIBUTION,
    ESRI_SATELLITE_URL,
    OSM_ATTRIBUTION,
    OSM_TILE_URL,
    PARK_BOUNDS,
    PARK_CENTER,
    PARK_DEFAULT_ZOOM,
    PARK_NAME,
    Views,
)
from utils.poi_utils import filter_pois, format_trail_stats, poi_at

MAP_HEIGHT = 560


class MapPage(Page):
    """Park map with POI markers, search and the selected POI's card."""

    view = Views.MAP.value

    def __init__(
        self,
        poi_cache: PoiCache,
        s3_client: S3Client,
        request_tracker: RequestTracker,
    ):
        self.poi_cache = poi_cache
        self.s3_client = s3_client
        self.request_tracker = request_tracker

    def on_leave(self):
        self.request_tracker.close_view(self.view)
        self.request_tracker.close_view(Views.PHOTOS.value)

    def _ensure_loaded(self) -> bool:
        if self.poi_cache.is_fresh:
            return True
        with net_action("Loading points of interest..."):
            request = self.request_tracker.run(self.view, self.poi_cache.load)
        if request.state == RequestState.ERROR:
            show_error(request.error)
            if st.button("Retry"):
                st.rerun()
            return False
        return request.state == RequestState.SUCCESS

    def _build_map(self, pois: list[Poi], satellite: bool, selected_id: str | None) -> folium.Map:
        m = folium.Map(location=list(PARK_CENTER), zoom_start=PARK_DEFAULT_ZOOM, tiles=None)
        folium.TileLayer(
            tiles=ESRI_SATELLITE_URL if satellite else OSM_TILE_URL,
            attr=ESRI_ATTRIBUTION if satellite else OSM_ATTRIBUTION,
        ).add_to(m)
        m.fit_bounds([list(corner) for corner in PARK_BOUNDS.as_leaflet_bounds()])
        for poi in pois:
            folium.Marker(
                location=[poi.lat, poi.lng],
                tooltip=poi.name,
                popup=folium.Popup(
                    f"<b>{poi.name}</b><br>{poi.visited_date:%b %d, %Y}", max_width=240
                ),
                icon=folium.Icon(
                    color="red" if poi.id == selected_id else "green", icon="info-sign"
                ),
            ).add_to(m)
        return m

    def _handle_marker_click(self, pois: list[Poi], map_data: dict | None, selected_id: str | None):
        map_data = map_data or {}
        clicked = map_data.get("last_object_clicked")
        tooltip = map_data.get("last_object_clicked_tooltip")
        click = (clicked.get("lat"), clicked.get("lng"), tooltip) if clicked else None
        # the last click is reported on every rerun; act on it once
        if click is None or click == st.session_state.map_click:
            return
        st.session_state.map_click = click
        poi = poi_at(pois, clicked, tooltip)
        if poi is not None and poi.id != selected_id:
            select_poi(poi.id)
            st.rerun()

    def _render_card(self, poi: Poi):
        st.subheader(poi.name)
        st.caption(f"Visited {poi.visited_date:%B %d, %Y}")
        stats = format_trail_stats(poi)
        if stats:
            st.write(stats)
        render_hero(self.s3_client, poi.hero_photo)
        if poi.notes:
            st.markdown(poi.notes)

        photos = self.poi_cache.photos_for(poi.id)
        if photos is None:
            if st.button("Show all photos", key=f"photos_{poi.id}"):
                with net_action("Loading photos..."):
                    request = self.request_tracker.run(
                        Views.PHOTOS.value, self.poi_cache.load_photos, poi.id
                    )
                if request.state == RequestState.ERROR:
                    show_error(request.error)
                elif request.state == RequestState.SUCCESS:
                    st.rerun()
            return
        render_gallery(self.s3_client, photos)

    def render(self):
        st.title(PARK_NAME)
        if not self._ensure_loaded():
            return

        c1, c2 = st.columns([3, 1])
        search = c1.text_input("Search", key="search", placeholder="Name, trail or notes")
        satellite = c2.toggle("Satellite view", value=False)
        pois = filter_pois(self.poi_cache.get_all(), search)
        if search:
            st.caption(f"{len(pois)} match(es)")

        ids = [None] + [p.id for p in pois]
        current = st.session_state.selected_poi_id
        selected_id = st.selectbox(
            "Point of interest",
            ids,
            index=ids.index(current) if current in ids else 0,
            format_func=lambda pid: "Select a point of interest..." if pid is None else self.poi_cache.get(pid).name,
        )
        if selected_id != current:
            select_poi(selected_id)

        map_col, card_col = st.columns([2, 1])
        with map_col:
            m = self._build_map(pois, satellite, selected_id)
            map_data = st_folium(
                m,
                width=None,
                height=MAP_HEIGHT,
                key="park_map",
                returned_objects=["last_object_clicked", "last_object_clicked_tooltip"],
            )
            st.caption("Click a marker to open its details.")
        self._handle_marker_click(pois, map_data, selected_id)
        with card_col:
            selected = self.poi_cache.get(selected_id) if selected_id else None
            if selected is None:
                st.caption("Pick a point of interest to see its details.")
                return
            self._render_card(selected)
