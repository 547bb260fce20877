from datetime import date
from typing import Any, Callable, Dict, Optional
import streamlit as st
from cache.poi_cache import PoiCache
from cache.requests import RequestState, RequestTracker
from clients.s3_client import S3Client
from coordinator.mutation_coordinator import MutationCoordinator
from models.models import Difficulty, Poi, PoiPhoto
from ui.net_action import net_action, show_error
from ui.Page import Page
from ui.photos import photo_url
from ui.state import select_poi
from utils.constants import ALLOWED_PHOTO_TYPES, PARK_CENTER, Keys, Label, Views

DIFFICULTY_OPTIONS = [None] + [d.value for d in Difficulty]


def _required(label: Label) -> str:
    return label.value + Label.MANDATORY_FIELD_MARKER.value


class AdminPage(Page):
    """Create, edit and delete POIs and manage their photos."""

    view = Views.ADMIN.value

    def __init__(
        self,
        poi_cache: PoiCache,
        mutation_coordinator: MutationCoordinator,
        s3_client: S3Client,
        request_tracker: RequestTracker,
    ):
        self.poi_cache = poi_cache
        self.mutation_coordinator = mutation_coordinator
        self.s3_client = s3_client
        self.request_tracker = request_tracker

    def on_leave(self):
        self.request_tracker.close_view(self.view)

    @property
    def busy(self) -> bool:
        return self.request_tracker.is_pending(self.view)

    def _mutate(self, text: str, fn: Callable[..., Any], *args) -> Optional[Any]:
        with net_action(text):
            request = self.request_tracker.run(self.view, fn, *args)
        if request.state == RequestState.ERROR:
            show_error(request.error)
            return None
        if request.state != RequestState.SUCCESS:
            return None
        return request.result if request.result is not None else True

    def _poi_form(self, form_key: str, poi: Poi | None = None) -> Dict[str, Any] | None:
        with st.form(form_key, clear_on_submit=poi is None):
            name = st.text_input(
                _required(Label.NAME), value=poi.name if poi else "", key=f"{form_key}_{Keys.NAME.value}"
            )
            c1, c2 = st.columns(2)
            lat = c1.number_input(
                _required(Label.LAT),
                value=poi.lat if poi else PARK_CENTER[0],
                format="%.6f",
                key=f"{form_key}_{Keys.LAT.value}",
            )
            lng = c2.number_input(
                _required(Label.LNG),
                value=poi.lng if poi else PARK_CENTER[1],
                format="%.6f",
                key=f"{form_key}_{Keys.LNG.value}",
            )
            visited_date = st.date_input(
                _required(Label.VISITED_DATE),
                value=poi.visited_date if poi else date.today(),
                key=f"{form_key}_{Keys.VISITED_DATE.value}",
            )
            trail_name = st.text_input(
                Label.TRAIL_NAME.value,
                value=(poi.trail_name or "") if poi else "",
                key=f"{form_key}_{Keys.TRAIL_NAME.value}",
            )
            c3, c4, c5 = st.columns(3)
            distance = c3.number_input(
                Label.DISTANCE.value,
                value=poi.distance_miles if poi else None,
                min_value=0.0,
                key=f"{form_key}_{Keys.DISTANCE.value}",
            )
            elevation = c4.number_input(
                Label.ELEVATION.value,
                value=poi.elevation_gain_ft if poi else None,
                min_value=0.0,
                key=f"{form_key}_{Keys.ELEVATION.value}",
            )
            current = poi.difficulty.value if poi and poi.difficulty else None
            difficulty = c5.selectbox(
                Label.DIFFICULTY.value,
                DIFFICULTY_OPTIONS,
                index=DIFFICULTY_OPTIONS.index(current),
                format_func=lambda d: d.title() if d else "—",
                key=f"{form_key}_{Keys.DIFFICULTY.value}",
            )
            notes = st.text_area(
                Label.NOTES.value,
                value=(poi.notes or "") if poi else "",
                key=f"{form_key}_{Keys.NOTES.value}",
            )
            submitted = st.form_submit_button(Label.SUBMIT_BUTTON.value, disabled=self.busy)

        if not submitted:
            return None
        return {
            Keys.NAME.value: name,
            Keys.LAT.value: lat,
            Keys.LNG.value: lng,
            Keys.VISITED_DATE.value: visited_date,
            Keys.TRAIL_NAME.value: trail_name,
            Keys.DISTANCE.value: distance,
            Keys.ELEVATION.value: elevation,
            Keys.DIFFICULTY.value: difficulty,
            Keys.NOTES.value: notes,
        }

    def _render_create(self):
        st.subheader("New point of interest")
        fields = self._poi_form("create_poi_form")
        if fields is None:
            return
        poi = self._mutate("Saving...", self.mutation_coordinator.create_poi, fields)
        if poi:
            select_poi(poi.id)
            st.success(f"Added {poi.name}.")

    def _render_edit(self, poi: Poi):
        st.subheader(f"Edit {poi.name}")
        fields = self._poi_form(f"edit_poi_form_{poi.id}", poi)
        if fields is not None:
            if self._mutate("Saving...", self.mutation_coordinator.update_poi, poi.id, fields):
                st.success("Saved.")
                st.rerun()

        with st.expander("Delete this point of interest"):
            confirm = st.checkbox(
                f"Yes, delete {poi.name} and all of its photos", key=f"confirm_delete_{poi.id}"
            )
            if st.button("Delete", disabled=not confirm or self.busy, key=f"delete_{poi.id}"):
                if self._mutate("Deleting...", self.mutation_coordinator.delete_poi, poi.id):
                    select_poi(None)
                    st.rerun()

    def _render_photo_row(self, poi: Poi, photo: PoiPhoto):
        c1, c2, c3 = st.columns([3, 1, 1])
        url = photo_url(self.s3_client, photo)
        with c1:
            if url:
                st.image(url, width=180)
            st.caption(("★ Hero · " if photo.is_hero else "") + (photo.caption or ""))
        if c2.button(
            "Set as hero", key=f"hero_{photo.id}", disabled=photo.is_hero or self.busy
        ):
            if self._mutate(
                "Updating hero photo...", self.mutation_coordinator.set_hero_photo, poi.id, photo.id
            ):
                st.rerun()
        if c3.button("Delete", key=f"delete_photo_{photo.id}", disabled=self.busy):
            if self._mutate("Deleting photo...", self.mutation_coordinator.delete_photo, photo.id):
                st.rerun()

    def _render_photos(self, poi: Poi):
        st.subheader("Photos")
        photos = self.poi_cache.photos_for(poi.id)
        if photos is None:
            with net_action("Loading photos..."):
                request = self.request_tracker.run(
                    Views.PHOTOS.value, self.poi_cache.load_photos, poi.id
                )
            if request.state == RequestState.ERROR:
                show_error(request.error)
                return
            photos = request.result or []

        with st.form(f"upload_form_{poi.id}", clear_on_submit=True):
            file = st.file_uploader(_required(Label.FILE_UPLOAD), type=ALLOWED_PHOTO_TYPES)
            caption = st.text_input(Label.CAPTION.value)
            submitted = st.form_submit_button("Upload", disabled=self.busy)
        if submitted:
            if not file:
                st.error("Choose a photo to upload.")
            elif self._mutate(
                "Uploading photo...", self.mutation_coordinator.upload_photo, poi.id, file, caption
            ):
                st.rerun()

        if not photos:
            st.caption("No photos yet.")
        elif not any(p.is_hero for p in photos):
            st.caption("No hero photo is set; the map shows a placeholder.")
        for photo in photos:
            self._render_photo_row(poi, photo)

    def render(self):
        st.title("Admin")
        profile = st.session_state.get("profile")
        if profile is None or not profile.is_admin:
            st.warning("Only the admin can edit points of interest.")
            return
        if not self.poi_cache.is_fresh:
            with net_action("Loading points of interest..."):
                request = self.request_tracker.run(self.view, self.poi_cache.load)
            if request.state == RequestState.ERROR:
                show_error(request.error)
                return

        pois = self.poi_cache.get_all()
        ids = [None] + [p.id for p in pois]
        current = st.session_state.selected_poi_id
        selected_id = st.selectbox(
            "Point of interest",
            ids,
            index=ids.index(current) if current in ids else 0,
            format_func=lambda pid: "➕ New point of interest" if pid is None else self.poi_cache.get(pid).name,
        )
        if selected_id != current:
            select_poi(selected_id)

        poi = self.poi_cache.get(selected_id) if selected_id else None
        if poi is None:
            self._render_create()
            return
        self._render_edit(poi)
        self._render_photos(poi)
