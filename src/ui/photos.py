import logging
from typing import List, Optional
import streamlit as st
from clients.s3_client import S3Client
from models.errors import AuthenticationFailed, FetchFailed
from models.models import PoiPhoto
from utils.constants import PLACEHOLDER_PHOTO_TEXT
from utils.error_utils import translate_errors

logger = logging.getLogger(__name__)


def photo_url(s3_client: S3Client, photo: PoiPhoto) -> Optional[str]:
    try:
        with translate_errors(FetchFailed, "Looking up photo URL"):
            return s3_client.get_url(photo.storage_url)
    except (FetchFailed, AuthenticationFailed):
        return None


def render_hero(s3_client: S3Client, hero: Optional[PoiPhoto]):
    url = photo_url(s3_client, hero) if hero else None
    if url:
        st.image(url, caption=hero.caption, use_container_width=True)
    else:
        st.info(PLACEHOLDER_PHOTO_TEXT, icon=":material/photo_camera:")


def render_gallery(s3_client: S3Client, photos: List[PoiPhoto], columns: int = 3):
    if not photos:
        st.caption("No photos yet.")
        return
    cols = st.columns(columns)
    for idx, photo in enumerate(photos):
        with cols[idx % columns]:
            url = photo_url(s3_client, photo)
            label = ("★ " if photo.is_hero else "") + (photo.caption or "")
            if url:
                st.image(url, caption=label or None, use_container_width=True)
            else:
                st.caption(f"{label} (unavailable)")
