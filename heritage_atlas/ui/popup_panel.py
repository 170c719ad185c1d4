"""Popup panel shown next to the map.

Renders the open PopupSession of an InteractionController:
- Info view: name, type, address, tags, photo and external link
- Viewer: the first capture's embed URL in an iframe, mounted only while
  the session's CaptureViewer is mounted
- "×" close button (closes through the state machine)
"""

import logging

import streamlit as st
import streamlit.components.v1 as components

from heritage_atlas.constants import CaptureConfig
from heritage_atlas.model.geo_entity import GeoEntity
from heritage_atlas.ui.interaction import InteractionController, PopupSession

logger = logging.getLogger(__name__)


def _render_info(entity: GeoEntity) -> None:
    st.markdown(f"### {entity.name}")
    if entity.name_kana:
        st.caption(entity.name_kana)
    details = [value for value in (entity.type, entity.category) if value]
    if details:
        st.caption(" · ".join(details))
    if entity.address:
        st.write(f"📍 {entity.address}")
    if entity.tags:
        st.write(" ".join(f"`{tag.name}`" for tag in entity.tags))
    if entity.thumbnail_url:
        st.image(entity.thumbnail_url, use_container_width=True)
    if entity.note:
        st.write(entity.note)
    if entity.url:
        st.link_button("Details", entity.url)


def _render_viewer(session: PopupSession) -> None:
    viewer = session.viewer
    if viewer is None or not viewer.mounted:
        return
    st.markdown(f"**🧊 {viewer.title}**")
    components.iframe(viewer.embed_url, height=CaptureConfig.VIEWER_HEIGHT_PX, scrolling=False)

    others = session.entity.captures[1:]
    if others:
        with st.expander(f"{len(others)} more 3D capture(s)"):
            for capture in others:
                st.link_button(capture.display_title, capture.url, use_container_width=True)


def render_popup_panel(controller: InteractionController) -> None:
    """Render the open popup, or nothing when closed."""
    session = controller.popup
    if session is None:
        return

    with st.container(border=True):
        _, close_col = st.columns([6, 1])
        with close_col:
            if st.button("×", key=f"popup_close_{session.entity.id}", help="Close"):
                logger.info(f"[POPUP] Close button for entity {session.entity.id}")
                controller.close()

        _render_viewer(session)
        _render_info(session.entity)
