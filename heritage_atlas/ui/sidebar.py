"""Sidebar UI renderer for the map pages.

Renders the left sidebar with:
- Search text, tag and "3D only" filters
- Collection summary (total / with captures)
- Signed-in user and sign-out button
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import streamlit as st

from heritage_atlas.constants import ApiConfig
from heritage_atlas.model.geo_entity import GeoEntity
from heritage_atlas.model.message import EntityCountMessage, SignedOutMessage
from heritage_atlas.model.tag import Tag
from heritage_atlas.repositories.auth import AuthService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityFilters:
    """Map filters; to_params() builds the cultural property query."""

    search: str = ""
    tag_id: Optional[int] = None
    captures_only: bool = False

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"limit": ApiConfig.MAP_PAGE_LIMIT}
        if self.search.strip():
            params["search"] = self.search.strip()
        if self.tag_id is not None:
            params["tag_id"] = self.tag_id
        if self.captures_only:
            params["has_movies"] = True
        return params


class SidebarRenderer:
    """Renders the sidebar and returns the current filters."""

    def __init__(self, tags: list[Tag], auth: AuthService) -> None:
        self.tags = tags
        self.auth = auth

    def render(self, entities: Optional[list[GeoEntity]] = None) -> EntityFilters:
        with st.sidebar:
            st.subheader("🔎 Filters")
            search = st.text_input("Search", key="filter_search", placeholder="Name or address")
            tag_names = ["All tags"] + [tag.name for tag in self.tags]
            tag_choice = st.selectbox("Tag", tag_names, key="filter_tag")
            captures_only = st.toggle("3D captures only", key="filter_3d_only")

            if entities is not None:
                st.divider()
                with_captures = sum(1 for e in entities if e.has_captures)
                EntityCountMessage(total=len(entities), with_captures=with_captures).display()

            self._render_account()

        tag_id = next((tag.id for tag in self.tags if tag.name == tag_choice), None)
        return EntityFilters(search=search, tag_id=tag_id, captures_only=captures_only)

    def _render_account(self) -> None:
        st.divider()
        user = self.auth.session.user
        if user is None:
            st.caption("Not signed in")
            return
        st.caption(f"Signed in as **{user.display_name}**")
        if st.button("Sign out", key="sidebar_sign_out", use_container_width=True):
            self.auth.sign_out()
            SignedOutMessage().display()
            st.rerun()
