"""Registration page views: input -> confirm -> complete.

All three views read and write the same RegistrationWizard kept in
st.session_state, so moving back from the confirm view shows the input
form with everything the user entered.
"""

import logging
from dataclasses import replace

import streamlit as st

from heritage_atlas.constants import RegistrationConfig
from heritage_atlas.model.message import ActionFailedMessage, RegistrationCompleteMessage
from heritage_atlas.model.tag import Tag
from heritage_atlas.repositories.cultural_property import GeoEntityRepository
from heritage_atlas.repositories.movie import MediaCaptureRepository
from heritage_atlas.ui.location_picker import LocationPicker, render_location_picker
from heritage_atlas.ui.wizard import RegistrationDraft, RegistrationWizard

logger = logging.getLogger(__name__)


def _select_index(options: list[str], value: str) -> int | None:
    return options.index(value) if value in options else None


def _render_entity_fields(draft: RegistrationDraft, tags: list[Tag]) -> None:
    entity = draft.entity
    col_left, col_right = st.columns(2)
    with col_left:
        name = st.text_input("Name *", value=entity.name)
        name_kana = st.text_input("Name (kana)", value=entity.name_kana)
        name_en = st.text_input("Name (English)", value=entity.name_en)
        name_gener = st.text_input("Generic name", value=entity.name_gener)
    with col_right:
        type_ = st.selectbox(
            "Type *",
            RegistrationConfig.PROPERTY_TYPES,
            index=_select_index(RegistrationConfig.PROPERTY_TYPES, entity.type),
            placeholder="Choose a type",
        )
        category = st.selectbox(
            "Category",
            RegistrationConfig.PROPERTY_CATEGORIES,
            index=_select_index(RegistrationConfig.PROPERTY_CATEGORIES, entity.category),
            placeholder="Optional",
        )
        place_name = st.text_input("Place name", value=entity.place_name)
        url = st.text_input("Website", value=entity.url)

    tag_by_name = {tag.name: tag.id for tag in tags}
    selected = [tag.name for tag in tags if tag.id in entity.tag_ids]
    tag_names = st.multiselect("Tags", list(tag_by_name), default=selected)
    note = st.text_area("Note", value=entity.note)

    draft.update_entity(
        name=name,
        name_kana=name_kana,
        name_en=name_en,
        name_gener=name_gener,
        type=type_ or "",
        category=category or "",
        place_name=place_name,
        url=url,
        note=note,
        tag_ids=[tag_by_name[n] for n in tag_names],
    )


def _render_capture_fields(draft: RegistrationDraft) -> None:
    st.subheader("🧊 3D captures")
    for index, capture in enumerate(list(draft.captures)):
        with st.container(border=True):
            # Widget keys follow the draft uid, not its position
            url = st.text_input(f"Capture {index + 1} URL *", value=capture.url, key=f"capture_url_{capture.uid}")
            title = st.text_input("Title", value=capture.title, key=f"capture_title_{capture.uid}")
            note = st.text_input("Note", value=capture.note, key=f"capture_note_{capture.uid}")
            draft.update_capture(index, replace(capture, url=url, title=title, note=note))
            if st.button("Remove", key=f"capture_remove_{capture.uid}"):
                draft.remove_capture(index)
                st.rerun()

    if len(draft.captures) < RegistrationConfig.MAX_CAPTURES:
        if st.button("➕ Add 3D capture"):
            draft.add_capture()
            st.rerun()


def render_input_view(wizard: RegistrationWizard, picker: LocationPicker, tags: list[Tag]) -> None:
    draft = wizard.draft
    if not picker.token.alive:
        picker.remount()
    st.header("Register a cultural property")
    _render_entity_fields(draft, tags)

    st.subheader("📍 Location")
    address = st.text_input("Address *", value=draft.entity.address)
    draft.update_entity(address=address)
    render_location_picker(picker)

    _render_capture_fields(draft)

    if st.button("Review", type="primary"):
        messages = draft.validation_messages()
        for message in messages:
            message.display()
        if not messages:
            picker.unmount()
            wizard.try_transition("review")


def render_confirm_view(
    wizard: RegistrationWizard,
    entity_repo: GeoEntityRepository,
    capture_repo: MediaCaptureRepository,
    tags: list[Tag],
) -> None:
    draft = wizard.draft
    entity = draft.entity
    st.header("Confirm registration")

    rows = {
        "Name": entity.name,
        "Name (kana)": entity.name_kana,
        "Name (English)": entity.name_en,
        "Type": entity.type,
        "Category": entity.category,
        "Address": entity.address,
        "Location": f"{entity.latitude:.6f}, {entity.longitude:.6f}",
        "Tags": ", ".join(tag.name for tag in tags if tag.id in entity.tag_ids),
        "Website": entity.url,
        "Note": entity.note,
    }
    for label, value in rows.items():
        if value:
            st.markdown(f"**{label}:** {value}")

    if draft.captures:
        st.markdown(f"**3D captures ({len(draft.captures)}):**")
        for capture in draft.captures:
            st.markdown(f"- {capture.title or capture.url}")

    if draft.submission.failed:
        ActionFailedMessage(action="Registration", error=draft.submission.error or "").display()

    col_back, col_submit = st.columns(2)
    with col_back:
        if st.button("⬅️ Back", use_container_width=True, disabled=draft.submission.is_busy):
            wizard.try_transition("back")
    with col_submit:
        if st.button("Register", type="primary", use_container_width=True, disabled=draft.submission.is_busy):
            with st.spinner("Saving..."):
                wizard.submit(entity_repo, capture_repo)


def render_complete_view(wizard: RegistrationWizard) -> None:
    draft = wizard.draft
    st.header("Registration complete")
    if st.session_state.get("announced_registration") != draft.created_id:
        RegistrationCompleteMessage(name=draft.entity.name, capture_count=len(draft.captures)).display()
        st.session_state["announced_registration"] = draft.created_id
    st.success(f"**{draft.entity.name}** was registered (id {draft.created_id}).")
    if st.button("Register another", type="primary"):
        wizard.try_transition("restart")


def render_registration_page(
    wizard: RegistrationWizard,
    picker: LocationPicker,
    entity_repo: GeoEntityRepository,
    capture_repo: MediaCaptureRepository,
    tags: list[Tag],
) -> None:
    """Dispatch to the view for the wizard's current state."""
    if wizard.is_editing:
        render_input_view(wizard, picker, tags)
    elif wizard.is_confirming:
        render_confirm_view(wizard, entity_repo, capture_repo, tags)
    else:
        render_complete_view(wizard)
