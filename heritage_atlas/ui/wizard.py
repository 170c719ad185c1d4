"""Registration wizard for new cultural properties.

Uses python-statemachine for the three-step flow:

States:
    EDITING: Input form (entity fields, location, capture drafts)
    CONFIRMING: Read-only summary with the submit button
    COMPLETE: Registration saved

Transitions:
    EDITING -> CONFIRMING: review (guarded: draft must be valid)
    CONFIRMING -> EDITING: back
    CONFIRMING -> COMPLETE: finish (internal, after a successful submit)
    any -> EDITING: restart (clears the draft)

The wizard lives in st.session_state and is shared by the input, confirm
and complete views.

Submission is a two-phase write: create the entity, then each capture with
the new entity id. A failure in either phase keeps the wizard in CONFIRMING
with ActionState.ERROR. An entity created before a failed capture write is
not rolled back.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from heritage_atlas.constants import RegistrationConfig
from heritage_atlas.core.http import ApiError
from heritage_atlas.model.action_state import ActionState
from heritage_atlas.model.drafts import CaptureDraft, EntityDraft
from heritage_atlas.model.message import Message
from heritage_atlas.repositories.cultural_property import GeoEntityRepository
from heritage_atlas.repositories.movie import MediaCaptureRepository
from heritage_atlas.ui.error_messages import describe_api_error
from heritage_atlas.ui.infra import StreamlitUIListener
from heritage_atlas.ui.validators import validate_capture_draft, validate_location, validate_required_text

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "name": "Name",
    "type": "Type",
    "address": "Address",
}


@dataclass
class RegistrationDraft:
    """Shared wizard model: the entity draft, its capture drafts and the result.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    state: str | None = None
    entity: EntityDraft = field(default_factory=EntityDraft)
    captures: list[CaptureDraft] = field(default_factory=list)
    created_id: Optional[int] = None
    submission: ActionState = field(default_factory=ActionState)

    def update_entity(self, **changes: Any) -> None:
        """Set entity draft fields.

        Raises:
            AttributeError: A name is not an EntityDraft field
        """
        known = EntityDraft.field_names()
        unknown = sorted(set(changes) - known)
        if unknown:
            raise AttributeError(f"EntityDraft has no field(s) {unknown}")
        for name, value in changes.items():
            setattr(self.entity, name, value)

    def add_capture(self, draft: CaptureDraft | None = None) -> int:
        """Append a capture draft and return its index.

        Raises:
            ValueError: RegistrationConfig.MAX_CAPTURES drafts already exist
        """
        if len(self.captures) >= RegistrationConfig.MAX_CAPTURES:
            raise ValueError(f"At most {RegistrationConfig.MAX_CAPTURES} captures per registration")
        self.captures.append(draft or CaptureDraft())
        return len(self.captures) - 1

    def update_capture(self, index: int, draft: CaptureDraft) -> None:
        self.captures[index] = draft

    def remove_capture(self, index: int) -> CaptureDraft:
        return self.captures.pop(index)

    def reset(self) -> None:
        self.entity = EntityDraft()
        self.captures = []
        self.created_id = None
        self.submission.clear()

    def validation_messages(self) -> list[Message]:
        """Field-level problems in form order; empty when the draft is valid."""
        messages: list[Message] = []
        for name, label in FIELD_LABELS.items():
            message = validate_required_text(getattr(self.entity, name), label)
            if message is not None:
                messages.append(message)
        location_message = validate_location(self.entity.latitude, self.entity.longitude)
        if location_message is not None:
            messages.append(location_message)
        for index, capture in enumerate(self.captures):
            capture_message = validate_capture_draft(capture, index)
            if capture_message is not None:
                messages.append(capture_message)
        return messages

    def is_valid(self) -> bool:
        return not self.validation_messages()

    def __repr__(self) -> str:
        return (
            f"RegistrationDraft(state={self.state}, name={self.entity.name!r}, "
            f"captures={len(self.captures)}, created_id={self.created_id})"
        )


class RegistrationWizard(StateMachine):
    """State machine for the registration wizard. See module docstring."""

    editing = State("Editing", initial=True)
    confirming = State("Confirming")
    complete = State("Complete")

    review = editing.to(confirming, cond="draft_is_valid")
    back = confirming.to(editing)
    finish = confirming.to(complete)
    restart = editing.to(editing) | confirming.to(editing) | complete.to(editing)

    def __init__(self, draft: RegistrationDraft | None = None) -> None:
        model = draft if draft is not None else RegistrationDraft()
        super().__init__(model=model)

    @property
    def draft(self) -> RegistrationDraft:
        return self.model

    @property
    def is_editing(self) -> bool:
        return self.editing.is_active

    @property
    def is_confirming(self) -> bool:
        return self.confirming.is_active

    @property
    def is_complete(self) -> bool:
        return self.complete.is_active

    # ==========================================================================
    # Guards
    # ==========================================================================

    def draft_is_valid(self) -> bool:
        return self.draft.is_valid()

    # ==========================================================================
    # Hooks
    # ==========================================================================

    def on_enter_confirming(self) -> None:
        self.draft.submission.clear()

    def before_finish(self, created_id: int) -> None:
        self.draft.created_id = created_id

    def before_restart(self) -> None:
        self.draft.reset()

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure."""
        try:
            self.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.debug(f"[WIZARD] Transition '{event}' not allowed from {self.current_state_value}")
            return False

    # ==========================================================================
    # Submission
    # ==========================================================================

    def submit(self, entity_repo: GeoEntityRepository, capture_repo: MediaCaptureRepository) -> bool:
        """Create the entity, then its captures, then move to COMPLETE.

        Returns:
            True on success. On failure the wizard stays in CONFIRMING and
            draft.submission holds the error message.
        """
        if not self.is_confirming:
            logger.warning(f"[WIZARD] submit ignored in state {self.current_state_value}")
            return False

        submission = self.draft.submission
        submission.start()
        try:
            entity = entity_repo.create(self.draft.entity)
        except ApiError as e:
            logger.error(f"[WIZARD] Entity create failed: {e!r}")
            submission.fail(describe_api_error(e))
            return False

        for index, capture in enumerate(self.draft.captures):
            try:
                capture_repo.create(capture, entity_id=entity.id)
            except ApiError as e:
                logger.error(
                    f"[WIZARD] Capture {index + 1}/{len(self.draft.captures)} create failed for "
                    f"entity {entity.id}; entity is kept without rollback: {e!r}"
                )
                submission.fail(describe_api_error(e))
                return False

        submission.succeed()
        logger.info(f"[WIZARD] Registered entity {entity.id} with {len(self.draft.captures)} capture(s)")
        self.send("finish", created_id=entity.id)
        return True

    @staticmethod
    def create(add_ui_listener: bool = True) -> tuple["RegistrationWizard", RegistrationDraft]:
        """Factory for wizard plus draft; tests pass add_ui_listener=False."""
        draft = RegistrationDraft()
        wizard = RegistrationWizard(draft=draft)
        if add_ui_listener:
            wizard.add_listener(StreamlitUIListener())
        return wizard, draft
