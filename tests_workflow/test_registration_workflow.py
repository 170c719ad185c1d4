"""Workflow: register a cultural property.

Sign in -> fill the wizard -> review -> submit against the backend -> the new
property shows up on the map. Also covers the partial-failure path where the
property is created but a capture write fails.
"""

from heritage_atlas.constants import LayerConfig
from heritage_atlas.model.action_state import ActionState, ActionStatus
from heritage_atlas.model.drafts import CaptureDraft
from heritage_atlas.repositories import AuthService, GeoEntityRepository, MediaCaptureRepository
from heritage_atlas.ui import EntityFilters, MapView, load_entities
from heritage_atlas.ui.auth_views import submit_sign_in
from tests_workflow.conftest import FakeBackend, WizardAndDraft


def fill_draft(wizard_and_draft: WizardAndDraft, capture_urls: tuple[str, ...]) -> None:
    _, draft = wizard_and_draft
    draft.update_entity(
        name="浅草神社",
        type="Important Cultural Property",
        address="東京都台東区浅草2-3-1",
        latitude=35.7153,
        longitude=139.7975,
    )
    for url in capture_urls:
        draft.add_capture(CaptureDraft(url=url))


class TestSignIn:
    """Sign-in against the backend."""

    def test_wrong_password(self, auth: AuthService) -> None:
        """A 401 maps to the credentials message and keeps the session empty."""
        state = ActionState()

        errors = submit_sign_in(auth, "taro", "wrong", state)

        assert "submit" in errors
        assert state.failed
        assert not auth.is_authenticated

    def test_token_sent_after_sign_in(self, auth: AuthService, entity_repo: GeoEntityRepository, backend: FakeBackend) -> None:
        """Requests after sign-in carry the token header."""
        assert submit_sign_in(auth, " taro ", "secret", ActionState()) == {}
        assert auth.session.user.username == "taro"

        entity_repo.find_all({})

        assert backend.auth_headers[-1] == "Token tok"


class TestRegistration:
    """Wizard submission against the backend."""

    def test_register_and_show_on_map(
        self,
        wizard_and_draft: WizardAndDraft,
        auth: AuthService,
        entity_repo: GeoEntityRepository,
        capture_repo: MediaCaptureRepository,
        backend: FakeBackend,
        map_view: MapView,
    ) -> None:
        """Entity and captures are created; the new property has a 3D badge on the map."""
        wizard, draft = wizard_and_draft
        auth.sign_in("taro", "secret")
        fill_draft(wizard_and_draft, ("https://lumalabs.ai/capture/shrine-front", "https://lumalabs.ai/capture/shrine-hall"))

        assert wizard.try_transition("review")
        assert wizard.submit(entity_repo, capture_repo)

        assert wizard.is_complete
        created = backend.entities[draft.created_id]
        assert created["name"] == "浅草神社"
        owned = [m for m in backend.movies.values() if m["cultural_property"] == draft.created_id]
        assert len(owned) == 2
        assert ("POST", "/cp_api/movie/") in backend.requests

        map_view.apply(load_entities(entity_repo, EntityFilters(), ActionState()))
        badge_ids = {row["id"] for row in map_view.renderer.layer_data(LayerConfig.BADGE_LAYER_ID)}
        assert draft.created_id in badge_ids

    def test_invalid_draft_stays_editing(self, wizard_and_draft: WizardAndDraft, backend: FakeBackend) -> None:
        """Review is refused while required fields are missing; nothing is sent."""
        wizard, _ = wizard_and_draft

        assert not wizard.try_transition("review")

        assert wizard.is_editing
        assert backend.requests == []

    def test_capture_failure_keeps_confirming(
        self,
        wizard_and_draft: WizardAndDraft,
        entity_repo: GeoEntityRepository,
        capture_repo: MediaCaptureRepository,
        backend: FakeBackend,
    ) -> None:
        """A failed capture write leaves the created entity and reports the error."""
        wizard, draft = wizard_and_draft
        backend.fail_movie_posts = True
        fill_draft(wizard_and_draft, ("https://lumalabs.ai/capture/shrine-front",))
        wizard.send("review")
        entity_count = len(backend.entities)

        assert not wizard.submit(entity_repo, capture_repo)

        assert wizard.is_confirming
        assert draft.submission.status == ActionStatus.ERROR
        assert "server error" in draft.submission.error
        assert len(backend.entities) == entity_count + 1
        assert draft.created_id is None

    def test_back_then_restart(self, wizard_and_draft: WizardAndDraft) -> None:
        """Back keeps the input; restart clears it."""
        wizard, draft = wizard_and_draft
        fill_draft(wizard_and_draft, ())
        wizard.send("review")

        wizard.send("back")
        assert draft.entity.name == "浅草神社"

        wizard.send("restart")
        assert draft.entity.name == ""
        assert wizard.is_editing
