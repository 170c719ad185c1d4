"""Smoke tests for module imports and configuration validation.

Quick tests that verify the system is correctly installed and configured.
"""

import pytest

from tests_workflow.conftest import WizardAndDraft


# =============================================================================
# MODULE IMPORT TESTS
# =============================================================================


class TestModuleImports:
    """Parametrized smoke tests for module imports."""

    @pytest.mark.parametrize(
        "module_path,class_name",
        [
            # Core modules
            pytest.param("heritage_atlas.core.http", "HttpClient", id="core_http"),
            pytest.param("heritage_atlas.core.geocoding", "Geocoder", id="core_geocoding"),
            pytest.param("heritage_atlas.core.geo_calculator", "GeoCalculator", id="core_geo"),
            pytest.param("heritage_atlas.core.cancellation", "LivenessToken", id="core_token"),
            # Model modules
            pytest.param("heritage_atlas.model.geo_entity", "GeoEntity", id="model_entity"),
            pytest.param("heritage_atlas.model.media_capture", "MediaCapture", id="model_capture"),
            pytest.param("heritage_atlas.model.drafts", "EntityDraft", id="model_drafts"),
            # Repositories
            pytest.param("heritage_atlas.repositories", "GeoEntityRepository", id="repo_entity"),
            pytest.param("heritage_atlas.repositories", "AuthService", id="repo_auth"),
            # UI modules
            pytest.param("heritage_atlas.ui.map_renderer", "MapRenderer", id="ui_renderer"),
            pytest.param("heritage_atlas.ui.feature_sync", "FeatureSynchronizer", id="ui_sync"),
            pytest.param("heritage_atlas.ui.interaction", "InteractionController", id="ui_interaction"),
            pytest.param("heritage_atlas.ui.wizard", "RegistrationWizard", id="ui_wizard"),
            pytest.param("heritage_atlas.ui.click_detector", "ClickDetector", id="ui_detector"),
            pytest.param("heritage_atlas.app", "main", id="app"),
        ],
    )
    def test_module_import(self, module_path: str, class_name: str) -> None:
        """Module can be imported without errors."""
        import importlib

        module = importlib.import_module(module_path)
        cls = getattr(module, class_name)
        assert cls is not None


# =============================================================================
# CONFIGURATION VALIDATION TESTS
# =============================================================================


class TestConfigurationValidation:
    """Tests that configuration constants are valid and consistent."""

    def test_start_center_is_valid(self) -> None:
        """The default map center is a mappable coordinate."""
        from heritage_atlas.constants import MapConfig
        from heritage_atlas.core.geo_calculator import GeoCalculator

        assert GeoCalculator.is_valid_coordinate(MapConfig.START_CENTER_LAT, MapConfig.START_CENTER_LON)

    def test_interactive_layers(self) -> None:
        """Both the marker and the badge layer open popups."""
        from heritage_atlas.constants import LayerConfig

        assert set(LayerConfig.INTERACTIVE_LAYER_IDS) == {LayerConfig.MARKER_LAYER_ID, LayerConfig.BADGE_LAYER_ID}

    def test_icon_names_unique(self) -> None:
        """Icon registry names do not collide."""
        from heritage_atlas.constants import IconConfig

        names = [IconConfig.PROPERTY_ICON, IconConfig.SELECTED_ICON, IconConfig.BADGE_ICON, IconConfig.NO_IMAGE_ICON]
        assert len(names) == len(set(names))

    def test_pitch_limits(self) -> None:
        """The 3D tilt is within the 3D pitch limit."""
        from heritage_atlas.constants import MapConfig

        assert 0 < MapConfig.PITCH_3D <= MapConfig.MAX_PITCH_3D


# =============================================================================
# STATE MACHINE TESTS
# =============================================================================


class TestStateMachineConfiguration:
    """Tests for state machine setup."""

    @pytest.mark.parametrize("state_name", ["editing", "confirming", "complete"])
    def test_wizard_has_state(self, state_name: str) -> None:
        """RegistrationWizard defines expected state."""
        from heritage_atlas.ui.wizard import RegistrationWizard

        wizard, _ = RegistrationWizard.create(add_ui_listener=False)
        assert state_name in [s.value for s in wizard.states]

    @pytest.mark.parametrize("state_name", ["closed", "popup_open"])
    def test_popup_machine_has_state(self, state_name: str) -> None:
        """PopupStateMachine defines expected state."""
        from heritage_atlas.ui.interaction import PopupStateMachine

        sm, _ = PopupStateMachine.create(add_ui_listener=False)
        assert state_name in [s.value for s in sm.states]

    def test_wizard_starts_editing(self, wizard_and_draft: WizardAndDraft) -> None:
        """Wizard starts in the input step."""
        wizard, _ = wizard_and_draft
        assert wizard.current_state_value == "editing"
