"""Tests for click detection and st_deckgl event parsing.

Covers deduplication across reruns, marker vs empty-map clicks, and the
flattened event shape st_deckgl returns.
"""

from heritage_atlas.constants import LayerConfig
from heritage_atlas.model.click_info import MapClickType
from heritage_atlas.ui.click_detector import ClickDeduplicationContext, ClickDetector
from heritage_atlas.ui.pydeck_click_handler import parse_deckgl_event

MARKER_ROW = {"type": LayerConfig.TYPE_PROPERTY, "id": 2, "name": "Kaminarimon", "position": [139.7963, 35.7112]}


class TestClickDeduplication:
    """Tests for rerun deduplication."""

    def test_same_click_once(self) -> None:
        """The same key is new only the first time."""
        dedup = ClickDeduplicationContext()
        assert dedup.is_new_click((139.0, 35.0), None)
        assert not dedup.is_new_click((139.0, 35.0), None)

    def test_different_click_is_new(self) -> None:
        """A different coordinate is a new click."""
        dedup = ClickDeduplicationContext()
        dedup.is_new_click((139.0, 35.0), None)
        assert dedup.is_new_click((139.1, 35.0), None)

    def test_nothing_is_never_new(self) -> None:
        """No object and no coordinate is not a click."""
        assert not ClickDeduplicationContext().is_new_click(None, None)

    def test_clear(self) -> None:
        """clear forgets the last click."""
        dedup = ClickDeduplicationContext()
        dedup.is_new_click((1.0, 2.0), None)
        dedup.clear()
        assert dedup.is_new_click((1.0, 2.0), None)


class TestClickDetector:
    """Tests for ClickInfo detection."""

    def test_marker_click(self) -> None:
        """A picked row becomes a FEATURE click with the entity id."""
        click = ClickDetector().detect(MARKER_ROW, [139.7963, 35.7112])

        assert click is not None
        assert click.click_type == MapClickType.FEATURE
        assert click.entity_id == 2
        assert click.layer_id == LayerConfig.MARKER_LAYER_ID
        assert click.position == (139.7963, 35.7112)

    def test_badge_layer_kept(self) -> None:
        """The layer id is passed through when known."""
        click = ClickDetector().detect(MARKER_ROW, [139.7963, 35.7112], layer_id=LayerConfig.BADGE_LAYER_ID)
        assert click is not None
        assert click.layer_id == LayerConfig.BADGE_LAYER_ID

    def test_map_click(self) -> None:
        """No picked row is a MAP click at the coordinate."""
        click = ClickDetector().detect(None, [139.8, 35.7])

        assert click is not None
        assert click.click_type == MapClickType.MAP
        assert (click.lat, click.lon) == (35.7, 139.8)

    def test_repeat_event_ignored(self) -> None:
        """The same event on the next rerun is not processed again."""
        detector = ClickDetector()
        assert detector.detect(MARKER_ROW, [139.7963, 35.7112]) is not None
        assert detector.detect(MARKER_ROW, [139.7963, 35.7112]) is None

    def test_geojson_feature_object(self) -> None:
        """GeoJSON features are read through their properties."""
        feature = {"type": "Feature", "properties": {"type": LayerConfig.TYPE_PROPERTY, "id": "7"}}
        click = ClickDetector().detect(feature, [139.0, 35.0])
        assert click is not None
        assert click.entity_id == 7

    def test_unknown_type_ignored(self) -> None:
        """Rows of other types are not clicks on properties."""
        assert ClickDetector().detect({"type": "building", "id": 1}, [139.0, 35.0]) is None

    def test_invalid_id_ignored(self) -> None:
        """Rows with unparseable ids are ignored."""
        assert ClickDetector().detect({"type": LayerConfig.TYPE_PROPERTY, "id": "abc"}, [139.0, 35.0]) is None

    def test_position_fallback(self) -> None:
        """Without a click coordinate the row position is used."""
        click = ClickDetector().detect(MARKER_ROW, None)
        assert click is not None
        assert click.position == (139.7963, 35.7112)


class TestParseDeckglEvent:
    """Tests for st_deckgl event parsing."""

    def test_object_click(self) -> None:
        """Spread row properties become the clicked object."""
        result = parse_deckgl_event({**MARKER_ROW, "coordinate": [139.79, 35.71], "eventType": "click"})

        assert result.is_object_click
        assert result.clicked_object["id"] == 2
        assert "coordinate" not in result.clicked_object
        assert result.clicked_coordinate == [139.79, 35.71]

    def test_map_click(self) -> None:
        """Events without a row are map clicks."""
        result = parse_deckgl_event({"coordinate": [139.79, 35.71], "eventType": "click"})
        assert result.is_map_click

    def test_empty(self) -> None:
        """None and junk events are empty results."""
        assert not parse_deckgl_event(None).is_object_click
        assert not parse_deckgl_event("x").is_map_click
        assert parse_deckgl_event({}).clicked_coordinate is None
