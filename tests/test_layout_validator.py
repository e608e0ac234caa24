import pytest

from archfolio.errors import LayoutValidationError, ValidationErrorKind
from archfolio.layout.schema import ImageComponent, TextComponent
from archfolio.layout.validator import validate_layout
from conftest import layout_payload


@pytest.mark.parametrize("grid_cols", [0, 13, -1, 100, "4", None, True, 4.5])
def test_grid_cols_outside_range_is_rejected(grid_cols):
    raw = layout_payload()
    raw["gridCols"] = grid_cols
    result = validate_layout(raw, asset_count=1)
    assert not result.ok
    assert result.layout is None
    assert result.error.kind is ValidationErrorKind.OUT_OF_RANGE_GRID_COLS


def test_missing_grid_cols_is_rejected():
    raw = layout_payload()
    del raw["gridCols"]
    assert validate_layout(raw, 1).error.kind is ValidationErrorKind.OUT_OF_RANGE_GRID_COLS


def test_narrower_bounds_apply():
    result = validate_layout(layout_payload(grid_cols=8), 1, grid_cols_bounds=(2, 6))
    assert result.error.kind is ValidationErrorKind.OUT_OF_RANGE_GRID_COLS


def test_bounds_outside_hard_range_raise():
    with pytest.raises(ValueError):
        validate_layout(layout_payload(), 1, grid_cols_bounds=(0, 20))


@pytest.mark.parametrize("raw", [None, [], "layout", 42])
def test_non_object_payload_is_malformed(raw):
    assert validate_layout(raw, 1).error.kind is ValidationErrorKind.MALFORMED_PAYLOAD


@pytest.mark.parametrize("components", [None, "image", {"type": "image"}])
def test_components_must_be_a_list(components):
    raw = {"gridCols": 4, "components": components}
    assert validate_layout(raw, 1).error.kind is ValidationErrorKind.MALFORMED_PAYLOAD


def test_unknown_component_type_is_rejected():
    raw = layout_payload()
    raw["components"].append({"type": "video", "gridPosition": {"colSpan": 1, "rowSpan": 1}, "content": {}})
    result = validate_layout(raw, 1)
    assert result.error.kind is ValidationErrorKind.UNKNOWN_COMPONENT_TYPE
    assert result.error.component_index == 2


def test_col_span_wider_than_grid_is_rejected():
    raw = {
        "gridCols": 4,
        "components": [{"type": "image", "gridPosition": {"colSpan": 5, "rowSpan": 1}, "content": {"imageIndex": 0}}],
    }
    result = validate_layout(raw, asset_count=1)
    assert result.error.kind is ValidationErrorKind.INVALID_SPAN
    assert result.error.component_index == 0
    assert "5" in result.error.message


@pytest.mark.parametrize(
    "grid_position",
    [{"colSpan": 0, "rowSpan": 1}, {"colSpan": 1, "rowSpan": 0}, {"colSpan": 1}, None, {"colSpan": 1.5, "rowSpan": 1}],
)
def test_bad_spans_are_rejected(grid_position):
    raw = layout_payload()
    raw["components"][0]["gridPosition"] = grid_position
    assert validate_layout(raw, 1).error.kind is ValidationErrorKind.INVALID_SPAN


@pytest.mark.parametrize("index", [1, 5, -1, None, "0", 0.5])
def test_image_index_out_of_range_is_rejected(index):
    raw = layout_payload()
    raw["components"][0]["content"] = {"imageIndex": index}
    result = validate_layout(raw, asset_count=1)
    assert result.error.kind is ValidationErrorKind.IMAGE_INDEX_OUT_OF_RANGE
    assert result.layout is None


def test_image_without_any_assets_is_rejected():
    assert validate_layout(layout_payload(), asset_count=0).error.kind is ValidationErrorKind.IMAGE_INDEX_OUT_OF_RANGE


@pytest.mark.parametrize(
    "content",
    [{"title": "", "content": "x"}, {"title": "Plan", "content": "   "}, {"title": "Plan"}, None, {"title": 3, "content": "x"}],
)
def test_text_box_needs_title_and_content(content):
    raw = layout_payload()
    raw["components"][-1]["content"] = content
    assert validate_layout(raw, 1).error.kind is ValidationErrorKind.INVALID_TEXT_CONTENT


def test_span_check_runs_before_index_check():
    raw = layout_payload(image_indices=(0, 9))
    raw["components"][-1]["gridPosition"] = {"colSpan": 9, "rowSpan": 1}
    assert validate_layout(raw, 1).error.kind is ValidationErrorKind.INVALID_SPAN


def test_accepted_layout_keeps_spans_within_grid():
    result = validate_layout(layout_payload(grid_cols=3, image_indices=(0, 1, 2)), asset_count=3)
    layout = result.unwrap()
    assert layout.grid_cols == 3
    assert all(c.grid_position.col_span <= layout.grid_cols for c in layout.components)
    assert isinstance(layout.components[0], ImageComponent)
    assert isinstance(layout.components[-1], TextComponent)


def test_generation_envelope_is_unwrapped():
    raw = {"layoutDescription": "Hero left, details right.", "layout": layout_payload()}
    layout = validate_layout(raw, 1).unwrap()
    assert layout.description == "Hero left, details right."
    assert len(layout.components) == 2


def test_integral_floats_are_accepted():
    raw = layout_payload()
    raw["gridCols"] = 4.0
    raw["components"][0]["content"]["imageIndex"] = 0.0
    layout = validate_layout(raw, 1).unwrap()
    assert layout.grid_cols == 4
    assert layout.image_indices() == [0]


def test_unknown_keys_are_dropped():
    raw = layout_payload()
    raw["components"][0]["content"]["caption"] = "<script>"
    raw["components"][0]["zIndex"] = 3
    layout = validate_layout(raw, 1).unwrap()
    assert "caption" not in layout.to_payload()["components"][0]["content"]


def test_revalidating_an_accepted_layout_is_idempotent():
    first = validate_layout({"description": "d", **layout_payload(image_indices=(1, 0))}, 2).unwrap()
    assert validate_layout(first.to_payload(), 2).unwrap() == first
    assert validate_layout(first, 2).unwrap() == first


def test_incomplete_coverage_is_a_warning_not_a_rejection():
    result = validate_layout(layout_payload(image_indices=(0, 0, 2)), asset_count=4)
    assert result.ok
    assert result.incomplete_coverage
    assert result.missing_indices == (1, 3)


def test_full_coverage_has_no_warning():
    result = validate_layout(layout_payload(image_indices=(1, 0)), asset_count=2)
    assert result.ok and not result.incomplete_coverage


def test_unwrap_raises_the_rejection():
    result = validate_layout({"gridCols": 99, "components": []}, 0)
    with pytest.raises(LayoutValidationError) as excinfo:
        result.unwrap()
    assert excinfo.value.kind is ValidationErrorKind.OUT_OF_RANGE_GRID_COLS
