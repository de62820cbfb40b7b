# ─────────────────────────────────────────────────────────────────────────────
# Tests — Voxel Extraction
# ─────────────────────────────────────────────────────────────────────────────

import pytest

from voxel_relay.exceptions import VoxelParseError
from voxel_relay.pipeline.extraction import (
    extract_voxel_array,
    slice_json_array,
    strip_code_fences,
)


class TestStripCodeFences:
    def test_removes_json_fence(self):
        assert strip_code_fences("```json\n[1]\n```") == "[1]"

    def test_removes_bare_fence(self):
        assert strip_code_fences("```\n[1]\n```  ") == "[1]"

    def test_plain_text_untouched(self):
        assert strip_code_fences("[1, 2]") == "[1, 2]"


class TestSliceJsonArray:
    def test_discards_surrounding_prose(self):
        assert slice_json_array("Here you go: [1, [2]] enjoy") == "[1, [2]]"

    def test_no_brackets_raises(self):
        with pytest.raises(VoxelParseError, match="No JSON array"):
            slice_json_array("I cannot help with that.")

    def test_closing_before_opening_raises(self):
        with pytest.raises(VoxelParseError):
            slice_json_array("] nope [")


class TestExtractVoxelArray:
    """Tests for extract_voxel_array()."""

    def test_fenced_reply(self):
        text = '```json\n[{"x":0,"y":0,"z":0,"c":"#FF0000"}]\n```'
        assert extract_voxel_array(text) == [{"x": 0, "y": 0, "z": 0, "c": "#FF0000"}]

    def test_leading_and_trailing_prose(self):
        text = 'Sure! [{"x":1,"y":2,"z":3,"c":"#00FF00"}] Done.'
        assert extract_voxel_array(text) == [{"x": 1, "y": 2, "z": 3, "c": "#00FF00"}]

    def test_empty_array(self):
        assert extract_voxel_array("[]") == []

    def test_truncated_array_raises(self):
        text = '[{"x":0,"y":0,"z":0,"c":"#FF0000"}, {"x":1,"y":0]'
        with pytest.raises(VoxelParseError):
            extract_voxel_array(text)

    def test_missing_close_bracket_raises(self):
        # Output cut off by maxOutputTokens: no closing "]" at all.
        with pytest.raises(VoxelParseError, match="No JSON array"):
            extract_voxel_array('[{"x":0,"y":0,"z":0,"c":"#FF0000"}, {"x":1')

    def test_nan_rejected(self):
        with pytest.raises(VoxelParseError, match="NaN"):
            extract_voxel_array('[{"x": NaN, "y": 0, "z": 0, "c": "#000000"}]')

    def test_elements_not_validated_by_default(self):
        text = '[{"x": "a", "colour": "red"}, 7]'
        assert extract_voxel_array(text) == [{"x": "a", "colour": "red"}, 7]

    def test_validate_accepts_well_formed(self):
        text = '[{"x":0,"y":1,"z":2,"c":"#ABCDEF"}]'
        assert extract_voxel_array(text, validate=True) == [
            {"x": 0, "y": 1, "z": 2, "c": "#ABCDEF"}
        ]

    def test_validate_rejects_missing_color(self):
        with pytest.raises(VoxelParseError, match="Invalid voxel data"):
            extract_voxel_array('[{"x":0,"y":1,"z":2}]', validate=True)

    def test_validate_rejects_float_coordinate(self):
        with pytest.raises(VoxelParseError, match="Invalid voxel data"):
            extract_voxel_array('[{"x":0.5,"y":1,"z":2,"c":"#000000"}]', validate=True)

    def test_deeply_nested_array_raises_parse_error(self):
        text = "[" * 100000 + "]" * 100000
        with pytest.raises(VoxelParseError, match="recursion"):
            extract_voxel_array(text)
