# ─────────────────────────────────────────────────────────────────────────────
# Tests — Prompt Templates
# ─────────────────────────────────────────────────────────────────────────────

from voxel_relay.pipeline.prompt_templates import build_voxel_prompt


class TestBuildVoxelPrompt:
    """Tests for build_voxel_prompt()."""

    def test_contains_subject(self):
        result = build_voxel_prompt("a red castle")
        assert 'voxels for: "a red castle"' in result

    def test_names_the_task(self):
        result = build_voxel_prompt("tree")
        assert "Voxel Generator" in result

    def test_specifies_output_shape(self):
        result = build_voxel_prompt("tree")
        assert '[{"x":0,"y":0,"z":0,"c":"#FF0000"}, ...]' in result

    def test_bounds_size(self):
        result = build_voxel_prompt("tree")
        assert "12x12x12" in result

    def test_demands_plain_json(self):
        result = build_voxel_prompt("tree")
        assert "Return ONLY valid JSON" in result
        assert "No markdown" in result

    def test_subject_is_not_escaped(self):
        result = build_voxel_prompt('a "quoted" {brace} subject')
        assert 'a "quoted" {brace} subject' in result

    def test_different_subjects_produce_different_prompts(self):
        assert build_voxel_prompt("horse") != build_voxel_prompt("eagle")
