# ─────────────────────────────────────────────────────────────────────────────
# Prompt Templates — instruction wrapper for voxel generation
# ─────────────────────────────────────────────────────────────────────────────


# Kept inline with the model's expected output so the two never drift apart.
VOXEL_EXAMPLE = '[{"x":0,"y":0,"z":0,"c":"#FF0000"}, ...]'

GRID_SIZE = 12


def build_voxel_prompt(prompt: str) -> str:
    """Wrap the caller's subject in the voxel-generator instruction.

    The subject is interpolated verbatim (no escaping or quoting), so a
    prompt containing quotes reaches the model exactly as typed.

    Args:
        prompt: Free-text description of what to build (e.g., "a red house").

    Returns:
        A complete prompt string ready for generateContent.
    """
    return (
        "You are a Voxel Generator.\n"
        f'Task: Create a JSON array of voxels for: "{prompt}".\n'
        "Each voxel is an object with integer x, y, z coordinates "
        'and a hex color string c.\n'
        f"Format: {VOXEL_EXAMPLE}\n"
        f"Rules: Size approx {GRID_SIZE}x{GRID_SIZE}x{GRID_SIZE}. "
        "Return ONLY valid JSON. No markdown."
    )
