# ─────────────────────────────────────────────────────────────────────────────
# Voxel Extraction — model text → JSON array
# ─────────────────────────────────────────────────────────────────────────────
# Models routinely wrap JSON in ```json fences or add a sentence before and
# after it. Contract:
#   1. drop every ```json and ``` token, strip whitespace
#   2. slice from the first "[" to the last "]" (inclusive)
#   3. strict JSON parse; the result must be a list
# Any failure raises VoxelParseError; unparsed text is never returned.
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from voxel_relay.exceptions import VoxelParseError
from voxel_relay.schemas import VoxelDescriptor

_FENCE_TOKENS = ("```json", "```")

_voxel_list_adapter = TypeAdapter(list[VoxelDescriptor])


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence tokens and surrounding whitespace."""
    for token in _FENCE_TOKENS:
        text = text.replace(token, "")
    return text.strip()


def slice_json_array(text: str) -> str:
    """Return the span from the first ``[`` to the last ``]``.

    Raises:
        VoxelParseError: If no bracketed span exists.
    """
    first = text.find("[")
    last = text.rfind("]")
    if first == -1 or last == -1 or last < first:
        raise VoxelParseError("No JSON array found in model output")
    return text[first : last + 1]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def extract_voxel_array(text: str, validate: bool = False) -> list[Any]:
    """Clean raw model text and parse it into a list of voxel dicts.

    Args:
        text: Raw ``candidates[0].content.parts[0].text`` from the model.
        validate: Also require every element to match VoxelDescriptor.

    Returns:
        The parsed JSON array, exactly as decoded (not coerced).

    Raises:
        VoxelParseError: On missing brackets, invalid JSON, or (with
            ``validate``) a malformed element.
    """
    payload = slice_json_array(strip_code_fences(text))

    try:
        data = json.loads(payload, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError is a ValueError; deep nesting exhausts the C decoder stack
        raise VoxelParseError(str(e)) from e

    # A span that starts with "[" and parses is always a list; an object
    # such as {"voxels": [...]} was already reduced to its inner array.
    if validate:
        try:
            _voxel_list_adapter.validate_python(data, strict=True)
        except ValidationError as e:
            raise VoxelParseError(
                f"Invalid voxel data: {e.error_count()} validation error(s), "
                f"first: {e.errors()[0]['msg']}"
            ) from e

    return data
