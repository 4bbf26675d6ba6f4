"""Interpreter variant selection (quirks)."""

import dataclasses
from typing import Any, Mapping

from flax.struct import dataclass, field


@dataclass(frozen=True)
class Quirks:
    """Behavioural choices where CHIP-8 interpreters disagree.

    Attributes:
        shift_uses_vy: 8XY6/8XYE shift VY into VX (False: shift VX in place)
        logic_resets_vf: 8XY1/8XY2/8XY3 clear VF (False: VF untouched)
        sprite_wrap: Sprite pixels past the screen edge wrap around (False: clipped)
        jump_uses_vx: BXNN jumps to XNN + VX (False: BNNN jumps to NNN + V0)
        load_store_increments_index: FX55/FX65 leave I at I + X + 1 (False: I unchanged)
        display_wait: DXYN waits for the draw permit granted once per refresh
    """
    shift_uses_vy: bool = field(pytree_node=False, default=True)
    logic_resets_vf: bool = field(pytree_node=False, default=True)
    sprite_wrap: bool = field(pytree_node=False, default=False)
    jump_uses_vx: bool = field(pytree_node=False, default=False)
    load_store_increments_index: bool = field(pytree_node=False, default=True)
    display_wait: bool = field(pytree_node=False, default=True)


QUIRK_PRESETS = {
    "cosmac": Quirks(),
    "modern": Quirks(
        shift_uses_vy=False,
        logic_resets_vf=False,
        sprite_wrap=False,
        jump_uses_vx=True,
        load_store_increments_index=False,
        display_wait=False,
    ),
}


def quirks_from_config(config: Mapping[str, Any] | None = None) -> Quirks:
    """Build quirks from a ``preset`` name plus per-quirk overrides."""
    options = dict(config or {})
    preset = options.pop("preset", None) or "cosmac"

    if preset not in QUIRK_PRESETS:
        raise ValueError(
            f"Unknown quirk preset '{preset}'. Available: {list(QUIRK_PRESETS.keys())}"
        )

    base = QUIRK_PRESETS[preset]
    unknown = set(options) - {f.name for f in dataclasses.fields(base)}
    if unknown:
        raise ValueError(f"Unknown quirk option(s): {sorted(unknown)}")

    return base.replace(**{name: bool(value) for name, value in options.items()})
