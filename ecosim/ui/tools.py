"""Placement toolbar: which kind each number key places in the viewer."""

from typing import Optional, Tuple

from ecosim.world.kinds import Kind

# Slot i is number key i + 1, with slot 9 on the 0 key
TOOLBAR: Tuple[Kind, ...] = (
    Kind.SHEEP, Kind.RABBIT, Kind.CHICKEN, Kind.DUCK, Kind.CAT,
    Kind.DOG, Kind.FOX, Kind.FENCE, Kind.TREE, Kind.CARROT,
)
# Same slots with shift held
SHIFT_TOOLBAR: Tuple[Kind, ...] = (
    Kind.WALL, Kind.POND, Kind.BONFIRE, Kind.ROCK, Kind.FLOWER, Kind.GRASS,
)

def tool_for_slot(slot: int, shifted: bool = False) -> Optional[Kind]:
    """Returns the kind bound to a number-key slot, or None for an empty slot."""
    row = SHIFT_TOOLBAR if shifted else TOOLBAR
    if 0 <= slot < len(row):
        return row[slot]
    return None

def placeable_kinds() -> Tuple[Kind, ...]:
    return TOOLBAR + SHIFT_TOOLBAR
