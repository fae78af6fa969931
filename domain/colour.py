"""Beer colour swatches from EBC values."""

from typing import NamedTuple


class ColourBand(NamedTuple):
    upper: float
    name: str
    hex: str


# Ordered by exclusive upper bound.
EBC_BANDS: tuple[ColourBand, ...] = (
    ColourBand(6, "Pale straw", "#F8F753"),
    ColourBand(9, "Straw", "#FBEA51"),
    ColourBand(12, "Pale gold", "#FDE14D"),
    ColourBand(16, "Deep gold", "#FDCB46"),
    ColourBand(20, "Pale amber", "#F0A942"),
    ColourBand(26, "Medium amber", "#E58C3C"),
    ColourBand(33, "Deep amber", "#D97C36"),
    ColourBand(39, "Copper", "#C0602B"),
    ColourBand(47, "Light brown", "#AE502C"),
    ColourBand(57, "Brown", "#8B422A"),
    ColourBand(69, "Dark brown", "#6A3423"),
    ColourBand(79, "Very dark brown", "#4A2A1E"),
)
BLACK = ColourBand(float("inf"), "Black", "#2A1D1A")
DEFAULT_BAND = EBC_BANDS[0]


def ebc_band(ebc: float | None) -> ColourBand:
    if ebc is None or ebc < 0:
        return DEFAULT_BAND
    for band in EBC_BANDS:
        if ebc < band.upper:
            return band
    return BLACK


def ebc_to_hex(ebc: float | None) -> str:
    return ebc_band(ebc).hex
