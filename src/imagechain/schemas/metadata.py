"""
Image metadata snapshot model.
"""

from pydantic import BaseModel, ConfigDict, Field


class ImageMeta(BaseModel):
    """
    Read-only snapshot of a handle's current state.

    Recomputed on every extraction; holding one never keeps the handle alive.
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=0, description="Width in pixels")
    height: int = Field(default=0, description="Height in pixels")
    channels: int = Field(default=0, description="Band count (1=grey, 3=colour, +1 with alpha)")
    format: str = Field(default="", description="Source container format, e.g. jpeg, png")
    colorspace: str = Field(default="", description="Colorspace, e.g. srgb, b-w")
    density_x: float = Field(default=0.0, description="Horizontal resolution (DPI)")
    density_y: float = Field(default=0.0, description="Vertical resolution (DPI)")
    file_size: int = Field(default=0, description="Encoded size hint, 0 for in-memory handles")
