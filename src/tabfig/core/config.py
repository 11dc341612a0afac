from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..compile.convert import OUTPUT_FORMATS
from ..themes.theme import FONT_SIZES


class TableConfig(BaseModel):
    filename: Optional[str] = None
    output_directory: str = "figures"
    shading_color: Optional[str] = None
    document_class: str = Field(default="article", pattern=r"^[A-Za-z][A-Za-z0-9-]*$")
    longtable: bool = False
    caption: Optional[str] = None
    caption_short: Optional[str] = None
    label: Optional[str] = None
    crop: bool = True
    crop_margin: float = Field(default=10, ge=0)
    verbose: bool = False
    timeout: Optional[float] = Field(default=None, gt=0)
    font_size: Optional[str] = None
    header_bold: Optional[bool] = None
    striped: Optional[bool] = None
    use_cache: bool = False
    compiler: str = Field(default="pdflatex", min_length=1)
    cropper: str = Field(default="pdfcrop", min_length=1)
    output_format: str = "pdf"
    dpi: int = Field(default=300, gt=0)
    converter: Optional[str] = Field(default=None, min_length=1)

    @field_validator("font_size")
    @classmethod
    def _known_font_size(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in FONT_SIZES:
            raise ValueError(f"font_size must be one of {', '.join(FONT_SIZES)}")
        return v

    @field_validator("output_format")
    @classmethod
    def _known_output_format(cls, v: str) -> str:
        v = v.lower()
        if v not in OUTPUT_FORMATS:
            raise ValueError(f"output_format must be one of {', '.join(OUTPUT_FORMATS)}")
        return v

    @field_validator("shading_color")
    @classmethod
    def _non_blank_color(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("shading_color must not be blank")
        return v


class ProjectConfig(TableConfig):
    """Defaults read from ``tabfig.yaml``; adds the string-valued style options."""

    theme: Optional[str] = None
    alignment: Optional[str] = None
    extra_packages: List[str] = Field(default_factory=list)
