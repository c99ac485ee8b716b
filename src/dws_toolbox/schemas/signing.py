from __future__ import annotations

from typing import Literal

from pydantic import Field

from .instructions import DWSModel


class SignatureAppearance(DWSModel):
    mode: Literal["signatureOnly", "signatureAndDescription", "descriptionOnly"] = (
        "signatureAndDescription"
    )
    content_type: str | None = Field(
        None,
        description="Content type of the watermark image (application/pdf, image/png, image/jpeg).",
    )
    show_signer: bool = True
    show_reason: bool = False
    show_location: bool = False
    show_watermark: bool = True
    show_sign_date: bool = True
    show_date_timezone: bool = False


class SignaturePosition(DWSModel):
    page_index: int = Field(..., ge=0, description="0-based page index of the signature.")
    rect: tuple[float, float, float, float] = Field(
        ...,
        description="Bounding box [left, top, width, height] in PDF points.",
    )


class SignatureMetadata(DWSModel):
    signer_name: str | None = None
    signature_reason: str | None = None
    signature_location: str | None = None


class SignatureOptions(DWSModel):
    signature_type: Literal["cms", "cades"] = "cms"
    flatten: bool = False
    form_field_name: str | None = Field(
        None,
        description="Existing signature form field to sign.",
    )
    appearance: SignatureAppearance | None = Field(
        None,
        description="Appearance of a visible signature. Omit for an invisible signature.",
    )
    position: SignaturePosition | None = None
    signature_metadata: SignatureMetadata | None = None
    cades_level: Literal["b-lt", "b-t", "b-b"] | None = None

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "SignatureAppearance",
    "SignatureMetadata",
    "SignatureOptions",
    "SignaturePosition",
]
