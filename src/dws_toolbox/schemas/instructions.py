from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_PATH_HINT = (
    "Resolves to sandbox path if enabled, otherwise resolves to the local file system. "
    "http(s) URLs are fetched by the service."
)


class DWSModel(BaseModel):
    """Wire models use camelCase; Python code may use either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageRange(DWSModel):
    start: int = Field(0, description="Start page index (0-based). Default is the first page.")
    end: int = Field(
        -1,
        description="End page index (0-based). Negative values count from the end.",
    )


class FilePart(DWSModel):
    file: str = Field(..., description=f"The file to be processed. {_PATH_HINT}")
    password: str | None = Field(None, description="Password of a protected input file.")
    pages: PageRange | None = Field(None, description="Page range to include from the file.")
    content_type: str | None = Field(
        None,
        alias="content_type",
        description="File type hint when it cannot be inferred from the content.",
    )


class ApplyXfdfAction(DWSModel):
    type: Literal["applyXfdf"] = "applyXfdf"
    file: str = Field(..., description=f"The XFDF file to import annotations from. {_PATH_HINT}")


class ApplyInstantJsonAction(DWSModel):
    type: Literal["applyInstantJson"] = "applyInstantJson"
    file: str = Field(..., description=f"The Instant JSON file to apply. {_PATH_HINT}")


class FlattenAction(DWSModel):
    type: Literal["flatten"] = "flatten"


class OcrAction(DWSModel):
    type: Literal["ocr"] = "ocr"
    language: str = Field(..., description="Language used for the OCR text extraction.")


class RotateAction(DWSModel):
    type: Literal["rotate"] = "rotate"
    rotate_by: Literal[90, 180, 270] = Field(..., description="Clockwise rotation angle.")


WatermarkDimension = Union[
    float,
    Annotated[str, Field(pattern=r"^\d+%$", description="Percentage value")],
]


class WatermarkAction(DWSModel):
    type: Literal["watermark"] = "watermark"
    watermark_type: Literal["text", "image"]
    width: WatermarkDimension = Field(..., description="Width in points or percentage.")
    height: WatermarkDimension = Field(..., description="Height in points or percentage.")
    rotation: float = Field(0, description="Counterclockwise rotation in degrees.")
    opacity: float | None = Field(None, ge=0.0, le=1.0)
    text: str | None = Field(None, description="Text used for text watermarks.")
    font_color: str | None = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")
    image: str | None = Field(None, description=f"Image used for image watermarks. {_PATH_HINT}")


SearchPreset = Literal[
    "credit-card-number",
    "date",
    "email-address",
    "international-phone-number",
    "ipv4",
    "ipv6",
    "mac-address",
    "north-american-phone-number",
    "social-security-number",
    "time",
    "url",
    "us-zip-code",
    "vin",
]


class _StrategyOptions(DWSModel):
    include_annotations: bool = True
    start: int = 0
    limit: int | None = None


class PresetStrategyOptions(_StrategyOptions):
    preset: SearchPreset


class RegexStrategyOptions(_StrategyOptions):
    regex: str
    case_sensitive: bool = True


class TextStrategyOptions(_StrategyOptions):
    text: str
    case_sensitive: bool = False


class CreateRedactionsAction(DWSModel):
    type: Literal["createRedactions"] = "createRedactions"
    strategy: Literal["preset", "regex", "text"]
    strategy_options: PresetStrategyOptions | RegexStrategyOptions | TextStrategyOptions


class ApplyRedactionsAction(DWSModel):
    type: Literal["applyRedactions"] = "applyRedactions"


BuildAction = Annotated[
    Union[
        ApplyXfdfAction,
        ApplyInstantJsonAction,
        FlattenAction,
        OcrAction,
        RotateAction,
        WatermarkAction,
        CreateRedactionsAction,
        ApplyRedactionsAction,
    ],
    Field(discriminator="type"),
]


class DocumentMetadata(DWSModel):
    title: str | None = None
    author: str | None = None


class PageLabel(DWSModel):
    pages: PageRange
    label: str


class OptimizePdf(DWSModel):
    grayscale_text: bool = False
    grayscale_graphics: bool = False
    grayscale_images: bool = False
    grayscale_form_fields: bool = False
    grayscale_annotations: bool = False
    disable_images: bool = False
    mrc_compression: bool = False
    image_optimization_quality: int = Field(2, ge=1, le=4)
    linearize: bool = False


UserPermission = Literal[
    "printing",
    "modification",
    "extract",
    "annotations_and_forms",
    "fill_forms",
    "extract_accessibility",
    "assemble",
    "print_high_quality",
]


class _PDFOutputBase(DWSModel):
    metadata: DocumentMetadata | None = None
    labels: list[PageLabel] | None = None
    user_password: str | None = Field(None, alias="user_password")
    owner_password: str | None = Field(None, alias="owner_password")
    user_permissions: list[UserPermission] | None = Field(None, alias="user_permissions")
    optimize: OptimizePdf | None = None


class PDFOutput(_PDFOutputBase):
    type: Literal["pdf"] = "pdf"


class PDFAOutput(_PDFOutputBase):
    type: Literal["pdfa"] = "pdfa"
    conformance: (
        Literal["pdfa-1a", "pdfa-1b", "pdfa-2a", "pdfa-2u", "pdfa-2b", "pdfa-3a", "pdfa-3u"]
        | None
    ) = None
    vectorization: bool = True
    rasterization: bool = True


class ImageOutput(DWSModel):
    type: Literal["image"] = "image"
    format: Literal["png", "jpeg", "jpg", "webp"] = "png"
    pages: PageRange | None = None
    width: float | None = None
    height: float | None = None
    dpi: float | None = None


class JSONContentOutput(DWSModel):
    type: Literal["json-content"] = "json-content"
    plain_text: bool = True
    key_value_pairs: bool = False
    tables: bool = True
    language: str | list[str] | None = None


class OfficeOutput(DWSModel):
    type: Literal["docx", "xlsx", "pptx"]


BuildOutput = Annotated[
    Union[PDFOutput, PDFAOutput, ImageOutput, JSONContentOutput, OfficeOutput],
    Field(discriminator="type"),
]


class Instructions(DWSModel):
    parts: list[FilePart] = Field(..., description="Parts of the document to be built.")
    actions: list[BuildAction] | None = Field(
        None,
        description="Actions applied to the document after it is built from the parts.",
    )
    output: BuildOutput | None = Field(None, description="Output format configuration.")

    @property
    def wants_json_content(self) -> bool:
        return isinstance(self.output, JSONContentOutput)

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "ApplyInstantJsonAction",
    "ApplyRedactionsAction",
    "ApplyXfdfAction",
    "BuildAction",
    "BuildOutput",
    "CreateRedactionsAction",
    "DWSModel",
    "DocumentMetadata",
    "FilePart",
    "FlattenAction",
    "ImageOutput",
    "Instructions",
    "JSONContentOutput",
    "OcrAction",
    "OfficeOutput",
    "OptimizePdf",
    "PDFAOutput",
    "PDFOutput",
    "PageLabel",
    "PageRange",
    "PresetStrategyOptions",
    "RegexStrategyOptions",
    "RotateAction",
    "TextStrategyOptions",
    "WatermarkAction",
]
