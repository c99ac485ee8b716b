from .credits import (
    BalanceReport,
    Confidence,
    Forecast,
    OperationUsage,
    Period,
    PeriodRange,
    UsageSummary,
)
from .filesystem import TreeEntry
from .instructions import (
    ApplyInstantJsonAction,
    ApplyRedactionsAction,
    ApplyXfdfAction,
    BuildAction,
    BuildOutput,
    CreateRedactionsAction,
    FilePart,
    FlattenAction,
    ImageOutput,
    Instructions,
    JSONContentOutput,
    OcrAction,
    OfficeOutput,
    OptimizePdf,
    PDFAOutput,
    PDFOutput,
    PageRange,
    RotateAction,
    WatermarkAction,
)
from .results import ToolResult
from .signing import SignatureAppearance, SignatureMetadata, SignatureOptions, SignaturePosition

__all__ = [
    "ApplyInstantJsonAction",
    "ApplyRedactionsAction",
    "ApplyXfdfAction",
    "BalanceReport",
    "BuildAction",
    "BuildOutput",
    "Confidence",
    "CreateRedactionsAction",
    "FilePart",
    "FlattenAction",
    "Forecast",
    "ImageOutput",
    "Instructions",
    "JSONContentOutput",
    "OcrAction",
    "OfficeOutput",
    "OperationUsage",
    "OptimizePdf",
    "PDFAOutput",
    "PDFOutput",
    "PageRange",
    "Period",
    "PeriodRange",
    "RotateAction",
    "SignatureAppearance",
    "SignatureMetadata",
    "SignatureOptions",
    "SignaturePosition",
    "ToolResult",
    "TreeEntry",
    "UsageSummary",
    "WatermarkAction",
]
