from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class AnalysisMode(str, Enum):
    TEXT = "text"
    VISION = "vision"


class AnalysisFailure(str, Enum):
    REQUEST_FAILED = "request_failed"
    PARSE_FAILED = "parse_failed"


class PipelineState(str, Enum):
    RECEIVED = "received"
    EXTRACTING = "extracting"
    EXTRACTION_FAILED = "extraction_failed"
    EXTRACTION_OK = "extraction_ok"
    ANALYZING = "analyzing"
    ANALYSIS_DEGRADED = "analysis_degraded"
    ANALYSIS_OK = "analysis_ok"
    ASSEMBLING = "assembling"
    COMPLETED = "completed"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True)
class UploadedImage:
    path: Path
    mime_type: str
    size_bytes: int


@dataclass(frozen=True)
class ExtractionResult:
    raw_text: str
    succeeded: bool
    provider_error_message: str | None = None


@dataclass(frozen=True)
class AnalysisRequest:
    prompt_text: str
    model_id: str
    embedded_image: str | None = None


@dataclass(frozen=True)
class AnalysisResponse:
    raw_completion_text: str


@dataclass(frozen=True)
class ParsedMedicineInfo:
    name: str | None = None
    usage: str | None = None
    warnings: str | None = None


@dataclass(frozen=True)
class PipelineResult:
    extracted_text: str
    medicine_name: str
    usage: str
    warnings: str
