from __future__ import annotations

from medscan.domain.errors import AnalysisError
from medscan.domain.models import AnalysisFailure, ParsedMedicineInfo, PipelineResult

UNKNOWN_NAME = "Unknown"
NOT_FOUND = "Information not found."

DIAGNOSTICS = {
    AnalysisFailure.REQUEST_FAILED: (
        "Could not analyze the medicine automatically. Please check your OpenRouter API key."
    ),
    AnalysisFailure.PARSE_FAILED: (
        "Could not understand the analysis service response. "
        "The service may be temporarily unavailable; please try again."
    ),
}


def assemble_result(
    extracted_text: str,
    info: ParsedMedicineInfo | None = None,
    error: AnalysisError | None = None,
) -> PipelineResult:
    if error is not None:
        return PipelineResult(
            extracted_text=extracted_text,
            medicine_name=UNKNOWN_NAME,
            usage=DIAGNOSTICS[error.cause],
            warnings=NOT_FOUND,
        )

    info = info or ParsedMedicineInfo()
    return PipelineResult(
        extracted_text=extracted_text,
        medicine_name=info.name or UNKNOWN_NAME,
        usage=info.usage or NOT_FOUND,
        warnings=info.warnings or NOT_FOUND,
    )
