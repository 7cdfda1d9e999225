from __future__ import annotations

import logging
import uuid

from medscan.application.analysis import AnalysisClient
from medscan.application.assembler import assemble_result
from medscan.application.extraction import TextExtractionClient
from medscan.application.ingest import IngestGate
from medscan.application.reaper import ResourceReaper
from medscan.domain.errors import AnalysisError, ExtractionError
from medscan.domain.models import ParsedMedicineInfo, PipelineResult, PipelineState
from medscan.infra.ports.storage import StoragePort

logger = logging.getLogger(__name__)


class ScanPipeline:
    """Upload -> OCR -> analysis -> assembled result, with the upload reaped on every exit.

    The pipeline holds no per-request state; each ``run`` call owns its own
    uploaded image.
    """

    def __init__(
        self,
        *,
        storage: StoragePort,
        extraction: TextExtractionClient,
        analysis: AnalysisClient,
    ):
        self.storage = storage
        self.ingest_gate = IngestGate(storage=storage)
        self.extraction = extraction
        self.analysis = analysis

    @staticmethod
    def _transition(scan_id: str, state: PipelineState) -> PipelineState:
        logger.info("scan %s: %s", scan_id, state.value)
        return state

    async def run(
        self,
        *,
        filename: str | None,
        content_type: str | None,
        payload: bytes | None,
    ) -> PipelineResult:
        scan_id = uuid.uuid4().hex[:12]
        image = self.ingest_gate.ingest(filename=filename, content_type=content_type, payload=payload)
        self._transition(scan_id, PipelineState.RECEIVED)

        try:
            async with ResourceReaper(storage=self.storage, image=image):
                self._transition(scan_id, PipelineState.EXTRACTING)
                try:
                    extracted_text = await self.extraction.extract_text(image)
                except ExtractionError:
                    self._transition(scan_id, PipelineState.EXTRACTION_FAILED)
                    raise
                self._transition(scan_id, PipelineState.EXTRACTION_OK)

                self._transition(scan_id, PipelineState.ANALYZING)
                info: ParsedMedicineInfo | None = None
                failure: AnalysisError | None = None
                try:
                    info = await self.analysis.analyze(image, extracted_text)
                except AnalysisError as exc:
                    logger.error("scan %s: analysis failed (%s): %s", scan_id, exc.cause.value, exc.message)
                    failure = exc
                    self._transition(scan_id, PipelineState.ANALYSIS_DEGRADED)
                else:
                    self._transition(scan_id, PipelineState.ANALYSIS_OK)

                self._transition(scan_id, PipelineState.ASSEMBLING)
                result = assemble_result(extracted_text, info, failure)
        except ExtractionError:
            raise
        except Exception:
            self._transition(scan_id, PipelineState.SERVER_ERROR)
            raise

        self._transition(scan_id, PipelineState.COMPLETED)
        return result
