from __future__ import annotations

from functools import lru_cache

from medscan.application.analysis import AnalysisClient
from medscan.application.extraction import TextExtractionClient
from medscan.application.retry import RetryPolicy
from medscan.application.scan import ScanPipeline
from medscan.core.config import get_settings
from medscan.domain.models import AnalysisMode
from medscan.infra.llm.mock import MockLLM
from medscan.infra.llm.openrouter import OpenRouterLLM
from medscan.infra.ocr.mock import MockOCR
from medscan.infra.ocr.ocr_space import OCRSpaceOCR
from medscan.infra.ports.llm import CompletionPort
from medscan.infra.ports.ocr import OCRPort
from medscan.infra.ports.storage import StoragePort
from medscan.infra.storage.local import LocalFileStorage


@lru_cache(maxsize=1)
def get_storage() -> StoragePort:
    return LocalFileStorage(base_dir=get_settings().upload_dir)


@lru_cache(maxsize=1)
def get_ocr() -> OCRPort:
    settings = get_settings()
    if settings.ocr_backend == "mock":
        return MockOCR()
    return OCRSpaceOCR(
        api_key=settings.ocr_api_key,
        language=settings.ocr_language,
        timeout_seconds=settings.http_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_llm() -> CompletionPort:
    settings = get_settings()
    if settings.llm_backend == "mock":
        return MockLLM()
    return OpenRouterLLM(
        api_key=settings.openrouter_api_key,
        max_tokens=settings.max_tokens,
        timeout_seconds=settings.http_timeout_seconds,
        app_url=settings.app_url,
        app_title=settings.app_title,
    )


def get_scan_pipeline() -> ScanPipeline:
    settings = get_settings()
    return ScanPipeline(
        storage=get_storage(),
        extraction=TextExtractionClient(
            ocr=get_ocr(),
            retry=RetryPolicy(max_attempts=settings.ocr_max_attempts),
        ),
        analysis=AnalysisClient(
            completion=get_llm(),
            model_id=settings.model_id,
            mode=AnalysisMode(settings.analysis_mode),
            retry=RetryPolicy(
                max_attempts=settings.llm_max_attempts,
                delay_seconds=settings.llm_retry_delay_seconds,
            ),
        ),
    )


async def provide_scan_pipeline() -> ScanPipeline:
    return get_scan_pipeline()
