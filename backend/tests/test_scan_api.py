import json
from pathlib import Path

import pytest

from medscan.api.dependencies import provide_scan_pipeline
from medscan.api.scan import INTERNAL_ERROR_MESSAGE
from medscan.application.analysis import AnalysisClient
from medscan.application.extraction import TextExtractionClient
from medscan.application.retry import RetryPolicy
from medscan.application.scan import ScanPipeline
from medscan.domain.errors import CompletionRequestError
from medscan.domain.models import AnalysisMode, ExtractionResult
from medscan.infra.storage.local import LocalFileStorage
from medscan.main import app
from tests.http_client import SyncASGIClient
from tests.stubs import RecordingSleep, StubLLM, StubOCR

PARACETAMOL = {
    "name": "Paracetamol",
    "usage": "Pain and fever relief",
    "warnings": "Avoid exceeding recommended dose; liver risk in overdose",
}


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def use_pipeline(upload_dir: Path):
    def _install(ocr, llm, *, mode=AnalysisMode.TEXT, sleep=None) -> ScanPipeline:
        pipeline = ScanPipeline(
            storage=LocalFileStorage(upload_dir),
            extraction=TextExtractionClient(ocr=ocr),
            analysis=AnalysisClient(
                completion=llm,
                model_id="google/gemini-2.5-flash",
                mode=mode,
                retry=RetryPolicy(max_attempts=2, delay_seconds=1.0, sleep=sleep or RecordingSleep()),
            ),
        )
        app.dependency_overrides[provide_scan_pipeline] = lambda: pipeline
        return pipeline

    yield _install
    app.dependency_overrides.pop(provide_scan_pipeline, None)


def _post_image(client: SyncASGIClient, field: str = "medicineImage"):
    return client.upload("/api/scan", field, b"\xff\xd8\xff fake jpeg", filename="box.jpg")


def test_paracetamol_end_to_end(use_pipeline, upload_dir):
    ocr = StubOCR(ExtractionResult(raw_text="PARACETAMOL 500mg Tablets", succeeded=True))
    llm = StubLLM(json.dumps(PARACETAMOL))
    use_pipeline(ocr, llm)

    resp = _post_image(SyncASGIClient(app))

    assert resp.status_code == 200
    assert resp.json() == {
        "extractedText": "PARACETAMOL 500mg Tablets",
        "medicineName": "Paracetamol",
        "usage": "Pain and fever relief",
        "warnings": "Avoid exceeding recommended dose; liver risk in overdose",
    }
    assert ocr.seen_paths[0].suffix == ".jpg"
    assert list(upload_dir.iterdir()) == []


def test_fenced_completion_is_sanitized(use_pipeline):
    ocr = StubOCR(ExtractionResult(raw_text="PARACETAMOL 500mg Tablets", succeeded=True))
    use_pipeline(ocr, StubLLM(f"```json\n{json.dumps(PARACETAMOL)}\n```"))

    body = _post_image(SyncASGIClient(app)).json()

    assert body["medicineName"] == "Paracetamol"
    assert all(isinstance(value, str) and value for value in body.values())


@pytest.mark.parametrize("kwargs", [{}, {"files": {"otherField": ("a.png", b"x", "image/png")}}])
def test_missing_image_is_400_without_external_calls(use_pipeline, upload_dir, kwargs):
    ocr = StubOCR(ExtractionResult(raw_text="never", succeeded=True))
    llm = StubLLM()
    use_pipeline(ocr, llm)

    resp = SyncASGIClient(app).post("/api/scan", **kwargs)

    assert resp.status_code == 400
    assert resp.json()["error"]
    assert ocr.seen_paths == []
    assert llm.requests == []


def test_ocr_processing_error_is_400_and_file_is_deleted(use_pipeline, upload_dir):
    ocr = StubOCR(
        ExtractionResult(raw_text="", succeeded=False, provider_error_message="E500, Image too dark, Try again")
    )
    llm = StubLLM()
    use_pipeline(ocr, llm)

    resp = _post_image(SyncASGIClient(app))

    assert resp.status_code == 400
    assert resp.json() == {"error": "E500, Image too dark, Try again"}
    assert not ocr.seen_paths[0].exists()
    assert llm.requests == []


def test_blank_ocr_text_is_400_with_generic_message(use_pipeline, upload_dir):
    use_pipeline(StubOCR(ExtractionResult(raw_text="", succeeded=False)), StubLLM())

    resp = _post_image(SyncASGIClient(app))

    assert resp.status_code == 400
    assert resp.json() == {"error": "Could not read any text from the image."}
    assert list(upload_dir.iterdir()) == []


def test_completion_failing_twice_degrades_to_200(use_pipeline, upload_dir):
    sleep = RecordingSleep()
    ocr = StubOCR(ExtractionResult(raw_text="IBUPROFEN 200mg", succeeded=True))
    llm = StubLLM(CompletionRequestError("401"), CompletionRequestError("401"))
    use_pipeline(ocr, llm, sleep=sleep)

    resp = _post_image(SyncASGIClient(app))

    assert resp.status_code == 200
    body = resp.json()
    assert body["extractedText"] == "IBUPROFEN 200mg"
    assert body["medicineName"] == "Unknown"
    assert body["warnings"] == "Information not found."
    assert "Could not analyze the medicine automatically" in body["usage"]
    assert len(llm.requests) == 2
    assert sleep.calls == [1.0]
    assert not ocr.seen_paths[0].exists()


def test_unparseable_completion_degrades_to_200(use_pipeline, upload_dir):
    ocr = StubOCR(ExtractionResult(raw_text="IBUPROFEN 200mg", succeeded=True))
    use_pipeline(ocr, StubLLM("This looks like ibuprofen."))

    resp = _post_image(SyncASGIClient(app))

    assert resp.status_code == 200
    assert resp.json()["usage"].startswith("Could not understand the analysis service response")
    assert list(upload_dir.iterdir()) == []


def test_unexpected_fault_is_generic_500_and_file_is_deleted(use_pipeline, upload_dir, caplog):
    ocr = StubOCR(RuntimeError("secret internal detail"))
    use_pipeline(ocr, StubLLM())

    resp = _post_image(SyncASGIClient(app))

    assert resp.status_code == 500
    assert resp.json() == {"error": INTERNAL_ERROR_MESSAGE}
    assert "secret internal detail" not in resp.text
    assert "secret internal detail" in caplog.text
    assert not ocr.seen_paths[0].exists()


def test_vision_mode_sends_the_photo(use_pipeline):
    ocr = StubOCR(ExtractionResult(raw_text="PARACETAMOL", succeeded=True))
    llm = StubLLM(json.dumps(PARACETAMOL))
    use_pipeline(ocr, llm, mode=AnalysisMode.VISION)

    resp = _post_image(SyncASGIClient(app))

    assert resp.status_code == 200
    assert llm.requests[0].embedded_image.startswith("data:image/jpeg;base64,")


def test_default_mock_stack_round_trip():
    resp = _post_image(SyncASGIClient(app))

    assert resp.status_code == 200
    body = resp.json()
    assert body["extractedText"] == "[mock] OCR text"
    assert body["medicineName"] == "Mock Medicine"
    assert body["warnings"] == "[mock] text only"


def test_blank_text_from_a_successful_ocr_is_400(use_pipeline, upload_dir):
    llm = StubLLM(json.dumps(PARACETAMOL))
    use_pipeline(StubOCR(ExtractionResult(raw_text="", succeeded=True)), llm)

    resp = _post_image(SyncASGIClient(app))

    assert resp.status_code == 400
    assert resp.json() == {"error": "Could not read any text from the image."}
    assert llm.requests == []
    assert list(upload_dir.iterdir()) == []


def test_plain_form_value_instead_of_file_is_400(use_pipeline):
    ocr = StubOCR(ExtractionResult(raw_text="never", succeeded=True))
    use_pipeline(ocr, StubLLM())

    resp = SyncASGIClient(app).post("/api/scan", data={"medicineImage": "not a file"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "No image file uploaded."}
    assert ocr.seen_paths == []
