from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException

from medscan.api.dependencies import provide_scan_pipeline
from medscan.api.schemas.scan import ErrorResponse, ScanResponse
from medscan.application.scan import ScanPipeline
from medscan.domain.errors import ScanError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["scan"])

IMAGE_FIELD = "medicineImage"
INTERNAL_ERROR_MESSAGE = "An internal server error occurred during processing."

_UPLOAD_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "required": [IMAGE_FIELD],
                    "properties": {IMAGE_FIELD: {"type": "string", "format": "binary"}},
                }
            }
        },
    }
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.post(
    "/scan",
    response_model=ScanResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    openapi_extra=_UPLOAD_BODY,
)
async def scan_medicine(
    request: Request,
    pipeline: ScanPipeline = Depends(provide_scan_pipeline),
):
    try:
        async with request.form() as form:
            # A plain form value under the image field counts as no upload.
            upload = form.get(IMAGE_FIELD)
            if not isinstance(upload, UploadFile):
                upload = None
            result = await pipeline.run(
                filename=upload.filename if upload is not None else None,
                content_type=upload.content_type if upload is not None else None,
                payload=await upload.read() if upload is not None else None,
            )
    except HTTPException as exc:
        # Malformed multipart body.
        return _error(exc.status_code, str(exc.detail))
    except ScanError as exc:
        return _error(exc.status_code, exc.message)
    except Exception:
        logger.exception("Server error while scanning upload")
        return _error(500, INTERNAL_ERROR_MESSAGE)

    return ScanResponse(
        extractedText=result.extracted_text,
        medicineName=result.medicine_name,
        usage=result.usage,
        warnings=result.warnings,
    )
