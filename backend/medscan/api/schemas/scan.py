from pydantic import BaseModel


class ScanResponse(BaseModel):
    extractedText: str
    medicineName: str
    usage: str
    warnings: str


class ErrorResponse(BaseModel):
    error: str
