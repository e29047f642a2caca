from pydantic import BaseModel, Field


class OcrResponse(BaseModel):
    success: bool = True
    text: str
    length: int
    confidence: int
    page_processed: int | None = None
    total_pages: int | None = None
    warning: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class Capabilities(BaseModel):
    ocr: bool = True
    pdf_support: bool = True
    page_extraction: bool = True


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str
    capabilities: Capabilities = Field(default_factory=Capabilities)
