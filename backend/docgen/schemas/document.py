from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class GenerateDocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["quote", "invoice", "job"]
    document_id: str = Field(alias="documentId", min_length=1)
    action: Literal["download", "email"]
    recipient_email: str | None = Field(default=None, alias="recipientEmail")
    format: Literal["pdf", "html"] = "pdf"


class DownloadResponse(BaseModel):
    success: bool = True
    documentNumber: str
    pdfBase64: str | None = None
    html: str | None = None


class EmailResponse(BaseModel):
    success: bool = True
    message: str
