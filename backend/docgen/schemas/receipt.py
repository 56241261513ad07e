from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ReceiptRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_id: str = Field(alias="paymentId", min_length=1)
    action: Literal["download", "email"]
    recipient_email: str | None = Field(default=None, alias="recipientEmail")


class ReceiptDownloadResponse(BaseModel):
    success: bool = True
    pdf: str
    fileName: str
