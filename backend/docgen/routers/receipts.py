import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docgen.database import get_db
from docgen.dependencies import require_service_token
from docgen.schemas.document import EmailResponse
from docgen.schemas.receipt import ReceiptDownloadResponse, ReceiptRequest
from docgen.services.mail_service import ResendMailer, get_mailer
from docgen.services.receipt_service import ReceiptService
from docgen.services.storage_service import StorageClient, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/payments",
    tags=["receipts"],
    dependencies=[Depends(require_service_token)],
)


@router.post("/receipt", response_model=ReceiptDownloadResponse | EmailResponse)
async def payment_receipt(
    body: ReceiptRequest,
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    mailer: ResendMailer = Depends(get_mailer),
):
    logger.info("Receipt %s requested for payment %s", body.action, body.payment_id)
    service = ReceiptService(db, storage, mailer)
    if body.action == "email":
        return await service.email(body.payment_id, body.recipient_email)
    return await service.download(body.payment_id)
