import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docgen.database import get_db
from docgen.dependencies import require_service_token
from docgen.schemas.document import DownloadResponse, EmailResponse, GenerateDocumentRequest
from docgen.services.delivery_service import DeliveryService
from docgen.services.mail_service import ResendMailer, get_mailer
from docgen.services.storage_service import StorageClient, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/documents",
    tags=["documents"],
    dependencies=[Depends(require_service_token)],
)


@router.post(
    "/generate",
    response_model=DownloadResponse | EmailResponse,
    response_model_exclude_none=True,
)
async def generate_document(
    body: GenerateDocumentRequest,
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    mailer: ResendMailer = Depends(get_mailer),
):
    logger.info("Processing %s request for %s %s", body.action, body.type, body.document_id)
    service = DeliveryService(db, storage, mailer)
    if body.action == "email":
        return await service.email(body.type, body.document_id, body.recipient_email)
    return await service.download(body.type, body.document_id, body.format)
