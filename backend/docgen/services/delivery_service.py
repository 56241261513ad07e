"""Delivers rendered documents as a download payload or as an email."""
import base64
import logging

from sqlalchemy.orm import Session

from docgen.exceptions import ValidationError
from docgen.services.assembler import DOCUMENT_KINDS, AssembledDocument, assemble
from docgen.services.canvas import to_pdf_bytes
from docgen.services.layout_service import CanvasRenderer
from docgen.services.mail_service import Attachment, OutboundEmail, ResendMailer, validate_recipient
from docgen.services.markup_service import MarkupRenderer
from docgen.services.storage_service import StorageClient

logger = logging.getLogger(__name__)

SUBJECT_NOUNS = {"quote": "Quote", "invoice": "Invoice", "job": "Job Summary"}
STATUS_KINDS = ("quote", "invoice")
DOWNLOAD_FORMATS = ("pdf", "html")


def email_subject(doc: AssembledDocument) -> str:
    company_name = doc.company.name if doc.company and doc.company.name else "Our Company"
    return f"{SUBJECT_NOUNS[doc.kind]} {doc.number} from {company_name}"


class DeliveryService:
    def __init__(
        self,
        db: Session,
        storage: StorageClient,
        mailer: ResendMailer,
        canvas_renderer: CanvasRenderer | None = None,
        markup_renderer: MarkupRenderer | None = None,
    ):
        self.db = db
        self.storage = storage
        self.mailer = mailer
        self.canvas_renderer = canvas_renderer or CanvasRenderer(storage)
        self.markup_renderer = markup_renderer or MarkupRenderer()

    @staticmethod
    def _check_kind(kind: str):
        if kind not in DOCUMENT_KINDS:
            raise ValidationError(f"Unknown document type: {kind}")

    async def render_pdf(self, doc: AssembledDocument) -> bytes:
        canvas = await self.canvas_renderer.render(doc)
        pdf = to_pdf_bytes(canvas)
        logger.info("PDF generated for %s %s, size: %d bytes", doc.kind, doc.number, len(pdf))
        return pdf

    async def download(self, kind: str, document_id: str, fmt: str = "pdf") -> dict:
        """Rendered artifact for the caller. Never changes document state."""
        self._check_kind(kind)
        if fmt not in DOWNLOAD_FORMATS:
            raise ValidationError(f"Unknown download format: {fmt}")

        doc = await assemble(self.db, kind, document_id, self.storage)
        if fmt == "html":
            html = self.markup_renderer.render_document(doc)
            return {"success": True, "html": html, "documentNumber": doc.number}

        pdf = await self.render_pdf(doc)
        return {
            "success": True,
            "pdfBase64": base64.b64encode(pdf).decode("ascii"),
            "documentNumber": doc.number,
        }

    async def email(self, kind: str, document_id: str, recipient: str | None) -> dict:
        """Email the document with its PDF attached; a draft quote or invoice becomes sent.

        Raises:
            ValidationError: missing or malformed recipient, checked before any lookup.
            NotFoundError: the document does not exist.
            DeliveryFailure: the mail provider failed; the document is left untouched.
        """
        self._check_kind(kind)
        recipient = validate_recipient(recipient)

        doc = await assemble(self.db, kind, document_id, self.storage)
        body = self.markup_renderer.render_email(doc)
        pdf = await self.render_pdf(doc)

        message = OutboundEmail(
            to=[recipient],
            subject=email_subject(doc),
            html=body,
            reply_to=doc.company.email if doc.company and doc.company.email else None,
            attachments=[Attachment(filename=f"{doc.number}.pdf", content=pdf)],
        )
        logger.info("Sending email to %s", recipient)
        await self.mailer.send(message)

        if kind in STATUS_KINDS and doc.document.status == "draft":
            doc.document.status = "sent"
            self.db.commit()
            logger.info("%s %s marked as sent", kind, doc.number)

        return {"success": True, "message": "Email sent successfully"}
