"""Gathers a document and everything it references into one render-ready record."""
import logging
from dataclasses import dataclass, field

from sqlalchemy import literal_column
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docgen.config import settings
from docgen.exceptions import NotFoundError, PartialDataUnavailable
from docgen.models import (
    Company, Customer, Invoice, InvoiceItem, Job, JobItem, JobPhoto,
    Profile, Quote, QuoteItem, Signature,
)
from docgen.services.preferences import RenderPreferences
from docgen.services.storage_service import StorageClient
from docgen.utils.money import Totals, compute_totals
from docgen.utils.text import strip_number_prefix

logger = logging.getLogger(__name__)

DOCUMENT_KINDS = ("quote", "invoice", "job")
PHOTO_GROUPS = ("before", "after", "other")


@dataclass(frozen=True)
class KindInfo:
    model: type
    item_model: type
    item_fk: str
    number_field: str
    prefix_field: str
    title: str
    label: str
    date_label: str
    second_date_label: str | None
    second_date_field: str | None
    signature_field: str


KINDS = {
    "quote": KindInfo(
        Quote, QuoteItem, "quote_id", "quote_number", "quote_number_prefix",
        "QUOTE", "Quote", "Quote Date", "Valid Until", "valid_until", "signature_id",
    ),
    "invoice": KindInfo(
        Invoice, InvoiceItem, "invoice_id", "invoice_number", "invoice_number_prefix",
        "INVOICE", "Invoice", "Invoice Date", "Due Date", "due_date", "signature_id",
    ),
    "job": KindInfo(
        Job, JobItem, "job_id", "job_number", "job_number_prefix",
        "JOB SUMMARY", "Job", "Created Date", None, None, "completion_signature_id",
    ),
}


@dataclass
class PhotoRef:
    id: str
    photo_type: str
    caption: str | None
    url: str


@dataclass
class SocialLinkRef:
    platform_name: str
    url: str
    icon_url: str | None
    show_on_invoice: bool
    show_on_quote: bool
    show_on_job: bool
    show_on_email: bool


@dataclass
class AssembledDocument:
    kind: str
    document: object
    number: str
    display_number: str
    items: list
    totals: Totals
    preferences: RenderPreferences
    company: Company | None = None
    customer: Customer | None = None
    assignee: Profile | None = None
    signature: Signature | None = None
    photos: list[PhotoRef] = field(default_factory=list)
    social_links: list[SocialLinkRef] = field(default_factory=list)
    logo_url: str | None = None

    @property
    def info(self) -> KindInfo:
        return KINDS[self.kind]

    @property
    def title(self) -> str:
        return self.info.title

    @property
    def second_date(self) -> str | None:
        if self.info.second_date_field is None:
            return None
        return getattr(self.document, self.info.second_date_field)

    @property
    def status(self) -> str | None:
        return self.document.status

    @property
    def has_totals(self) -> bool:
        """Totals show for itemized documents and for item-less ones carrying a stored total."""
        return bool(self.items) or self.totals.total != 0

    def photos_by_group(self) -> list[tuple[str, list[PhotoRef]]]:
        groups = []
        for group in PHOTO_GROUPS:
            members = [p for p in self.photos if (p.photo_type if p.photo_type in PHOTO_GROUPS else "other") == group]
            if members:
                groups.append((group, members))
        return groups

    def social_links_for(self, surface: str) -> list[SocialLinkRef]:
        return [link for link in self.social_links if getattr(link, f"show_on_{surface}", False)]


def _tolerant(label: str, default, load):
    """Run a secondary lookup; a database failure degrades to ``default``."""
    try:
        return load()
    except SQLAlchemyError as exc:
        failure = PartialDataUnavailable(f"{label} could not be loaded", original_error=exc)
        logger.warning("%s; rendering without it (%s)", failure.message, exc)
        return default


def _get_optional(db: Session, model, entity_id: str | None, label: str):
    if not entity_id:
        return None
    row = _tolerant(label, None, lambda: db.query(model).filter(model.id == entity_id).first())
    if row is None:
        logger.warning("%s %s not found; rendering without it", label, entity_id)
    return row


async def assemble(db: Session, kind: str, document_id: str, storage: StorageClient) -> AssembledDocument:
    """Load a document snapshot for rendering.

    Raises:
        NotFoundError: the document itself does not exist.
    """
    info = KINDS[kind]
    document = db.query(info.model).filter(info.model.id == document_id).first()
    if document is None:
        raise NotFoundError(f"{kind} not found")
    logger.info("Found %s %s", kind, document_id)

    items = _tolerant("Line items", [], lambda: (
        db.query(info.item_model)
        .filter(getattr(info.item_model, info.item_fk) == document_id)
        .order_by(literal_column("rowid"))
        .all()
    ))
    logger.info("Found %d items", len(items))

    company = _get_optional(db, Company, document.company_id, "Company")
    customer = _get_optional(db, Customer, document.customer_id, "Customer")

    assignee = None
    if kind == "job":
        assignee = _get_optional(db, Profile, document.assigned_to, "Assignee")

    signature = _get_optional(db, Signature, getattr(document, info.signature_field), "Signature")

    preferences = RenderPreferences.from_company(company)
    number = getattr(document, info.number_field) or ""
    prefix = getattr(company, info.prefix_field, None) if company else None

    photo_job_id = document.id if kind == "job" else document.job_id
    photos = []
    if photo_job_id and preferences.show_photos_for(kind):
        photos = await _resolve_photos(db, photo_job_id, storage)

    social_links = []
    logo_url = None
    if company is not None:
        if company.logo_url:
            logo_url = storage.public_url(settings.logo_bucket, company.logo_url)
        social_links = [
            SocialLinkRef(
                platform_name=link.platform_name,
                url=link.url,
                icon_url=storage.public_url(settings.social_icon_bucket, link.icon_url) if link.icon_url else None,
                show_on_invoice=bool(link.show_on_invoice),
                show_on_quote=bool(link.show_on_quote),
                show_on_job=bool(link.show_on_job),
                show_on_email=bool(link.show_on_email),
            )
            for link in _tolerant("Social links", [], lambda: list(company.social_links))
        ]

    return AssembledDocument(
        kind=kind,
        document=document,
        number=number,
        display_number=strip_number_prefix(number, prefix),
        items=items,
        totals=compute_totals(
            items,
            subtotal=document.subtotal,
            discount_type=document.discount_type,
            discount_value=document.discount_value,
            tax=document.tax,
            late_fee=getattr(document, "late_fee_amount", None),
        ),
        preferences=preferences,
        company=company,
        customer=customer,
        assignee=assignee,
        signature=signature,
        photos=photos,
        social_links=social_links,
        logo_url=logo_url,
    )


async def _resolve_photos(db: Session, job_id: str, storage: StorageClient) -> list[PhotoRef]:
    rows = _tolerant("Job photos", [], lambda: (
        db.query(JobPhoto)
        .filter(JobPhoto.job_id == job_id, JobPhoto.deleted_at.is_(None))
        .order_by(JobPhoto.display_order)
        .all()
    ))
    resolved = []
    for row in rows:
        try:
            url = await storage.create_signed_url(settings.photo_bucket, row.photo_url)
        except PartialDataUnavailable as exc:
            logger.warning("Skipping photo %s: %s", row.id, exc)
            continue
        resolved.append(PhotoRef(id=row.id, photo_type=row.photo_type, caption=row.caption, url=url))
    logger.info("Resolved %d of %d photos for job %s", len(resolved), len(rows), job_id)
    return resolved
