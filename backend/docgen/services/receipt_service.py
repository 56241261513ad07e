"""Payment receipts: a one-page canvas PDF, downloaded or emailed."""
import base64
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from docgen.config import settings
from docgen.exceptions import NotFoundError, ValidationError
from docgen.models import Company, Customer, Invoice, Payment
from docgen.services.canvas import (
    BRAND_DEFAULT, DANGER, DARK, LIGHT, MARGIN, MUTED, PAGE_HEIGHT, PAGE_WIDTH, PageCanvas, to_pdf_bytes,
)
from docgen.services.mail_service import Attachment, OutboundEmail, ResendMailer, validate_recipient
from docgen.services.markup_service import template_environment
from docgen.services.storage_service import StorageClient
from docgen.utils.images import fit_within, parse_hex_color
from docgen.utils.money import format_plain_currency, money, receipt_method_label
from docgen.utils.text import format_date, join_nonempty, wrap_text

logger = logging.getLogger(__name__)

RIGHT = PAGE_WIDTH - MARGIN
GREEN = (26, 153, 77)
AMBER = (204, 128, 26)
BOX_FILL = (247, 247, 247)
BOX_BORDER = (230, 230, 230)
LOGO_BOX = (120, 60)


@dataclass(frozen=True)
class ReceiptSummary:
    invoice_total: Decimal
    amount: Decimal
    total_paid: Decimal
    remaining: Decimal

    @property
    def paid_in_full(self) -> bool:
        return self.remaining <= 0


def summarize(invoice: Invoice, payment: Payment) -> ReceiptSummary:
    """Balance over completed payments; the late fee counts toward the amount due."""
    invoice_total = money(invoice.total) + money(invoice.late_fee_amount)
    total_paid = sum((money(p.amount) for p in invoice.payments if p.status == "completed"), Decimal("0.00"))
    return ReceiptSummary(
        invoice_total=invoice_total,
        amount=money(payment.amount),
        total_paid=total_paid,
        remaining=max(Decimal("0.00"), invoice_total - total_paid),
    )


def receipt_file_name(invoice: Invoice, payment: Payment) -> str:
    return f"Receipt-{invoice.invoice_number}-{payment.id[:8].upper()}.pdf"


class ReceiptService:
    def __init__(self, db: Session, storage: StorageClient, mailer: ResendMailer):
        self.db = db
        self.storage = storage
        self.mailer = mailer
        self.env = template_environment()
        self.env.filters["plain_currency"] = format_plain_currency

    def _load(self, payment_id: str):
        payment = self.db.query(Payment).filter(Payment.id == payment_id).first()
        if payment is None:
            raise NotFoundError("Payment not found")
        invoice = payment.invoice
        company = self.db.query(Company).filter(Company.id == invoice.company_id).first() if invoice else None
        customer = None
        if invoice is not None and invoice.customer_id:
            customer = self.db.query(Customer).filter(Customer.id == invoice.customer_id).first()
        if invoice is None or company is None or customer is None:
            raise ValidationError("Missing related data")
        logger.info("Payment %s fetched for invoice %s", payment_id, invoice.invoice_number)
        return payment, invoice, company, customer

    async def render(self, payment: Payment, invoice: Invoice, company: Company, customer: Customer) -> PageCanvas:
        summary = summarize(invoice, payment)
        brand = parse_hex_color(company.brand_primary_color, BRAND_DEFAULT)
        canvas = PageCanvas("truncate")
        y = MARGIN

        if company.logo_url:
            logo = await self.storage.fetch_image(self.storage.public_url(settings.logo_bucket, company.logo_url))
            if logo is not None:
                w, h = fit_within(logo.width, logo.height, *LOGO_BOX)
                canvas.draw_image(logo, MARGIN, y, w, h)
                y += h + 10

        y += 16
        canvas.draw_text(company.name or "Company", MARGIN, y, size=16, bold=True, color=brand)
        y += 18
        address = join_nonempty([company.address, join_nonempty([company.city, company.state, company.zip])], " | ")
        contact = join_nonempty([company.phone, company.email], " | ")
        for line in (address, contact):
            if line:
                canvas.draw_text(line, MARGIN, y, size=9, color=MUTED)
                y += 12

        y += 40
        canvas.draw_text("PAYMENT RECEIPT", MARGIN, y, size=24, bold=True, color=GREEN)
        y += 20

        # Detail box
        canvas.draw_rect(MARGIN, y, RIGHT - MARGIN, 80, fill=BOX_FILL, border=BOX_BORDER)
        details = [
            ("Receipt Date:", format_date(payment.payment_date)),
            ("Invoice:", invoice.invoice_number),
            ("Payment Method:", receipt_method_label(payment.method)),
            ("Payment ID:", payment.id[:8].upper()),
        ]
        row_y = y + 20
        for label, value in details:
            canvas.draw_text(label, MARGIN + 15, row_y, size=10, color=LIGHT)
            canvas.draw_text(value, MARGIN + 120, row_y, size=10, bold=True, color=DARK)
            row_y += 18
        canvas.draw_text("Amount Paid", RIGHT - 150, y + 20, size=10, color=LIGHT)
        canvas.draw_text(format_plain_currency(summary.amount), RIGHT - 150, y + 42, size=22, bold=True, color=GREEN)
        y += 80 + 30

        canvas.draw_text("RECEIVED FROM:", MARGIN, y, size=10, bold=True, color=LIGHT)
        y += 18
        canvas.draw_text(customer.name or "Customer", MARGIN, y, size=12, bold=True, color=DARK)
        y += 14
        for line in (customer.address, join_nonempty([customer.city, customer.state, customer.zip]), customer.email):
            if line:
                canvas.draw_text(line, MARGIN, y, size=10, color=MUTED)
                y += 12

        y += 30
        canvas.draw_text("PAYMENT SUMMARY", MARGIN, y, size=12, bold=True, color=DARK)
        y += 20
        rows = [
            ("Invoice Total:", summary.invoice_total),
            ("This Payment:", summary.amount),
            ("Total Paid to Date:", summary.total_paid),
            ("Remaining Balance:", summary.remaining),
        ]
        for index, (label, value) in enumerate(rows):
            last = index == len(rows) - 1
            color = DANGER if last and not summary.paid_in_full else DARK
            canvas.draw_text(label, MARGIN, y, size=10, bold=last, color=MUTED)
            canvas.draw_text(format_plain_currency(value), MARGIN + 150, y, size=10, bold=True, color=color)
            y += 16

        y += 20
        if summary.paid_in_full:
            canvas.draw_text("PAID IN FULL", MARGIN, y, size=14, bold=True, color=GREEN)
        else:
            canvas.draw_text("Partial Payment - Balance Due", MARGIN, y, size=12, bold=True, color=AMBER)
        y += 30

        if payment.notes:
            canvas.draw_text("Notes:", MARGIN, y, size=10, bold=True, color=MUTED)
            y += 14
            for line in wrap_text(payment.notes, 100):
                if y > PAGE_HEIGHT - 90:
                    break
                canvas.draw_text(line, MARGIN, y, size=10, color=MUTED)
                y += 12

        canvas.draw_text_centered("Thank you for your payment!", PAGE_HEIGHT - 50, size=12, bold=True, color=brand)
        generated = format_date(datetime.now(timezone.utc).isoformat())
        canvas.draw_text_centered(f"Generated on {generated}", PAGE_HEIGHT - 35, size=8, color=LIGHT)
        return canvas

    async def build(self, payment: Payment, invoice: Invoice, company: Company, customer: Customer):
        canvas = await self.render(payment, invoice, company, customer)
        pdf = to_pdf_bytes(canvas)
        file_name = receipt_file_name(invoice, payment)
        logger.info("Receipt generated: %s, size: %d bytes", file_name, len(pdf))
        return pdf, file_name

    async def download(self, payment_id: str) -> dict:
        pdf, file_name = await self.build(*self._load(payment_id))
        return {"success": True, "pdf": base64.b64encode(pdf).decode("ascii"), "fileName": file_name}

    async def email(self, payment_id: str, recipient: str | None = None) -> dict:
        """Email the receipt, falling back to the customer's address."""
        payment, invoice, company, customer = self._load(payment_id)
        recipient = validate_recipient(
            (recipient or "").strip() or customer.email,
            missing_message="No recipient email provided",
        )
        pdf, file_name = await self.build(payment, invoice, company, customer)

        html = self.env.get_template("receipt_email.html").render(
            payment=payment,
            invoice=invoice,
            company=company,
            customer=customer,
            summary=summarize(invoice, payment),
            method_label=receipt_method_label(payment.method),
        )
        await self.mailer.send(OutboundEmail(
            to=[recipient],
            subject=f"Payment Receipt - {invoice.invoice_number}",
            html=html,
            reply_to=company.email or None,
            attachments=[Attachment(filename=file_name, content=pdf)],
        ))
        return {"success": True, "message": "Receipt sent successfully"}
