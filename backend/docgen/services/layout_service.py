"""Canvas-mode layout for quotes, invoices and job summaries."""
import logging

from docgen.config import settings
from docgen.services.assembler import AssembledDocument
from docgen.services.base_renderer import DocumentRenderer
from docgen.services.canvas import (
    BRAND_DEFAULT, DANGER, DARK, LIGHT, MARGIN, MUTED, PAGE_HEIGHT, PAGE_WIDTH, RULE, WHITE,
    PageCanvas,
)
from docgen.services.storage_service import StorageClient
from docgen.utils.images import fit_within, parse_hex_color
from docgen.utils.money import format_percent, format_plain_currency, line_total
from docgen.utils.text import format_date, format_datetime, join_nonempty, truncate, wrap_text

logger = logging.getLogger(__name__)

RIGHT = PAGE_WIDTH - MARGIN

TITLE_SIZES = {"quote": 26, "invoice": 26, "job": 22}
LOGO_BOX = (150, 60)
SIGNATURE_BOX = (200, 60)

DESCRIPTION_CHARS = 45
WRAP_CHARS = 90
CAPTION_CHARS = 22

ROW_HEIGHT = 20
HEADER_BAND = 22
LINE_HEIGHT = 12

THUMB_W = 120
THUMB_H = 90
THUMB_GAP = 10
PHOTOS_PER_ROW = 4


def table_columns(page_width: float = PAGE_WIDTH, margin: float = MARGIN) -> dict[str, float]:
    """x positions of the line-item columns; the numeric ones are right edges."""
    right = page_width - margin
    return {
        "description": margin + 8,
        "quantity": right - 230,
        "unit_price": right - 110,
        "total": right - 8,
    }


class CanvasRenderer(DocumentRenderer):
    def __init__(self, storage: StorageClient, overflow_mode: str | None = None):
        self.storage = storage
        self.overflow_mode = overflow_mode or settings.overflow_mode

    async def render(self, assembled: AssembledDocument) -> PageCanvas:
        canvas = PageCanvas(self.overflow_mode)
        company = assembled.company
        brand = parse_hex_color(company.brand_primary_color if company else None, BRAND_DEFAULT)

        await self._header(canvas, assembled, brand)
        self._metadata(canvas, assembled)
        self._addresses(canvas, assembled)
        if assembled.items:
            self._line_items(canvas, assembled, brand)
        if assembled.has_totals:
            self._totals(canvas, assembled, brand)
        if assembled.preferences.show_signature and assembled.signature is not None:
            await self._signature(canvas, assembled)
        if assembled.preferences.show_notes and (assembled.document.notes or "").strip():
            self._wrapped_block(canvas, "Notes", assembled.document.notes)
        if assembled.preferences.show_photos_for(assembled.kind) and assembled.photos:
            await self._photos(canvas, assembled)
        if assembled.preferences.terms_conditions:
            self._wrapped_block(canvas, "Terms & Conditions", assembled.preferences.terms_conditions)
        self._footer(canvas, assembled)

        logger.info("Laid out %s %s on %d page(s)", assembled.kind, assembled.number, len(canvas.pages))
        return canvas

    # --- sections ------------------------------------------------------------

    async def _header(self, canvas: PageCanvas, doc: AssembledDocument, brand):
        top = canvas.cursor.y
        logo_height = 0.0
        if doc.preferences.show_logo and doc.logo_url:
            logo = await self.storage.fetch_image(doc.logo_url)
            if logo is not None:
                w, h = fit_within(logo.width, logo.height, *LOGO_BOX)
                canvas.draw_image(logo, RIGHT - w, top, w, h)
                logo_height = h

        size = TITLE_SIZES[doc.kind]
        canvas.draw_text(doc.title, MARGIN, top + size, size=size, bold=True, color=brand)
        canvas.cursor.y = top + max(logo_height, size + 8) + 16

    def _metadata(self, canvas: PageCanvas, doc: AssembledDocument):
        info = doc.info
        lines = [(f"{info.label} #:", doc.display_number)]
        if doc.kind == "job" and doc.document.title:
            lines.append(("Job:", doc.document.title))
        lines.append(("Date:", format_date(doc.document.created_at)))
        if info.second_date_label and doc.second_date:
            lines.append((f"{info.second_date_label}:", format_date(doc.second_date)))

        for label, value in lines:
            y = canvas.cursor.y
            canvas.draw_text(label, MARGIN, y, size=10, color=MUTED)
            canvas.draw_text(value, MARGIN + 80, y, size=10, bold=True, color=DARK)
            canvas.advance(14)
        canvas.advance(12)

    def _addresses(self, canvas: PageCanvas, doc: AssembledDocument):
        company, customer = doc.company, doc.customer
        columns = []
        if company is not None:
            columns.append((MARGIN, "FROM", [
                (company.name, True),
                (company.address, False),
                (join_nonempty([company.city, company.state, company.zip]), False),
                (company.phone, False),
                (company.email, False),
                (company.website, False),
            ]))
        if customer is not None:
            heading = "SERVICE ADDRESS" if doc.kind == "job" else "BILL TO"
            columns.append((MARGIN + 270, heading, [
                (customer.name, True),
                (customer.address, False),
                (join_nonempty([customer.city, customer.state, customer.zip]), False),
                (customer.email, False),
                (customer.phone, False),
            ]))
        if not columns:
            return

        top = canvas.cursor.y
        bottom = top
        for x, heading, lines in columns:
            y = top
            canvas.draw_text(heading, x, y, size=9, bold=True, color=LIGHT)
            y += 15
            for text, bold in lines:
                if not text:
                    continue
                canvas.draw_text(text, x, y, size=11 if bold else 10, bold=bold, color=DARK if bold else MUTED)
                y += 13
            bottom = max(bottom, y)
        canvas.cursor.y = bottom + 16

    def _table_header(self, canvas: PageCanvas, brand):
        cols = table_columns()
        y = canvas.cursor.y
        canvas.draw_rect(MARGIN, y, RIGHT - MARGIN, HEADER_BAND, fill=brand)
        baseline = y + 15
        canvas.draw_text("Description", cols["description"], baseline, size=10, bold=True, color=WHITE)
        canvas.draw_text_right("Qty", cols["quantity"], baseline, size=10, bold=True, color=WHITE)
        canvas.draw_text_right("Unit Price", cols["unit_price"], baseline, size=10, bold=True, color=WHITE)
        canvas.draw_text_right("Total", cols["total"], baseline, size=10, bold=True, color=WHITE)
        canvas.advance(HEADER_BAND)

    def _line_items(self, canvas: PageCanvas, doc: AssembledDocument, brand):
        cols = table_columns()
        canvas.ensure_space(HEADER_BAND + ROW_HEIGHT, paginate=True)
        self._table_header(canvas, brand)

        # Truncated tables keep room for the overflow note and the totals block
        reserve = 0.0
        if canvas.overflow_mode == "truncate":
            reserve = ROW_HEIGHT + 12 + self._totals_height(self._totals_rows(doc, brand))

        items = doc.items
        for index, item in enumerate(items):
            pages_before = len(canvas.pages)
            if not canvas.ensure_space(ROW_HEIGHT + reserve):
                dropped = len(items) - index
                logger.warning("Dropping %d line item(s) that do not fit on the page", dropped)
                canvas.draw_text(f"({dropped} more items not shown)", cols["description"],
                                 canvas.cursor.y + 12, size=9, color=MUTED)
                canvas.advance(ROW_HEIGHT)
                break
            if len(canvas.pages) != pages_before:
                self._table_header(canvas, brand)

            baseline = canvas.cursor.y + 14
            canvas.draw_text(truncate(item.description, DESCRIPTION_CHARS), cols["description"], baseline,
                             size=10, color=DARK)
            canvas.draw_text_right(str(item.quantity), cols["quantity"], baseline, size=10, color=DARK)
            canvas.draw_text_right(format_plain_currency(item.unit_price), cols["unit_price"], baseline,
                                   size=10, color=DARK)
            canvas.draw_text_right(format_plain_currency(line_total(item.quantity, item.unit_price)),
                                   cols["total"], baseline, size=10, color=DARK)
            canvas.advance(ROW_HEIGHT)
            canvas.draw_line(MARGIN, canvas.cursor.y, RIGHT, canvas.cursor.y, width=0.5, color=RULE)
        canvas.advance(12)

    @staticmethod
    def _totals_rows(doc: AssembledDocument, brand) -> list[tuple]:
        totals = doc.totals
        rows = [("Subtotal", format_plain_currency(totals.subtotal), False, DARK)]
        if totals.has_discount:
            label = "Discount"
            if totals.discount_type != "amount":
                label = f"Discount ({format_percent(totals.discount_value)})"
            rows.append((label, f"-{format_plain_currency(totals.discount_amount)}", False, DARK))
        rows.append(("Tax", format_plain_currency(totals.tax), False, DARK))

        if doc.kind == "invoice" and totals.has_late_fee:
            fee_label = "Late Fee"
            if doc.preferences.has_late_fee_policy:
                fee_label = f"Late Fee ({format_percent(doc.preferences.late_fee_percentage)})"
            rows.append(("Invoice Total", format_plain_currency(totals.total), False, DARK))
            rows.append((fee_label, f"+{format_plain_currency(totals.late_fee)}", False, DANGER))
            rows.append(("Total Due", format_plain_currency(totals.total_due), True, DANGER))
        else:
            rows.append(("Total", format_plain_currency(totals.total), True, brand))
        return rows

    @staticmethod
    def _totals_height(rows) -> float:
        return len(rows) * 16 + sum(6 for row in rows if row[2]) + 26

    def _totals(self, canvas: PageCanvas, doc: AssembledDocument, brand):
        rows = self._totals_rows(doc, brand)
        canvas.ensure_space(self._totals_height(rows), paginate=True)
        label_x = RIGHT - 200
        for label, value, emphasized, color in rows:
            if emphasized:
                canvas.draw_line(label_x, canvas.cursor.y - 4, RIGHT, canvas.cursor.y - 4, width=1, color=RULE)
                canvas.advance(6)
            size = 12 if emphasized else 10
            canvas.draw_text(label, label_x, canvas.cursor.y + 10, size=size, bold=emphasized, color=color)
            canvas.draw_text_right(value, RIGHT, canvas.cursor.y + 10, size=size, bold=emphasized, color=color)
            canvas.advance(16)
        canvas.advance(14)

    async def _signature(self, canvas: PageCanvas, doc: AssembledDocument):
        signature = doc.signature
        canvas.ensure_space(SIGNATURE_BOX[1] + 40, paginate=True)
        top = canvas.cursor.y
        canvas.draw_text("SIGNATURE", MARGIN, top + 9, size=9, bold=True, color=LIGHT)
        top += 16

        image = await self.storage.fetch_image(signature.signature_data)
        if image is not None:
            w, h = fit_within(image.width, image.height, *SIGNATURE_BOX)
            canvas.draw_image(image, MARGIN, top, w, h)
        else:
            logger.warning("Signature image for %s %s could not be decoded", doc.kind, doc.number)
        canvas.draw_line(MARGIN, top + SIGNATURE_BOX[1] + 2, MARGIN + SIGNATURE_BOX[0],
                         top + SIGNATURE_BOX[1] + 2, width=0.75, color=DARK)

        text_x = MARGIN + SIGNATURE_BOX[0] + 30
        canvas.draw_text(f"Signed by: {signature.signer_name}", text_x, top + 24, size=10, color=DARK)
        canvas.draw_text(f"Date: {format_datetime(signature.signed_at)}", text_x, top + 40, size=10, color=MUTED)
        canvas.cursor.y = top + SIGNATURE_BOX[1] + 24

    def _wrapped_block(self, canvas: PageCanvas, heading: str, body: str):
        lines = wrap_text(body, WRAP_CHARS)
        if not lines:
            return
        canvas.ensure_space(16 + LINE_HEIGHT, paginate=True)
        canvas.draw_text(heading, MARGIN, canvas.cursor.y + 10, size=10, bold=True, color=DARK)
        canvas.advance(16)
        for index, line in enumerate(lines):
            if not canvas.ensure_space(LINE_HEIGHT):
                logger.warning("%s truncated after %d of %d lines", heading, index, len(lines))
                break
            canvas.draw_text(line, MARGIN, canvas.cursor.y + 9, size=9, color=MUTED)
            canvas.advance(LINE_HEIGHT)
        canvas.advance(14)

    async def _photos(self, canvas: PageCanvas, doc: AssembledDocument):
        row_height = THUMB_H + 22
        for group, photos in doc.photos_by_group():
            canvas.ensure_space(18 + row_height, paginate=True)
            canvas.draw_text(f"{group.title()} Photos", MARGIN, canvas.cursor.y + 11, size=11, bold=True, color=DARK)
            canvas.advance(18)

            for index, photo in enumerate(photos):
                column = index % PHOTOS_PER_ROW
                if column == 0:
                    if index:
                        canvas.advance(row_height)
                    canvas.ensure_space(row_height, paginate=True)
                x = MARGIN + column * (THUMB_W + THUMB_GAP)
                y = canvas.cursor.y

                image = await self.storage.fetch_image(photo.url)
                if image is not None:
                    w, h = fit_within(image.width, image.height, THUMB_W, THUMB_H)
                    canvas.draw_image(image, x + (THUMB_W - w) / 2, y + (THUMB_H - h) / 2, w, h)
                canvas.draw_rect(x, y, THUMB_W, THUMB_H, border=RULE)
                if photo.caption:
                    canvas.draw_text(truncate(photo.caption, CAPTION_CHARS), x, y + THUMB_H + 12,
                                     size=8, color=MUTED)
            canvas.advance(row_height + 8)

    def _footer(self, canvas: PageCanvas, doc: AssembledDocument):
        lines = wrap_text(doc.preferences.footer, 100) or [doc.preferences.footer]
        y = PAGE_HEIGHT - 40 - LINE_HEIGHT * (len(lines) - 1)
        for line in lines:
            canvas.draw_text_centered(line, y, size=9, color=LIGHT)
            y += LINE_HEIGHT
