"""HTML rendering of documents and of the email that carries them."""
import logging
from pathlib import Path
from types import MappingProxyType
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape

from docgen.services.assembler import AssembledDocument, SocialLinkRef
from docgen.services.base_renderer import DocumentRenderer
from docgen.utils.money import (
    format_currency, format_percent, line_total, payment_method_label, payment_terms_label,
)
from docgen.utils.text import format_date, format_datetime, join_nonempty

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

JOB_STATUS_LABELS = {
    "draft": "Draft",
    "scheduled": "Scheduled",
    "in_progress": "In Progress",
    "completed": "Completed",
    "invoiced": "Invoiced",
    "paid": "Paid",
}

KIND_NOUNS = {"quote": "quote", "invoice": "invoice", "job": "job summary"}


def _badge(color: str, glyph: str) -> str:
    size = 11 if len(glyph) == 1 else 8
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
        f'<circle cx="12" cy="12" r="12" fill="{color}"/>'
        f'<text x="12" y="16" font-family="Arial,sans-serif" font-size="{size}" '
        f'font-weight="bold" fill="#ffffff" text-anchor="middle">{glyph}</text></svg>'
    )
    return "data:image/svg+xml," + quote(svg)


# Insertion order matters: substring matches take the first key found.
PLATFORM_ICONS = MappingProxyType({
    "facebook": _badge("#1877F2", "f"),
    "instagram": _badge("#E4405F", "IG"),
    "linkedin": _badge("#0A66C2", "in"),
    "twitter": _badge("#1DA1F2", "t"),
    "x": _badge("#000000", "X"),
    "youtube": _badge("#FF0000", "YT"),
    "tiktok": _badge("#000000", "TT"),
    "whatsapp": _badge("#25D366", "W"),
    "messenger": _badge("#0084FF", "M"),
    "telegram": _badge("#26A5E4", "T"),
    "viber": _badge("#7360F2", "V"),
    "threads": _badge("#000000", "@"),
    "pinterest": _badge("#BD081C", "P"),
    "google": _badge("#4285F4", "G"),
    "thumbtack": _badge("#009FD9", "TT"),
    "yelp": _badge("#D32323", "Y"),
    "angi": _badge("#FF6153", "A"),
    "homeadvisor": _badge("#F68315", "HA"),
    "bbb": _badge("#005A78", "BBB"),
    "nextdoor": _badge("#8ED500", "N"),
    "networx": _badge("#1B75BB", "NX"),
    "houzz": _badge("#4DBC15", "H"),
    "craftjack": _badge("#F7941D", "CJ"),
    "porch": _badge("#1E88E5", "P"),
})


def icon_for(platform_name: str | None, icons=PLATFORM_ICONS) -> str | None:
    """Built-in icon for a platform: exact match on the normalized name, then substring."""
    normalized = (platform_name or "").strip().lower()
    if not normalized:
        return None
    if normalized in icons:
        return icons[normalized]
    for key, icon in icons.items():
        if key in normalized:
            return icon
    return None


def icon_source(link: SocialLinkRef) -> str | None:
    """Tenant icon first, then the built-in one. ``None`` means render a text link."""
    return link.icon_url or icon_for(link.platform_name)


def _link_views(links: list[SocialLinkRef]) -> list[dict]:
    return [{"name": link.platform_name, "url": link.url, "icon": icon_source(link)} for link in links]


def status_label(kind: str, status: str | None) -> str:
    if not status:
        return ""
    if kind == "job":
        return JOB_STATUS_LABELS.get(status, status)
    return status[:1].upper() + status[1:]


def signature_src(data: str | None) -> str | None:
    if not data:
        return None
    if data.startswith(("data:", "http://", "https://")):
        return data
    return f"data:image/png;base64,{data}"


def template_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters.update({
        "currency": format_currency,
        "date": format_date,
        "datetime": format_datetime,
        "percent": format_percent,
    })
    return env


class MarkupRenderer(DocumentRenderer):
    """Self-contained HTML for a document, plus the email body wrapped around it."""

    def __init__(self, env: Environment | None = None):
        self.env = env or template_environment()

    def context(self, doc: AssembledDocument, embedded: bool = False) -> dict:
        """Template variables. ``embedded`` drops the per-kind social row and the
        short-lived photo links from a document that is placed inside an email."""
        company, customer, prefs = doc.company, doc.customer, doc.preferences
        links = [] if embedded else _link_views(doc.social_links_for(doc.kind))
        show_photos = prefs.show_photos_for(doc.kind) and not embedded
        return {
            "doc": doc,
            "kind": doc.kind,
            "document": doc.document,
            "info": doc.info,
            "prefs": prefs,
            "company": company,
            "customer": customer,
            "company_city_line": join_nonempty([company.city, company.state, company.zip]) if company else "",
            "customer_city_line": join_nonempty([customer.city, customer.state, customer.zip]) if customer else "",
            "items": [
                {
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "amount": line_total(item.quantity, item.unit_price),
                }
                for item in doc.items
            ],
            "totals": doc.totals,
            "status_label": status_label(doc.kind, doc.status),
            "priority": (getattr(doc.document, "priority", None) or "medium").lower(),
            "assignee_name": doc.assignee.full_name if doc.assignee and doc.assignee.full_name else None,
            "payment": self._payment_panel(doc),
            "signature_src": signature_src(doc.signature.signature_data) if doc.signature else None,
            "kind_noun": KIND_NOUNS[doc.kind],
            "social_links": links,
            "photo_groups": doc.photos_by_group() if show_photos else [],
        }

    @staticmethod
    def _payment_panel(doc: AssembledDocument) -> dict | None:
        if doc.kind != "invoice":
            return None
        prefs = doc.preferences
        return {
            "method": payment_method_label(prefs.default_payment_method),
            "terms": payment_terms_label(prefs.payment_terms_days),
            "late_fee": format_percent(prefs.late_fee_percentage) if prefs.has_late_fee_policy else None,
        }

    async def render(self, assembled: AssembledDocument) -> str:
        return self.render_document(assembled)

    def render_document(self, assembled: AssembledDocument, embedded: bool = False) -> str:
        html = self.env.get_template("document.html").render(**self.context(assembled, embedded))
        logger.info("Rendered HTML for %s %s (%d chars)", assembled.kind, assembled.number, len(html))
        return html

    def render_email(self, assembled: AssembledDocument, document_html: str | None = None) -> str:
        """Email body: greeting, per-kind message, summary, the document itself and a sign-off."""
        if document_html is None:
            document_html = self.render_document(assembled, embedded=True)
        ctx = self.context(assembled, embedded=True)
        ctx.update({
            "body_text": assembled.preferences.email_body_for(assembled.kind),
            "document_html": document_html,
            "email_links": _link_views(assembled.social_links_for("email")),
        })
        return self.env.get_template("email.html").render(**ctx)
