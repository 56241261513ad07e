from dataclasses import dataclass

DEFAULT_FOOTER = "Thank you for your business!"

DEFAULT_EMAIL_BODIES = {
    "job": (
        "Please find attached the summary of the work completed for you. "
        "Let us know if you have any questions about the job."
    ),
    "quote": (
        "Thank you for the opportunity to quote this work. Please review the "
        "attached quote and let us know if you would like to proceed."
    ),
    "invoice": (
        "Please find your invoice attached. Payment details are included "
        "below for your convenience."
    ),
}


@dataclass(frozen=True)
class RenderPreferences:
    """Per-tenant switches shared by the canvas and markup renderers."""

    show_logo: bool = True
    show_notes: bool = True
    show_signature: bool = True
    show_line_item_details: bool = True
    show_job_photos: bool = True
    show_quote_photos: bool = False
    show_invoice_photos: bool = False
    terms_conditions: str | None = None
    footer_text: str | None = None
    email_job_body: str | None = None
    email_quote_body: str | None = None
    email_invoice_body: str | None = None
    default_payment_method: str = "any"
    payment_terms_days: int | None = None
    late_fee_percentage: float | None = None

    @classmethod
    def from_company(cls, company) -> "RenderPreferences":
        if company is None:
            return cls()
        defaults = cls()

        def flag(name: str) -> bool:
            value = getattr(company, f"pdf_{name}", None)
            return getattr(defaults, name) if value is None else bool(value)

        return cls(
            show_logo=flag("show_logo"),
            show_notes=flag("show_notes"),
            show_signature=flag("show_signature"),
            show_line_item_details=flag("show_line_item_details"),
            show_job_photos=flag("show_job_photos"),
            show_quote_photos=flag("show_quote_photos"),
            show_invoice_photos=flag("show_invoice_photos"),
            terms_conditions=company.pdf_terms_conditions or None,
            footer_text=company.pdf_footer_text or None,
            email_job_body=company.email_job_body or None,
            email_quote_body=company.email_quote_body or None,
            email_invoice_body=company.email_invoice_body or None,
            default_payment_method=company.default_payment_method or "any",
            payment_terms_days=company.payment_terms_days,
            late_fee_percentage=company.late_fee_percentage,
        )

    def show_photos_for(self, kind: str) -> bool:
        return {
            "job": self.show_job_photos,
            "quote": self.show_quote_photos,
            "invoice": self.show_invoice_photos,
        }.get(kind, False)

    def email_body_for(self, kind: str) -> str:
        custom = getattr(self, f"email_{kind}_body", None)
        return custom or DEFAULT_EMAIL_BODIES[kind]

    @property
    def footer(self) -> str:
        return self.footer_text or DEFAULT_FOOTER

    @property
    def has_late_fee_policy(self) -> bool:
        return bool(self.late_fee_percentage) and self.late_fee_percentage > 0
