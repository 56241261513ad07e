from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from docgen.database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text)
    phone = Column(Text)
    address = Column(Text)
    city = Column(Text)
    state = Column(Text)
    zip = Column(Text)
    website = Column(Text)
    logo_url = Column(Text)
    brand_primary_color = Column(Text)
    default_payment_method = Column(Text)
    payment_terms_days = Column(Integer)
    late_fee_percentage = Column(Float)
    quote_number_prefix = Column(Text, nullable=False, default="Q")
    invoice_number_prefix = Column(Text, nullable=False, default="INV")
    job_number_prefix = Column(Text, nullable=False, default="J")

    # Rendering preferences; NULL means "use the default"
    pdf_show_logo = Column(Boolean)
    pdf_show_notes = Column(Boolean)
    pdf_show_signature = Column(Boolean)
    pdf_show_line_item_details = Column(Boolean)
    pdf_show_job_photos = Column(Boolean)
    pdf_show_quote_photos = Column(Boolean)
    pdf_show_invoice_photos = Column(Boolean)
    pdf_terms_conditions = Column(Text)
    pdf_footer_text = Column(Text)
    email_job_body = Column(Text)
    email_quote_body = Column(Text)
    email_invoice_body = Column(Text)
    created_at = Column(Text, nullable=False)

    social_links = relationship(
        "SocialLink",
        back_populates="company",
        cascade="all, delete-orphan",
        order_by="SocialLink.display_order",
    )


class SocialLink(Base):
    __tablename__ = "company_social_links"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    platform_name = Column(Text, nullable=False)
    url = Column(Text, nullable=False)
    icon_url = Column(Text)
    display_order = Column(Integer, nullable=False, default=0)
    show_on_invoice = Column(Boolean, nullable=False, default=True)
    show_on_quote = Column(Boolean, nullable=False, default=True)
    show_on_job = Column(Boolean, nullable=False, default=True)
    show_on_email = Column(Boolean, nullable=False, default=True)

    company = relationship("Company", back_populates="social_links")
