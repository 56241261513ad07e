from sqlalchemy import Column, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from docgen.database import Base


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Text)
    quote_number = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="draft")
    subtotal = Column(Float, nullable=False, default=0)
    discount_type = Column(Text)
    discount_value = Column(Float)
    tax = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)
    notes = Column(Text)
    valid_until = Column(Text)
    job_id = Column(Text, ForeignKey("jobs.id", ondelete="SET NULL"))
    signature_id = Column(Text)
    created_at = Column(Text, nullable=False)

    items = relationship("QuoteItem", back_populates="quote", cascade="all, delete-orphan")


class QuoteItem(Base):
    __tablename__ = "quote_items"

    id = Column(Text, primary_key=True)
    quote_id = Column(Text, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)

    quote = relationship("Quote", back_populates="items")
