from sqlalchemy import Column, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from docgen.database import Base


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Text)
    invoice_number = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="draft")
    subtotal = Column(Float, nullable=False, default=0)
    discount_type = Column(Text)
    discount_value = Column(Float)
    tax = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)
    late_fee_amount = Column(Float)
    notes = Column(Text)
    due_date = Column(Text)
    job_id = Column(Text, ForeignKey("jobs.id", ondelete="SET NULL"))
    signature_id = Column(Text)
    created_at = Column(Text, nullable=False)

    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="invoice", cascade="all, delete-orphan")


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Text, primary_key=True)
    invoice_id = Column(Text, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="items")
