from sqlalchemy import Column, Float, ForeignKey, Text
from sqlalchemy.orm import relationship
from docgen.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Text, primary_key=True)
    invoice_id = Column(Text, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Float, nullable=False)
    method = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="completed")
    payment_date = Column(Text, nullable=False)
    notes = Column(Text)

    invoice = relationship("Invoice", back_populates="payments")
