from sqlalchemy import Column, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from docgen.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Text)
    job_number = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text)
    status = Column(Text, nullable=False, default="draft")
    priority = Column(Text, nullable=False, default="medium")
    assigned_to = Column(Text)
    scheduled_start = Column(Text)
    scheduled_end = Column(Text)
    actual_start = Column(Text)
    actual_end = Column(Text)
    subtotal = Column(Float)
    discount_type = Column(Text)
    discount_value = Column(Float)
    tax = Column(Float)
    total = Column(Float)
    notes = Column(Text)
    completion_signature_id = Column(Text)
    created_at = Column(Text, nullable=False)

    items = relationship("JobItem", back_populates="job", cascade="all, delete-orphan")
    photos = relationship("JobPhoto", back_populates="job", cascade="all, delete-orphan")


class JobItem(Base):
    __tablename__ = "job_items"

    id = Column(Text, primary_key=True)
    job_id = Column(Text, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)

    job = relationship("Job", back_populates="items")


class JobPhoto(Base):
    __tablename__ = "job_photos"

    id = Column(Text, primary_key=True)
    job_id = Column(Text, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    photo_url = Column(Text, nullable=False)
    photo_type = Column(Text, nullable=False, default="other")
    caption = Column(Text)
    display_order = Column(Integer)
    deleted_at = Column(Text)

    job = relationship("Job", back_populates="photos")
