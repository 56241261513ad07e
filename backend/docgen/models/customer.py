from sqlalchemy import Column, ForeignKey, Text
from docgen.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    email = Column(Text)
    phone = Column(Text)
    address = Column(Text)
    city = Column(Text)
    state = Column(Text)
    zip = Column(Text)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id", ondelete="SET NULL"))
    full_name = Column(Text)
    email = Column(Text, nullable=False)
