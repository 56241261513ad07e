from sqlalchemy import Column, Text
from docgen.database import Base


class Signature(Base):
    __tablename__ = "signatures"

    id = Column(Text, primary_key=True)
    signer_name = Column(Text, nullable=False)
    signed_at = Column(Text, nullable=False)
    # data: URL or bare base64 PNG/JPEG
    signature_data = Column(Text, nullable=False)
