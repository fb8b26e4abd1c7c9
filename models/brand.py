from sqlalchemy import Column, String, Text

from models.base_model import BaseModel, Base, IntegerPrimaryKeyMixin


class Brand(IntegerPrimaryKeyMixin, BaseModel, Base):
    __tablename__ = "brands"

    name = Column(String(100), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    logo_url = Column(Text, nullable=True)
    logo_public_id = Column(String(255), nullable=True)
