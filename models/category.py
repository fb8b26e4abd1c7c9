from sqlalchemy import Column, String, Text

from models.base_model import BaseModel, Base, IntegerPrimaryKeyMixin


class Category(IntegerPrimaryKeyMixin, BaseModel, Base):
    __tablename__ = "categories"

    name = Column(String(100), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
