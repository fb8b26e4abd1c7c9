import enum

from sqlalchemy import Column, String, Boolean, Enum, Text

from models.base_model import Base, BaseModel, SoftDeleteMixin, UUIDPrimaryKeyMixin


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class User(UUIDPrimaryKeyMixin, SoftDeleteMixin, BaseModel, Base):
    __tablename__ = "users"

    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(20), nullable=True, index=True)
    password_hash = Column(String(255), nullable=False)

    role = Column(
        Enum(Role, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.CUSTOMER,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    # Object storage info for the avatar
    avatar_url = Column(Text, nullable=True)
    avatar_public_id = Column(String(255), nullable=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
