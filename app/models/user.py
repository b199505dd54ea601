from sqlalchemy import Boolean, Column, DateTime, Enum, Float, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from app.models import Base
from app.models.property import new_id


class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True)  # stored lower-cased
    password = Column(String(255), nullable=False)  # bcrypt hash
    phone = Column(String(50), nullable=False)
    role = Column(Enum('landlord', 'tenant', 'admin', name='userrole'), nullable=False, default='tenant')
    profile_image = Column(String(500), nullable=False, default="")
    is_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    properties = Column(JSONB, nullable=False, default=list)  # landlord's property ids
    favorites = Column(JSONB, nullable=False, default=list)  # tenant's favourite property ids
    preferred_locations = Column(JSONB, nullable=False, default=list)
    max_budget = Column(Float)
    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


USER_FIELDS = {
    "id": "id",
    "name": "name",
    "email": "email",
    "password": "password",
    "phone": "phone",
    "role": "role",
    "profileImage": "profile_image",
    "isVerified": "is_verified",
    "isActive": "is_active",
    "properties": "properties",
    "favorites": "favorites",
    "preferredLocations": "preferred_locations",
    "maxBudget": "max_budget",
    "rating": "rating",
    "reviewCount": "review_count",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
USER_ARRAY_FIELDS = ("properties", "favorites", "preferredLocations")
