import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, Float, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, TSVECTOR
from app.models import Base

# Fields covered by the full-text index (kept in sync with the fts trigger in the migration)
PROPERTY_TEXT_FIELDS = ("title", "description", "location.area")


def new_id() -> str:
    return uuid.uuid4().hex


class Property(Base):
    __tablename__ = "properties"
    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    location_area = Column(String(255), nullable=False)
    location_city = Column(String(100), nullable=False, default="Nairobi")
    location_address = Column(String(255), nullable=False)
    location_lat = Column(Float)
    location_lng = Column(Float)
    property_type = Column(
        Enum('apartment', 'house', 'studio', 'bedsitter', 'maisonette', 'penthouse', name='propertytype'),
        nullable=False,
    )
    bedrooms = Column(Integer, nullable=False)
    bathrooms = Column(Integer, nullable=False)
    size = Column(Float, nullable=False)  # square feet
    amenities = Column(JSONB, nullable=False, default=list)
    images = Column(JSONB, nullable=False, default=list)
    virtual_tour = Column(String(500))
    landlord_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    is_available = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    view_count = Column(Integer, nullable=False, default=0)
    favorite_count = Column(Integer, nullable=False, default=0)
    lease_term = Column(Enum('monthly', 'quarterly', 'yearly', name='leaseterm'), nullable=False, default='monthly')
    deposit = Column(Numeric(12, 2), nullable=False, default=0)
    contact_phone = Column(String(50), nullable=False)
    contact_email = Column(String(255), nullable=False)
    available_from = Column(Date, nullable=False)
    reports = Column(JSONB, nullable=False, default=list)
    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    fts = Column(TSVECTOR)  # Full-text search vector, maintained by a trigger


# Document path -> column attribute
PROPERTY_FIELDS = {
    "id": "id",
    "title": "title",
    "description": "description",
    "price": "price",
    "location.area": "location_area",
    "location.city": "location_city",
    "location.address": "location_address",
    "location.coordinates.lat": "location_lat",
    "location.coordinates.lng": "location_lng",
    "propertyType": "property_type",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "size": "size",
    "amenities": "amenities",
    "images": "images",
    "virtualTour": "virtual_tour",
    "landlord": "landlord_id",
    "isAvailable": "is_available",
    "isVerified": "is_verified",
    "isFeatured": "is_featured",
    "viewCount": "view_count",
    "favoriteCount": "favorite_count",
    "leaseTerm": "lease_term",
    "deposit": "deposit",
    "contactPhone": "contact_phone",
    "contactEmail": "contact_email",
    "availableFrom": "available_from",
    "reports": "reports",
    "rating": "rating",
    "reviewCount": "review_count",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
PROPERTY_ARRAY_FIELDS = ("amenities", "images", "reports")
