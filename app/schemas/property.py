from datetime import date
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, confloat

from app.schemas.base import CamelModel

PROPERTY_TYPES = ("apartment", "house", "studio", "bedsitter", "maisonette", "penthouse")
LEASE_TERMS = ("monthly", "quarterly", "yearly")
AMENITIES = (
    "parking", "security", "water", "electricity", "internet", "gym",
    "pool", "garden", "balcony", "air-conditioning", "furnished",
    "kitchen", "laundry", "elevator", "backup-power",
)

PropertyType = Literal["apartment", "house", "studio", "bedsitter", "maisonette", "penthouse"]
LeaseTerm = Literal["monthly", "quarterly", "yearly"]
Amenity = Literal[
    "parking", "security", "water", "electricity", "internet", "gym",
    "pool", "garden", "balcony", "air-conditioning", "furnished",
    "kitchen", "laundry", "elevator", "backup-power",
]


class Coordinates(CamelModel):
    lat: Optional[confloat(ge=-90, le=90)] = None
    lng: Optional[confloat(ge=-180, le=180)] = None


class Location(CamelModel):
    area: str = Field(..., min_length=1)
    city: str = "Nairobi"
    coordinates: Optional[Coordinates] = None
    address: str = Field(..., min_length=1)


class LocationUpdate(CamelModel):
    area: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    address: Optional[str] = Field(None, min_length=1)


class PropertyCreate(CamelModel):
    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=20, max_length=2000)
    price: float = Field(..., ge=0)
    location: Location
    property_type: PropertyType
    bedrooms: int = Field(..., ge=0)
    bathrooms: int = Field(..., ge=0)
    size: float = Field(..., gt=0, description="Floor area in square feet")
    amenities: List[Amenity] = []
    virtual_tour: Optional[str] = None
    is_available: bool = True
    lease_term: LeaseTerm = "monthly"
    deposit: float = Field(0, ge=0)
    contact_phone: str = Field(..., min_length=1)
    contact_email: EmailStr
    available_from: date

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Two bedroom apartment in Kilimani",
                "description": "Bright corner unit with balcony, close to Yaya Centre.",
                "price": 45000,
                "location": {"area": "Kilimani", "city": "Nairobi", "address": "Argwings Kodhek Rd"},
                "propertyType": "apartment",
                "bedrooms": 2,
                "bathrooms": 2,
                "size": 950,
                "amenities": ["parking", "security", "balcony"],
                "contactPhone": "+254700000000",
                "contactEmail": "landlord@example.com",
                "availableFrom": "2026-11-01",
            }
        }


class PropertyUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=5, max_length=100)
    description: Optional[str] = Field(None, min_length=20, max_length=2000)
    price: Optional[float] = Field(None, ge=0)
    location: Optional[LocationUpdate] = None
    property_type: Optional[PropertyType] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    size: Optional[float] = Field(None, gt=0)
    amenities: Optional[List[Amenity]] = None
    virtual_tour: Optional[str] = None
    is_available: Optional[bool] = None
    lease_term: Optional[LeaseTerm] = None
    deposit: Optional[float] = Field(None, ge=0)
    contact_phone: Optional[str] = Field(None, min_length=1)
    contact_email: Optional[EmailStr] = None
    available_from: Optional[date] = None
    # Moderation flags, only honoured for admins
    is_verified: Optional[bool] = None
    is_featured: Optional[bool] = None


class ReportRequest(CamelModel):
    reason: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
