"""Pydantic schemas for API request/response serialization."""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional, List, Dict, Any

from pydantic import BaseModel, Field, AfterValidator

from portal.core.options import CATEGORY_OPTIONS
from portal.core.permissions import ALL_PERMISSIONS, PermissionKey

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _choice(key: PermissionKey, name: str):
    allowed = CATEGORY_OPTIONS[key].values(name)

    def check(value):
        if value is not None and value not in allowed:
            raise ValueError(f"must be one of: {', '.join(allowed)}")
        return value

    return AfterValidator(check)


def _choices(key: PermissionKey, name: str):
    allowed = CATEGORY_OPTIONS[key].values(name)

    def check(values):
        bad = [v for v in values or [] if v not in allowed]
        if bad:
            raise ValueError(f"unknown values: {', '.join(bad)}")
        return values

    return AfterValidator(check)


def _email(value):
    if value and not EMAIL_RE.match(value):
        raise ValueError("must be a valid email address")
    return value


def _permission(value: str) -> str:
    if value not in ALL_PERMISSIONS:
        raise ValueError(f"unknown permission '{value}'")
    return value


Email = Annotated[Optional[str], AfterValidator(_email)]
Phone = Optional[Annotated[str, Field(max_length=20)]]


# ---- Shared ----
class ToggleResponse(BaseModel):
    id: int
    field: str
    value: bool
    message: str


# ---- Auth ----
class LoginRequest(BaseModel):
    email: str = Field(..., min_length=4)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[Dict[str, Any]] = None


# ---- User ----
class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: str
    office: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    is_active: bool = True
    permissions: List[str] = []
    last_login_at: Optional[datetime] = None
    login_count: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Annotated[str, AfterValidator(_email)] = Field(..., max_length=255)
    password: str = Field(..., min_length=8)
    password_confirmation: str
    role: Annotated[str, _choice(PermissionKey.USER_MANAGEMENT, "role")] = "staff"
    office: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)
    phone: Phone = None
    is_active: bool = True
    permissions: Optional[List[Annotated[str, AfterValidator(_permission)]]] = None


class UserUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Annotated[str, AfterValidator(_email)] = Field(..., max_length=255)
    password: Optional[str] = Field(None, min_length=8)
    password_confirmation: Optional[str] = None
    role: Annotated[str, _choice(PermissionKey.USER_MANAGEMENT, "role")] = "staff"
    office: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)
    phone: Phone = None
    is_active: bool = True
    permissions: Optional[List[Annotated[str, AfterValidator(_permission)]]] = None


# ---- Activity ----
class ActivityOut(BaseModel):
    id: int
    description: str
    type: str
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    metadata: Dict[str, Any] = {}
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None


# ---- News ----
class NewsInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    excerpt: Optional[str] = Field(None, max_length=500)
    content: str = Field(..., min_length=1)
    category: Annotated[str, _choice(PermissionKey.NEWS, "category")]
    status: Annotated[str, _choice(PermissionKey.NEWS, "status")] = "draft"
    is_featured: bool = False
    published_at: Optional[datetime] = None


class NewsOut(BaseModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    category: str
    status: str
    is_featured: bool
    published_at: Optional[datetime] = None
    image_path: Optional[str] = None
    author_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NewsStatusUpdate(BaseModel):
    status: Annotated[str, _choice(PermissionKey.NEWS, "status")]


# ---- Bids & Awards ----
class BidsAwardInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    reference_number: str = Field(..., min_length=1, max_length=100)
    bid_type: Annotated[str, _choice(PermissionKey.BIDS_AWARDS, "bid_type")]
    estimated_budget: Optional[Decimal] = Field(None, ge=0)
    bid_opening_date: Optional[date] = None
    bid_closing_date: date
    award_date: Optional[date] = None
    status: Annotated[str, _choice(PermissionKey.BIDS_AWARDS, "status")] = "draft"
    is_featured: bool = False
    awarded_to: Optional[str] = Field(None, max_length=255)
    awarded_amount: Optional[Decimal] = Field(None, ge=0)
    award_remarks: Optional[str] = None


class BidsAwardOut(BaseModel):
    id: int
    title: str
    description: str
    reference_number: str
    bid_type: str
    estimated_budget: Optional[Decimal] = None
    bid_opening_date: Optional[date] = None
    bid_closing_date: date
    award_date: Optional[date] = None
    status: str
    is_featured: bool
    awarded_to: Optional[str] = None
    awarded_amount: Optional[Decimal] = None
    award_remarks: Optional[str] = None
    documents: Optional[List[str]] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---- Tourism ----
class TourismPackageInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1, max_length=255)
    category: Annotated[str, _choice(PermissionKey.TOURISM, "category")]
    price: Optional[Decimal] = Field(None, ge=0)
    duration_days: int = Field(1, ge=1)
    duration_nights: int = Field(0, ge=0)
    difficulty_level: Annotated[str, _choice(PermissionKey.TOURISM, "difficulty_level")] = "easy"
    max_participants: Optional[int] = Field(None, ge=1)
    inclusions: Optional[str] = None
    exclusions: Optional[str] = None
    itinerary: Optional[str] = None
    contact_person: Optional[str] = Field(None, max_length=255)
    contact_email: Email = None
    contact_phone: Phone = None
    is_featured: bool = False
    is_active: bool = True


class TourismPackageOut(BaseModel):
    id: int
    title: str
    description: str
    location: str
    category: str
    price: Optional[Decimal] = None
    duration_days: int
    duration_nights: int
    difficulty_level: str
    max_participants: Optional[int] = None
    inclusions: Optional[str] = None
    exclusions: Optional[str] = None
    itinerary: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    is_featured: bool
    is_active: bool
    featured_image: Optional[str] = None
    gallery_images: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---- Awards & Recognition ----
class AwardsRecognitionInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    awarding_body: str = Field(..., min_length=1, max_length=255)
    category: Annotated[str, _choice(PermissionKey.AWARDS_RECOGNITION, "category")]
    award_date: date
    received_date: Optional[date] = None
    location: Optional[str] = Field(None, max_length=255)
    award_type: Annotated[str, _choice(PermissionKey.AWARDS_RECOGNITION, "award_type")]
    scope: Annotated[str, _choice(PermissionKey.AWARDS_RECOGNITION, "scope")]
    significance: Optional[str] = None
    criteria: Optional[str] = None
    recipient_type: Annotated[str, _choice(PermissionKey.AWARDS_RECOGNITION, "recipient_type")]
    recipient_name: Optional[str] = Field(None, max_length=255)
    contact_person: Optional[str] = Field(None, max_length=255)
    contact_email: Email = None
    contact_phone: Phone = None
    is_featured: bool = False
    is_active: bool = True


class AwardsRecognitionOut(BaseModel):
    id: int
    title: str
    description: str
    awarding_body: str
    category: str
    award_date: date
    received_date: Optional[date] = None
    location: Optional[str] = None
    award_type: str
    scope: str
    significance: Optional[str] = None
    criteria: Optional[str] = None
    recipient_type: str
    recipient_name: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    is_featured: bool
    is_active: bool
    featured_image: Optional[str] = None
    gallery_images: Optional[List[str]] = None
    supporting_documents: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---- Full Disclosure ----
class FullDisclosureInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    category: Annotated[str, _choice(PermissionKey.FULL_DISCLOSURE, "category")]
    description: Optional[str] = None
    is_published: bool = True


class FullDisclosureOut(BaseModel):
    id: int
    title: str
    category: str
    description: Optional[str] = None
    file_path: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[str] = None
    file_type: Optional[str] = None
    is_published: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---- Ordinances & Resolutions ----
class OrdinanceResolutionInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    number: str = Field(..., min_length=1, max_length=100)
    type: Annotated[str, _choice(PermissionKey.ORDINANCE_RESOLUTIONS, "type")]
    description: Optional[str] = None
    date_approved: date
    date_effectivity: Optional[date] = None
    sponsor: Optional[str] = Field(None, max_length=255)
    co_sponsors: Optional[List[str]] = None
    status: Annotated[str, _choice(PermissionKey.ORDINANCE_RESOLUTIONS, "status")] = "active"
    amendatory_to: Optional[List[str]] = None
    repealed_by: Optional[List[str]] = None
    categories: Annotated[Optional[List[str]], _choices(PermissionKey.ORDINANCE_RESOLUTIONS, "category")] = None
    is_featured: bool = False
    is_active: bool = True


class OrdinanceResolutionOut(BaseModel):
    id: int
    title: str
    number: str
    type: str
    description: Optional[str] = None
    date_approved: date
    date_effectivity: Optional[date] = None
    sponsor: Optional[str] = None
    co_sponsors: Optional[List[str]] = None
    status: str
    amendatory_to: Optional[List[str]] = None
    repealed_by: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    is_featured: bool
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---- Sangguniang Bayan ----
class SangguniangBayanMemberInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    position: str = Field(..., min_length=1, max_length=255)
    position_type: Annotated[str, _choice(PermissionKey.SANGGUNIANG_BAYAN, "position_type")] = "regular"
    bio: Optional[str] = None
    email: Email = None
    phone: Phone = None
    committees: Optional[List[str]] = None
    district: Optional[str] = Field(None, max_length=255)
    term_start: Optional[str] = Field(None, max_length=20)
    term_end: Optional[str] = Field(None, max_length=20)
    order: Optional[int] = Field(None, ge=0)
    is_active: bool = True
    is_featured: bool = False


class SangguniangBayanMemberOut(BaseModel):
    id: int
    name: str
    position: str
    position_type: str
    bio: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    photo: Optional[str] = None
    order: int
    is_active: bool
    is_featured: bool
    committees: Optional[List[str]] = None
    district: Optional[str] = None
    term_start: Optional[str] = None
    term_end: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---- Presentation context ----
class PresentationContext(BaseModel):
    user: UserOut
    permissions: Dict[str, bool]
    badge_counts: Dict[str, int]
    storage_url: str
