"""
Pydantic models for citizen reports.
These models handle validation for report submission, admin updates and responses.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Any, Dict, List, Optional
from enum import Enum


class ReportCategory(str, Enum):
    """Closed set of report categories."""
    ROAD = "road"
    ELECTRICITY = "electricity"
    STREET_LIGHT = "street_light"
    BUILDING = "building"
    WALL = "wall"
    WATER = "water"
    MINE = "mine"


class ReportPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReportStatus(str, Enum):
    """
    Report lifecycle states.

    pending -> processing -> completed, or pending -> rejected.
    completed and rejected are terminal in normal operation.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    REJECTED = "rejected"


class LocationInput(BaseModel):
    """Coordinates are required together; address is filled by reverse geocoding when blank."""
    latitude: float = Field(..., ge=-90, le=90, description="Latitude coordinate")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude coordinate")
    address: Optional[str] = Field(None, max_length=500, description="Human-readable address")


class Location(BaseModel):
    latitude: float
    longitude: float
    address: Optional[str] = None


class ImageInput(BaseModel):
    """
    An image attached to a report.

    source is either an inline data URL (data:image/png;base64,...) which gets
    uploaded to storage, or a plain URL which is kept as-is without upload.
    """
    source: str = Field(..., min_length=1, description="Data URL or existing image URL")
    filename: Optional[str] = Field(None, max_length=200, description="Original file name")
    local_url: Optional[str] = Field(None, description="Locator on the reporting device")


class ReportImage(BaseModel):
    local_url: str
    public_url: Optional[str] = None


def _coerce_images(value: Any) -> Any:
    # Plain strings are accepted for compatibility with the mobile client
    if value is None:
        return value
    return [{"source": item} if isinstance(item, str) else item for item in value]


class ReportCreate(BaseModel):
    """
    Model for creating a new report (public intake).
    Status, review metadata and timestamps are system-controlled and ignored here.
    """
    title: Optional[str] = Field(None, max_length=200, description="Short title")
    content: Optional[str] = Field(None, max_length=5000, description="What the citizen observed")
    author_id: Optional[str] = Field(None, max_length=200, description="Client ID from the mobile app")
    author_name: Optional[str] = Field(None, max_length=200, description="Display name of the reporter")
    category: ReportCategory = Field(..., description="Report category")
    priority: ReportPriority = Field(default=ReportPriority.MEDIUM, description="Report priority")
    tags: Optional[List[str]] = Field(None, description="Free-text labels")
    images: Optional[List[ImageInput]] = Field(None, description="Images to attach")
    location: Optional[LocationInput] = Field(None, description="Where the issue was observed")

    @field_validator("images", mode="before")
    @classmethod
    def coerce_images(cls, value):
        return _coerce_images(value)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Broken street light",
                "content": "The light at the corner has been off for a week.",
                "author_name": "Omar",
                "category": "street_light",
                "priority": "medium",
                "tags": ["night", "safety"],
                "location": {"latitude": 36.2, "longitude": 37.1},
            }
        }
        extra = "ignore"


class ReportUpdate(BaseModel):
    """Content edit by an admin. Status is changed only through the status endpoint."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    category: Optional[ReportCategory] = None
    priority: Optional[ReportPriority] = None
    tags: Optional[List[str]] = None
    images: Optional[List[ImageInput]] = None
    location: Optional[LocationInput] = None

    @field_validator("images", mode="before")
    @classmethod
    def coerce_images(cls, value):
        return _coerce_images(value)

    class Config:
        extra = "forbid"


class StatusTransitionRequest(BaseModel):
    """Request to move a report to another status."""
    status: ReportStatus = Field(..., description="New status value")
    rejection_reason: Optional[str] = Field(None, max_length=1000, description="Only used when rejecting")
    location: Optional[LocationInput] = Field(None, description="Optional location added during review")


def _stored_images(value: Any) -> List[Dict[str, Any]]:
    """Older documents hold bare URL strings instead of image objects."""
    if not isinstance(value, list):
        return []
    images = []
    for item in value:
        if isinstance(item, str):
            images.append({"local_url": item, "public_url": None})
        elif isinstance(item, dict) and item.get("local_url"):
            images.append(item)
    return images


def _stored_tags(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(tag) for tag in value if tag is not None]


class ReportResponse(BaseModel):
    """
    Model for report responses (what API returns).
    Enum-valued fields are plain strings so legacy documents pass through unchanged.
    """
    id: str = Field(..., description="Store-assigned identifier")
    title: Optional[str] = None
    content: Optional[str] = None
    author_id: Optional[str] = None
    author_name: Optional[str] = None
    status: str = Field(default=ReportStatus.PENDING.value)
    category: Optional[str] = None
    priority: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    images: List[ReportImage] = Field(default_factory=list)
    location: Optional[Location] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "ReportResponse":
        location = data.get("location")
        if not isinstance(location, dict) or location.get("latitude") is None or location.get("longitude") is None:
            location = None
        return cls(
            id=data["id"],
            title=data.get("title"),
            content=data.get("content"),
            author_id=data.get("author_id"),
            author_name=data.get("author_name"),
            status=data.get("status") or ReportStatus.PENDING.value,
            category=data.get("category"),
            priority=data.get("priority"),
            tags=_stored_tags(data.get("tags")),
            images=_stored_images(data.get("images")),
            location=location,
            reviewed_by=data.get("reviewed_by"),
            reviewed_at=data.get("reviewed_at"),
            rejection_reason=data.get("rejection_reason"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ReportPage(BaseModel):
    reports: List[ReportResponse]
    pagination: Pagination
