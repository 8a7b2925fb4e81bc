from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from models import ComplaintStatus


class OwnerProfile(BaseModel):
    id: str
    name: str
    email: str


class ComplaintRead(BaseModel):
    id: str
    citizen_id: str
    title: str
    description: str
    category: str
    location: str
    image_path: Optional[str] = None
    status: ComplaintStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, complaint):
        return cls(
            id=str(complaint.id),
            citizen_id=str(complaint.citizen_id),
            title=complaint.title,
            description=complaint.description,
            category=complaint.category,
            location=complaint.location,
            image_path=complaint.image_path,
            status=complaint.status,
            created_at=complaint.created_at,
            updated_at=complaint.updated_at,
        )


class ComplaintWithOwner(ComplaintRead):
    citizen: Optional[OwnerProfile] = None

    @classmethod
    def from_pair(cls, complaint, owner: Optional[dict]):
        base = ComplaintRead.from_document(complaint)
        return cls(**base.model_dump(), citizen=owner)


class StatusUpdate(BaseModel):
    # plain str so out-of-range values reach the 400 check instead of a schema error
    status: Optional[str] = None
