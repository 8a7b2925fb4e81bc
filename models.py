import enum
from datetime import datetime

from mongoengine import DateTimeField, Document, EmailField, ObjectIdField, StringField


class Role(str, enum.Enum):
    CITIZEN = "citizen"
    ADMIN = "admin"


class ComplaintCategory(str, enum.Enum):
    ROAD = "Road"
    STREETLIGHT = "Streetlight"
    DRAINAGE = "Drainage"
    GARBAGE = "Garbage"
    WATER_SUPPLY = "Water Supply"
    OTHER = "Other"


class ComplaintStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In-Progress"
    RESOLVED = "Resolved"


class User(Document):
    meta = {"collection": "users"}

    name = StringField(required=True)
    email = EmailField(required=True, unique=True)
    phone = StringField()
    password_hash = StringField(required=True)
    role = StringField(choices=[r.value for r in Role], default=Role.CITIZEN.value, required=True)

    created_at = DateTimeField(default=datetime.utcnow)


class Complaint(Document):
    meta = {
        "collection": "complaints",
        "indexes": ["citizen_id", "-created_at"],
    }

    # owner is stored as a bare id; profile fields are read with an explicit query
    citizen_id = ObjectIdField(required=True)

    title = StringField(required=True)
    description = StringField(required=True)
    category = StringField(choices=[c.value for c in ComplaintCategory], required=True)
    location = StringField(required=True)
    image_path = StringField(default=None)

    status = StringField(
        choices=[s.value for s in ComplaintStatus],
        default=ComplaintStatus.PENDING.value,
        required=True,
    )

    created_at = DateTimeField(default=datetime.utcnow)
    updated_at = DateTimeField(default=datetime.utcnow)

    def save(self, *args, **kwargs):
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)
