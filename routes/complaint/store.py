"""Complaint persistence and the self-or-admin visibility rules.

Citizens only ever see their own complaints; admins see everything. The role
gates on the routes decide *who may call* an operation, this module decides
*which records* the caller may see.
"""
from typing import Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from fastapi import HTTPException, status

from core.logger import get_logger
from models import Complaint, ComplaintStatus, User

logger = get_logger("store")

OwnerProjection = Dict[str, str]


def _object_id(value: str) -> Optional[ObjectId]:
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


class ComplaintStore:
    def __init__(self, alias: str):
        self.alias = alias

    def _complaints(self):
        return Complaint.objects.using(self.alias)

    def _users(self):
        return User.objects.using(self.alias)

    def owner_projections(self, owner_ids: Iterable[ObjectId]) -> Dict[ObjectId, OwnerProjection]:
        ids = list(set(owner_ids))
        if not ids:
            return {}
        owners = self._users()(id__in=ids).only("name", "email")
        return {u.id: {"id": str(u.id), "name": u.name, "email": u.email} for u in owners}

    def create(
        self,
        identity,
        title: str,
        description: str,
        category: str,
        location: str,
        image_path: Optional[str] = None,
    ) -> Complaint:
        complaint = Complaint(
            citizen_id=ObjectId(identity.id),
            title=title,
            description=description,
            category=category,
            location=location,
            image_path=image_path,
            status=ComplaintStatus.PENDING.value,
        )
        complaint.switch_db(self.alias)
        # save() validates first; a bad category raises ValidationError before the write
        complaint.save()
        logger.info("Complaint %s created by %s (category=%s)", complaint.id, identity.id, category)
        return complaint

    def list_by_owner(self, target_id: str, identity) -> List[Complaint]:
        if identity.id != target_id and not identity.is_admin:
            logger.warning("User %s refused complaints of %s", identity.id, target_id)
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Unauthorized access to user complaints")

        owner_id = _object_id(target_id)
        if owner_id is None:
            return []
        return list(self._complaints()(citizen_id=owner_id).order_by("-created_at"))

    def list_all(self) -> List[Tuple[Complaint, Optional[OwnerProjection]]]:
        complaints = list(self._complaints().order_by("-created_at"))
        owners = self.owner_projections(c.citizen_id for c in complaints)
        return [(c, owners.get(c.citizen_id)) for c in complaints]

    def find(self, complaint_id: str) -> Complaint:
        oid = _object_id(complaint_id)
        complaint = self._complaints()(id=oid).first() if oid is not None else None
        if not complaint:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Complaint not found")
        return complaint

    def get_by_id(self, complaint_id: str, identity) -> Tuple[Complaint, Optional[OwnerProjection]]:
        complaint = self.find(complaint_id)

        if not identity.is_admin and str(complaint.citizen_id) != identity.id:
            logger.warning("User %s refused complaint %s", identity.id, complaint_id)
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Unauthorized access")

        owner = self.owner_projections([complaint.citizen_id]).get(complaint.citizen_id)
        return complaint, owner

    def update_status(self, complaint_id: str, new_status: str) -> Complaint:
        if new_status not in {s.value for s in ComplaintStatus}:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Invalid status value")

        complaint = self.find(complaint_id)
        previous = complaint.status
        complaint.status = new_status
        complaint.switch_db(self.alias)
        complaint.save()
        logger.info("Complaint %s status %s -> %s", complaint.id, previous, new_status)
        return complaint
