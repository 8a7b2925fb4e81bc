from typing import List

from fastapi import APIRouter, Depends

from core.dependencies import Identity, admin_required, get_store
from routes.complaint.schemas import ComplaintRead, ComplaintWithOwner, StatusUpdate
from routes.complaint.store import ComplaintStore

router = APIRouter(prefix="/complaints", tags=["Admin-Complaint"])


@router.get("", response_model=List[ComplaintWithOwner])
def all_complaints(admin: Identity = Depends(admin_required), store: ComplaintStore = Depends(get_store)):
    return [ComplaintWithOwner.from_pair(c, owner) for c, owner in store.list_all()]


@router.put("/{complaint_id}/status", response_model=ComplaintRead)
def update_status(
    complaint_id: str,
    payload: StatusUpdate,
    admin: Identity = Depends(admin_required),
    store: ComplaintStore = Depends(get_store),
):
    return ComplaintRead.from_document(store.update_status(complaint_id, payload.status))
