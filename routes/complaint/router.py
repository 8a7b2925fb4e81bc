from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool

from core.dependencies import Identity, citizen_required, get_current_user, get_store, request_settings
from core.uploads import remove_upload, save_complaint_image
from routes.complaint.schemas import ComplaintRead, ComplaintWithOwner
from routes.complaint.store import ComplaintStore

router = APIRouter(prefix="/complaints", tags=["Complaint"])


@router.post("", response_model=ComplaintRead)
async def create_complaint(
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    location: str = Form(...),
    image: Optional[UploadFile] = File(None),
    user: Identity = Depends(citizen_required),
    store: ComplaintStore = Depends(get_store),
    settings=Depends(request_settings),
):
    image_path = None
    if image is not None and image.filename:
        image_path = await save_complaint_image(image, settings)

    try:
        complaint = await run_in_threadpool(
            store.create, user, title, description, category, location, image_path
        )
    except Exception:
        remove_upload(image_path)
        raise

    return ComplaintRead.from_document(complaint)


@router.get("/user/{user_id}", response_model=List[ComplaintRead])
def user_complaints(
    user_id: str,
    user: Identity = Depends(get_current_user),
    store: ComplaintStore = Depends(get_store),
):
    return [ComplaintRead.from_document(c) for c in store.list_by_owner(user_id, user)]


@router.get("/{complaint_id}", response_model=ComplaintWithOwner)
def complaint_detail(
    complaint_id: str,
    user: Identity = Depends(get_current_user),
    store: ComplaintStore = Depends(get_store),
):
    complaint, owner = store.get_by_id(complaint_id, user)
    return ComplaintWithOwner.from_pair(complaint, owner)
