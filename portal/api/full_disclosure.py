"""Full Disclosure API router."""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from portal.api.common import client_ip, page_payload, parse_payload, record_payload, uploads
from portal.core.security import require_full_disclosure
from portal.db.session import get_db
from portal.models.user import User
from portal.services.context_service import build_context
from portal.services.full_disclosure_service import full_disclosure_service

router = APIRouter(prefix="/full-disclosure", tags=["full-disclosure"])


def attachment(stream, filename: str) -> StreamingResponse:
    """Stream a stored file as a download named ``filename``."""
    return StreamingResponse(
        stream,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.get("/")
async def list_documents(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(require_full_disclosure),
):
    """List documents. ``status`` is ``published`` or ``unpublished``."""
    result = full_disclosure_service.list(
        db, user, {"search": search, "category": category, "status": status}, page, page_size,
    )
    return page_payload(result, full_disclosure_service, build_context(db, user))


@router.get("/grouped")
async def grouped_documents(db: Session = Depends(get_db), user: User = Depends(require_full_disclosure)):
    """Published documents grouped by category."""
    return {
        "groups": full_disclosure_service.grouped(db, user),
        "options": full_disclosure_service.options.as_payload(),
        "context": build_context(db, user),
    }


@router.get("/{document_id}")
async def get_document(
    document_id: int, db: Session = Depends(get_db), user: User = Depends(require_full_disclosure),
):
    record = full_disclosure_service.get(db, user, document_id)
    return record_payload(record, full_disclosure_service, build_context(db, user))


@router.get("/{document_id}/download")
async def download_document(
    document_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_full_disclosure),
):
    _, stream, filename = full_disclosure_service.download(db, user, document_id, ip_address=client_ip(request))
    return attachment(stream, filename)


@router.post("/", status_code=201)
async def create_document(
    request: Request,
    data: str = Form("{}"),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_full_disclosure),
):
    """Upload a document. The file is required."""
    record = full_disclosure_service.create(
        db, user, parse_payload(data), {"file_path": uploads(file)}, ip_address=client_ip(request),
    )
    return record_payload(record, full_disclosure_service, build_context(db, user), "Document uploaded successfully.")


@router.put("/{document_id}")
async def update_document(
    document_id: int,
    request: Request,
    data: str = Form("{}"),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_full_disclosure),
):
    record = full_disclosure_service.update(
        db, user, document_id, parse_payload(data), {"file_path": uploads(file)},
        ip_address=client_ip(request),
    )
    return record_payload(record, full_disclosure_service, build_context(db, user), "Document updated successfully.")


@router.delete("/{document_id}")
async def delete_document(
    document_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_full_disclosure),
):
    full_disclosure_service.delete(db, user, document_id, ip_address=client_ip(request))
    return {"message": "Document deleted successfully.", "context": build_context(db, user)}
