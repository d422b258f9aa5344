from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import AuditRecord, CreateAuditRequest
from core.exceptions import InvalidAuditRequestError
from services.audit_service import AuditService

# Create router
router = APIRouter()


def get_audit_service(request: Request) -> AuditService:
    return request.app.state.audit_service


@router.get("/health")
async def health():
    return {"service": "Site Audit", "status": "running"}


@router.post("/audits", response_model=AuditRecord, status_code=201)
def create_audit(
    request: CreateAuditRequest, service: AuditService = Depends(get_audit_service)
):
    """
    Creates a PENDING audit and queues it for background processing.
    Poll GET /audits/{id} for the status.
    """
    try:
        return service.create_audit(request.url)
    except InvalidAuditRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create audit: {str(e)}")


@router.get("/audits", response_model=List[AuditRecord])
def get_audits(service: AuditService = Depends(get_audit_service)):
    """All audits, newest first"""
    return service.get_audits()


@router.get("/audits/{audit_id}", response_model=AuditRecord)
def get_audit(audit_id: str, service: AuditService = Depends(get_audit_service)):
    audit = service.get_audit(audit_id)
    if audit is None:
        raise HTTPException(status_code=404, detail="Audit not found")
    return audit
