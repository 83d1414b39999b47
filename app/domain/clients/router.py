"""Client router - FastAPI endpoints for client lookups"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import ClientResponse
from .service import ClientService

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


@router.get("/{client_number}", response_model=ClientResponse)
async def get_client(
    client_number: str,
    service: ClientService = Depends(get_client_service),
):
    """Look up a client by the number issued at first booking"""
    client = service.get_by_client_number(client_number)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return ClientResponse(
        id=client.id,
        clientNumber=client.client_number,
        documentType=client.document_type,
        documentNumber=client.document_number,
        fullName=client.full_name,
        email=client.email,
        phone=client.phone,
        mobile=client.mobile,
        address=client.address,
        isActive=client.is_active,
        createdAt=client.created_at,
    )
