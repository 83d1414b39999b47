"""Client service - Business logic for client operations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Client
from ...shared.clock import utcnow
from ...shared.numbering import generate_client_number
from .repository import ClientRepository

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 5


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_by_client_number(self, client_number: str) -> Optional[Client]:
        return self.repo.get_by_client_number(self.db, client_number)

    def resolve_client(
        self,
        document_type: str,
        document_number: str,
        full_name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        mobile: Optional[str] = None,
        address: Optional[str] = None,
    ) -> tuple[Client, bool]:
        """
        Find the client owning a document number, or register a new one.

        An existing client is returned untouched even when the submitted
        contact details differ. Returns (client, created).
        """
        existing = self.repo.get_by_document_number(self.db, document_number)
        if existing:
            logger.info(f"👤 Found existing client {existing.client_number} for document {document_number}")
            return existing, False

        now = utcnow()
        client = self.repo.create_client(
            self.db,
            client_number=self._new_client_number(),
            document_type=document_type,
            document_number=document_number,
            full_name=full_name,
            email=email,
            phone=phone,
            mobile=mobile,
            address=address,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        logger.info(f"✅ Created client {client.client_number} for document {document_number}")
        return client, True

    def _new_client_number(self) -> str:
        for _ in range(MAX_NUMBER_ATTEMPTS):
            number = generate_client_number()
            if not self.repo.client_number_exists(self.db, number):
                return number
            logger.warning(f"⚠️ Client number collision on {number}, regenerating")
        raise RuntimeError("Could not generate a unique client number")
