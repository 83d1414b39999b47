"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Client


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_by_document_number(db: Session, document_number: str) -> Optional[Client]:
        return db.query(Client).filter(Client.document_number == document_number).first()

    @staticmethod
    def get_by_client_number(db: Session, client_number: str) -> Optional[Client]:
        return db.query(Client).filter(Client.client_number == client_number).first()

    @staticmethod
    def client_number_exists(db: Session, client_number: str) -> bool:
        return db.query(Client.id).filter(Client.client_number == client_number).first() is not None

    @staticmethod
    def create_client(db: Session, **client_data) -> Client:
        """Create a new client"""
        client = Client(**client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client
