"""CustomerRepository: read-only lookups of clients and addresses."""

import logging
from typing import Optional, Sequence

from sqlalchemy import select

from app.db.models import Address, Client
from app.db.repositories.base import BaseRepository, log_operation

logger = logging.getLogger(__name__)


class CustomerRepository(BaseRepository[Client]):
    """Clients and addresses are managed elsewhere; the engine only reads them."""

    model = Client

    @log_operation()
    async def get_client(self, client_id: str) -> Optional[Client]:
        return await self.get(client_id)

    @log_operation()
    async def get_addresses(self, address_ids: Sequence[str]) -> dict[str, Address]:
        """Fetch addresses keyed by id; unknown ids are absent from the result."""
        ids = {aid for aid in address_ids if aid}
        if not ids:
            return {}
        stmt = select(Address).where(Address.id.in_(ids))
        return {address.id: address for address in (await self.session.scalars(stmt)).all()}
