"""ReferenceResolver service - client and address references of an order."""

import logging
from dataclasses import dataclass

from app.db.models import Address, Client
from app.db.repositories import CustomerRepository
from app.utils.error_handler import ErrorCode, NotFoundException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderReferences:
    client: Client
    shipping_address: Address
    billing_address: Address


class ReferenceResolver:
    """Verifies that the client and both addresses of an order exist."""

    def __init__(self, customer_repo: CustomerRepository):
        """
        Args:
            customer_repo: Read-only repository for clients and addresses
        """
        self.customer_repo = customer_repo

    async def resolve(self, client_id: str, shipping_address_id: str, billing_address_id: str) -> OrderReferences:
        """
        Load the referenced client and addresses.

        A missing reference is a bad payload, so it is answered with 400.

        Raises:
            NotFoundException: Client or either address does not exist
        """
        client = await self.customer_repo.get_client(client_id)
        if client is None:
            logger.warning(f"Order rejected: client {client_id} not found")
            raise NotFoundException(
                resource="client", resource_id=client_id, error_code=ErrorCode.INVALID_REFERENCE, status_code=400
            )

        addresses = await self.customer_repo.get_addresses([shipping_address_id, billing_address_id])
        for address_id in (shipping_address_id, billing_address_id):
            if address_id not in addresses:
                logger.warning(f"Order rejected: address {address_id} not found")
                raise NotFoundException(
                    resource="address",
                    resource_id=address_id,
                    error_code=ErrorCode.INVALID_REFERENCE,
                    status_code=400,
                )

        return OrderReferences(
            client=client,
            shipping_address=addresses[shipping_address_id],
            billing_address=addresses[billing_address_id],
        )
