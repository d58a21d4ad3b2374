"""Customer service layer (Use Cases).

Self-service profile management for the authenticated principal:
- One customer per principal.
- Email must be unique.
- Only contact fields are editable after registration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.core.exceptions import Unauthenticated
from modules.customers.exceptions import CustomerAlreadyExists, CustomerNotFound
from modules.customers.models import CONTACT_FIELDS, Customer

if TYPE_CHECKING:
    from modules.core.principals import Principal
    from modules.customers.dtos import RegisterCustomerDTO, UpdateContactDTO
    from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerService:
    """Application service for Customer use-cases.

    Receives an ``ICustomerRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: ICustomerRepository) -> None:
        self._repo = repository

    @transaction.atomic
    def register(self, principal: Principal, dto: RegisterCustomerDTO) -> Customer:
        """Create the caller's own customer profile.

        Raises:
            Unauthenticated: the principal carries no subject.
            CustomerAlreadyExists: the principal already has a profile or
                the email is taken.
        """
        if not principal.subject:
            raise Unauthenticated("A customer profile needs an authenticated principal.")

        log = logger.bind(principal=principal.subject)

        if self._repo.get_by_principal(principal.subject):
            log.warning("customer.duplicate_principal")
            raise CustomerAlreadyExists("Customer profile already registered.")

        if self._repo.get_by_email(dto.email):
            log.warning("customer.duplicate_email")
            raise CustomerAlreadyExists("Email already registered.")

        customer = Customer(
            principal_id=principal.subject,
            full_name=dto.full_name,
            email=dto.email,
            phone=dto.phone,
        )
        customer = self._repo.save(customer)
        log.info("customer.registered", customer_id=str(customer.id))
        return customer

    @transaction.atomic
    def update_contact(self, principal: Principal, dto: UpdateContactDTO) -> Customer:
        """Update the caller's contact fields.

        Raises:
            CustomerNotFound: the principal has no profile.
            CustomerAlreadyExists: the new email belongs to someone else.
        """
        customer = self.get_for_principal(principal)
        log = logger.bind(customer_id=str(customer.id))

        if dto.email is not None and dto.email.lower() != customer.email:
            if self._repo.get_by_email(dto.email):
                log.warning("customer.duplicate_email")
                raise CustomerAlreadyExists("Email already registered.")

        for field in CONTACT_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(customer, field, value)

        customer = self._repo.save(customer)
        log.info("customer.contact_updated")
        return customer

    def get_for_principal(self, principal: Principal) -> Customer:
        """Resolve the customer linked to *principal*.

        Raises:
            CustomerNotFound: no customer is linked to the principal.
        """
        customer = self._repo.get_by_principal(principal.subject or "")
        if not customer:
            raise CustomerNotFound(f"No customer linked to principal {principal}.")
        return customer
