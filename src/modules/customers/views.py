"""Customer API views.

A principal only ever sees and edits its own customer profile, exposed at
``/api/v1/customers/me/``.  Domain exceptions are translated into HTTP
status codes; the view never swallows generic exceptions.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.exceptions import Unauthenticated
from modules.core.principals import Principal
from modules.customers.dtos import RegisterCustomerDTO, UpdateContactDTO
from modules.customers.exceptions import CustomerAlreadyExists, CustomerNotFound
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import CustomerSerializer
from modules.customers.services import CustomerService

_NOT_FOUND = {"detail": "Customer profile not found.", "code": "customer_not_found"}


class CustomerMeView(APIView):
    """GET/POST/PATCH /api/v1/customers/me/"""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CustomerService(repository=CustomerDjangoRepository())

    def get(self, request: Request) -> Response:
        try:
            customer = self._service.get_for_principal(Principal.from_user(request.user))
        except CustomerNotFound:
            return Response(_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(CustomerSerializer(customer).data)

    def post(self, request: Request) -> Response:
        """Self-service registration of the caller's profile."""
        data = request.data
        try:
            dto = RegisterCustomerDTO(
                full_name=data.get("full_name", ""),
                email=data.get("email", ""),
                phone=data.get("phone", ""),
            )
        except PydanticValidationError as exc:
            return Response(
                {"detail": str(exc), "code": "invalid"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            customer = self._service.register(Principal.from_user(request.user), dto)
        except Unauthenticated as exc:
            return Response(
                {"detail": str(exc), "code": "unauthenticated"},
                status=status.HTTP_401_UNAUTHORIZED,
            )
        except CustomerAlreadyExists as exc:
            return Response(
                {"detail": str(exc), "code": "customer_already_exists"},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

    def patch(self, request: Request) -> Response:
        """Update contact fields (``full_name``, ``email``, ``phone``)."""
        data = request.data
        try:
            dto = UpdateContactDTO(
                full_name=data.get("full_name"),
                email=data.get("email"),
                phone=data.get("phone"),
            )
        except PydanticValidationError as exc:
            return Response(
                {"detail": str(exc), "code": "invalid"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            customer = self._service.update_contact(Principal.from_user(request.user), dto)
        except CustomerNotFound:
            return Response(_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except CustomerAlreadyExists as exc:
            return Response(
                {"detail": str(exc), "code": "customer_already_exists"},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(CustomerSerializer(customer).data)
