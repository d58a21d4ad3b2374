"""Row-level authorization predicates.

One predicate per entity, parameterised by ``(principal, resource)``.  Read
paths (views, the export reader) consult these instead of scattering
ownership checks; the two write operations of the order engine check
ownership themselves before mutating anything.

Rules:
- Privileged principals may read everything.
- A customer may read its own Customer row, its own Orders and their items.
- Active products are readable by everyone; inactive ones only by
  privileged principals.
"""

from __future__ import annotations

from typing import Any

from django.db.models import Q

from modules.core.principals import Principal


def is_order_owner(principal: Principal, order: Any) -> bool:
    if not principal.subject:
        return False
    return order.customer.principal_id == principal.subject


def can_view_customer(principal: Principal, customer: Any) -> bool:
    if principal.is_privileged:
        return True
    return bool(principal.subject) and customer.principal_id == principal.subject


def can_view_order(principal: Principal, order: Any) -> bool:
    return principal.is_privileged or is_order_owner(principal, order)


def can_view_order_item(principal: Principal, item: Any) -> bool:
    return can_view_order(principal, item.order)


def can_view_product(principal: Principal, product: Any) -> bool:
    return product.active or principal.is_privileged


def order_visibility_filter(principal: Principal) -> Q:
    """``Q`` object selecting the orders *principal* may read."""
    if principal.is_privileged:
        return Q()
    if not principal.subject:
        return Q(pk__in=[])
    return Q(customer__principal_id=principal.subject)


def product_visibility_filter(principal: Principal) -> Q:
    if principal.is_privileged:
        return Q()
    return Q(active=True)
