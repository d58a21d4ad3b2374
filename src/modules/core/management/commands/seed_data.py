from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.core.principals import Principal
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.constants import OrderStatus
from modules.orders.dtos import PlaceOrderItemDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

CATALOG = [
    ("BK-001", "Livro Infantil A", 3990, 50),
    ("BK-002", "Livro Infantil B", 4590, 30),
    ("BK-003", "Jogo Educacional", 5990, 20),
]

DEMO_CUSTOMERS = [
    ("ana", "ana123", "Ana Souza", "ana@example.com"),
    ("bruno", "bruno123", "Bruno Lima", "bruno@example.com"),
]


class Command(BaseCommand):
    help = "Seed database with the demo catalog, customers and orders."

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        users_created = self._seed_staff()
        customers = self._seed_customers()
        products = self._seed_products()
        orders_created = self._seed_orders(customers, products)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"customers={len(customers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_staff(self) -> int:
        User = get_user_model()
        if User.objects.filter(username="admin").exists():
            return 0
        User.objects.create_superuser("admin", password="admin123")
        return 1

    def _seed_customers(self) -> list[Customer]:
        self.stdout.write("Creating customers...")
        User = get_user_model()
        customers: list[Customer] = []
        for username, password, full_name, email in DEMO_CUSTOMERS:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(username, password=password)
            customer, _ = Customer.objects.get_or_create(
                principal_id=str(user.pk),
                defaults={"full_name": full_name, "email": email},
            )
            customers.append(customer)
        self.stdout.write(self.style.SUCCESS("Creating customers... Done!"))
        return customers

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        for sku, name, price_cents, stock in CATALOG:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={"name": name, "price_cents": price_cents, "stock": stock},
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, customers: list[Customer], products: list[Product]) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        created = 0
        for index, customer in enumerate(customers):
            principal = Principal(subject=customer.principal_id)
            order_id = service.place_order(
                principal,
                [
                    PlaceOrderItemDTO(product_id=products[index].id, quantity=2),
                    PlaceOrderItemDTO(product_id=products[-1].id, quantity=1),
                ],
            )
            created += 1
            if index == 0:
                service.set_order_status(
                    Principal.system(), order_id, OrderStatus.PAID, "Seed payment"
                )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
