from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.catalog.models import Product
from modules.orders.dtos import CreateOrderDTO
from modules.orders.exceptions import InsufficientStock
from modules.orders.services import build_order_service

CATALOG = [
    (
        "WBH-001",
        "Wireless Bluetooth Headphones",
        "High-quality wireless headphones with noise cancellation and 30-hour battery life.",
        Decimal("199.99"),
        50,
        "Electronics",
    ),
    (
        "SFW-002",
        "Smart Fitness Watch",
        "Advanced fitness tracking watch with heart rate monitor and GPS.",
        Decimal("299.99"),
        30,
        "Electronics",
    ),
    (
        "OCT-003",
        "Organic Cotton T-Shirt",
        "Comfortable organic cotton t-shirt, available in multiple colors.",
        Decimal("29.99"),
        100,
        "Clothing",
    ),
    (
        "SSB-004",
        "Stainless Steel Water Bottle",
        "Insulated stainless steel water bottle that keeps drinks cold for 24 hours.",
        Decimal("39.99"),
        75,
        "Accessories",
    ),
    (
        "WPC-005",
        "Wireless Phone Charger",
        "Fast wireless charging pad compatible with all Qi-enabled devices.",
        Decimal("49.99"),
        40,
        "Electronics",
    ),
]

DEMO_CUSTOMERS = [
    ("Ana Souza", "ana@example.com", "12 Harbour Street, Springfield"),
    ("Bruno Lima", "bruno@example.com", "48 Elm Avenue, Rivertown"),
    ("Carla Mendes", "carla@example.com", "7 Station Road, Lakeside"),
]


class Command(BaseCommand):
    help = "Seed the storefront catalog (and optionally demo orders)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders",
            type=int,
            default=0,
            help="Number of demo orders to place through the checkout.",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding storefront data...")

        users_created = self._seed_users()
        products = self._seed_products()
        orders_created = self._seed_orders(products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="support").exists():
            User.objects.create_user("support", password="support123", is_staff=True)
            created += 1
        return created

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        for sku, name, description, price, stock, category in CATALOG:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "description": description,
                    "price": price,
                    "stock_quantity": stock,
                    "image_url": (
                        "https://via.placeholder.com/300x300?text="
                        + name.split()[-1]
                    ),
                    "category": category,
                    "is_active": True,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, products: list[Product], count: int) -> int:
        if count <= 0:
            return 0
        self.stdout.write("Placing orders...")
        service = build_order_service()
        placed = 0
        for _ in range(count):
            name, email, address = random.choice(DEMO_CUSTOMERS)
            chosen = random.sample(products, k=random.randint(1, min(3, len(products))))
            dto = CreateOrderDTO.parse(
                {
                    "customer_name": name,
                    "customer_email": email,
                    "shipping_address": address,
                    "payment_method": "credit_card",
                    "items": [
                        {"product_id": str(p.id), "quantity": random.randint(1, 3)}
                        for p in chosen
                    ],
                }
            )
            try:
                service.create_order(dto)
            except InsufficientStock as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order: {exc}"))
                continue
            placed += 1
        self.stdout.write(self.style.SUCCESS("Placing orders... Done!"))
        return placed
