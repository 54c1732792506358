from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.coupons.constants import DiscountType
from modules.coupons.models import Coupon
from modules.delivery.models import DeliverySettings
from modules.products.models import Product, ProductStatus, ProductVariant


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        products = self._seed_products()
        coupons = self._seed_coupons()
        self._seed_delivery_settings()

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={len(products)}, "
                f"coupons={len(coupons)}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="customer").exists():
            User.objects.create_user("customer", password="customer123")
            created += 1
        return created

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ("RING-001", "Solitaire Diamond Ring", Decimal("45999.00"), Decimal("42999.00"),
             [("Size 12", Decimal("0.00")), ("Size 14", Decimal("500.00"))]),
            ("RING-002", "Gold Band", Decimal("18999.00"), None,
             [("18K", Decimal("0.00")), ("22K", Decimal("4200.00"))]),
            ("NECK-001", "Temple Necklace", Decimal("89999.00"), Decimal("84999.00"), []),
            ("NECK-002", "Pearl Choker", Decimal("12499.00"), None,
             [("Short", Decimal("-750.00")), ("Long", Decimal("0.00"))]),
            ("EAR-001", "Jhumka Earrings", Decimal("7999.00"), Decimal("6999.00"), []),
            ("EAR-002", "Diamond Studs", Decimal("24999.00"), None, []),
            ("BANG-001", "Kada Bangle", Decimal("32999.00"), None,
             [("2.4", Decimal("0.00")), ("2.6", Decimal("900.00"))]),
            ("PEND-001", "Om Pendant", Decimal("4999.00"), Decimal("5499.00"), []),
        ]
        for sku, name, price, discount_price, variants in catalog:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "base_price": price,
                    "discount_price": discount_price,
                    "status": ProductStatus.ACTIVE,
                },
            )
            for variant_name, adjustment in variants:
                ProductVariant.objects.get_or_create(
                    product=product,
                    name=variant_name,
                    defaults={"price_adjustment": adjustment},
                )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_coupons(self) -> list[Coupon]:
        self.stdout.write("Creating coupons...")
        now = timezone.now()
        seed = [
            ("WELCOME10", DiscountType.PERCENTAGE,
             Decimal("10"), Decimal("0"), Decimal("2000"), None),
            ("FESTIVE20", DiscountType.PERCENTAGE,
             Decimal("20"), Decimal("25000"), Decimal("10000"), 500),
            ("FLAT1000", DiscountType.FIXED, Decimal("1000"), Decimal("10000"), None, 1000),
        ]
        coupons: list[Coupon] = []
        for code, discount_type, value, minimum, cap, limit in seed:
            coupon, _ = Coupon.objects.get_or_create(
                code=code,
                defaults={
                    "description": f"{code} development coupon",
                    "discount_type": discount_type,
                    "discount_value": value,
                    "min_order_value": minimum,
                    "max_discount": cap,
                    "valid_from": now - timedelta(days=1),
                    "valid_until": now + timedelta(days=90),
                    "usage_limit": limit,
                },
            )
            coupons.append(coupon)
        self.stdout.write(self.style.SUCCESS("Creating coupons... Done!"))
        return coupons

    def _seed_delivery_settings(self) -> None:
        if DeliverySettings.objects.exists():
            return
        self.stdout.write("Creating delivery settings...")
        DeliverySettings.objects.create(
            business_pincode="400001",
            business_city="Mumbai",
            business_state="Maharashtra",
            business_latitude=18.9388,
            business_longitude=72.8354,
            local_delivery_charge=Decimal("50.00"),
            city_delivery_charge=Decimal("100.00"),
            state_delivery_charge=Decimal("150.00"),
            national_delivery_charge=Decimal("250.00"),
            free_shipping_threshold=Decimal("50000.00"),
            free_shipping_enabled=True,
            updated_by="seed",
        )
        self.stdout.write(self.style.SUCCESS("Creating delivery settings... Done!"))
