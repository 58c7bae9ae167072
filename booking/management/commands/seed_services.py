"""
seed_services.py
----------------
Seeds (creates or updates) the service catalog. You can run this any time;
it will upsert by unique name.

With --with-staff it also creates a demo stylist working Monday to Saturday,
09:00-17:00 with a 13:00-14:00 lunch break.

Usage:
    python manage.py seed_services
    python manage.py seed_services --with-staff
"""

from datetime import time
from decimal import Decimal
from django.core.management.base import BaseCommand
from django.db import transaction
from booking.models import Service, Staff
from staff.models import StaffAvailability, StaffBreak


CATALOG = [
    # Braids & twists
    {"name": "Knotless Braids - Large",   "description": "Knotless/Large",   "duration_minutes": 300, "price": Decimal("6500.00")},
    {"name": "Knotless Braids - Medium",  "description": "Knotless/Medium",  "duration_minutes": 360, "price": Decimal("7500.00")},
    {"name": "Stitch Braids - 6-8",       "description": "Stitch Braids",    "duration_minutes": 120, "price": Decimal("5000.00")},

    # Natural Hair
    {"name": "Cornrows",                   "description": "Natural hair",     "duration_minutes": 90,  "price": Decimal("2500.00")},
    {"name": "Twists (Natural Hair)",      "description": "Natural hair",     "duration_minutes": 90,  "price": Decimal("2000.00")},

    # Extras
    {"name": "Blow-dry hair",              "description": "Extra",            "duration_minutes": 30,  "price": Decimal("500.00")},

    # Classes (shared capacity per hour)
    {"name": "Braiding Workshop",          "description": "Group class",      "duration_minutes": 60,  "price": Decimal("1500.00"),
     "booking_model": Service.CAPACITY, "capacity": 6},
]

DEMO_STAFF = {"name": "Demo Stylist", "email": "stylist@example.com", "role": "Stylist"}
DEMO_WEEK = [1, 2, 3, 4, 5, 6]  # Monday..Saturday


class Command(BaseCommand):
    help = "Seed or update the service catalog (and optionally a demo stylist week)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--with-staff",
            action="store_true",
            help="Also create a demo stylist with weekly hours and a lunch break.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        updated = 0

        for item in CATALOG:
            fields = {
                "description": item["description"],
                "duration_minutes": item["duration_minutes"],
                "price": item["price"],
                "booking_model": item.get("booking_model", Service.EXCLUSIVE),
                "capacity": item.get("capacity", 1),
                "active": True,
            }
            svc, is_created = Service.objects.get_or_create(name=item["name"], defaults=fields)
            if is_created:
                created += 1
                continue

            changed = [k for k, v in fields.items() if getattr(svc, k) != v]
            if changed:
                for key in changed:
                    setattr(svc, key, fields[key])
                svc.save(update_fields=changed)
                updated += 1

        self.stdout.write(self.style.SUCCESS(f"Seed complete. Created={created}, Updated={updated}"))

        if options["with_staff"]:
            staff, _ = Staff.objects.get_or_create(email=DEMO_STAFF["email"], defaults=DEMO_STAFF)
            for dow in DEMO_WEEK:
                window, is_new = StaffAvailability.objects.get_or_create(
                    staff=staff,
                    day_of_week=dow,
                    defaults={"start_time": time(9, 0), "end_time": time(17, 0)},
                )
                if is_new:
                    StaffBreak.objects.create(availability=window, start_time=time(13, 0), end_time=time(14, 0))
            self.stdout.write(self.style.SUCCESS(f"Demo staff ready: {staff.name} (id={staff.id})"))
