import os

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from flow.models import User

STATION_SET = [
    ("reception1", "reception", ""),
    ("triage1", "triage", ""),
    ("doctor1", "doctor", "General Medicine"),
    ("doctor2", "doctor", "Pediatrics"),
    ("billing1", "billing", ""),
    ("admin1", "admin", ""),
    ("patient1", "patient", ""),
]


class Command(BaseCommand):
    help = "Ensure one demo account per station role exists (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            default=os.getenv("FLOW_DEMO_PASSWORD", "station-demo-1"),
            help="Password set on every demo account",
        )

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for username, role, specialization in STATION_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"role": role, "specialization": specialization, "password": password, "is_active": True},
            )
            if not created:
                # reset drifted demo accounts
                u.password = password
                u.role = role
                u.specialization = specialization
                u.is_active = True
                u.save(update_fields=["password", "role", "specialization", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All station users ensured."))
