"""Install the default health score rule table for an organization."""
from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from forecasting.health_rules import default_rule_table
from forecasting.models import HealthScoreRule
from organizations.models import Organization


class Command(BaseCommand):
    help = "Seed the default health score rules for an organization."

    def add_arguments(self, parser):
        parser.add_argument("org_code", type=str, help="Organization code.")
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the organization's existing rules first.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        code = (options.get("org_code") or "").strip()
        organization = Organization.objects.filter(code=code).first()
        if organization is None:
            raise CommandError(f"Unknown organization code: {code}")

        existing = HealthScoreRule.objects.filter(organization=organization)
        if options.get("reset"):
            deleted, _ = existing.delete()
            self.stdout.write(f"Rules deleted: {deleted}")
        elif existing.exists():
            self.stdout.write(self.style.WARNING(
                f"{organization.code} already has {existing.count()} rules; use --reset to replace them."
            ))
            return

        created = 0
        for rule in default_rule_table():
            HealthScoreRule.objects.create(
                organization=organization,
                min_score=rule.min_score,
                max_score=rule.max_score,
                mapped_category=rule.mapped_category,
                suppression=rule.suppression,
                probability_modifier=Decimal(str(rule.probability_modifier)),
            )
            created += 1
        self.stdout.write(self.style.SUCCESS(f"Health score rules seeded for {organization.code}: {created}"))
