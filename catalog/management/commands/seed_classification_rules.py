"""
Management command to store the default brand and category rule tables.

Usage:
    python manage.py seed_classification_rules            # Add missing rules
    python manage.py seed_classification_rules --replace  # Replace stored rules
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from catalog.models import ClassificationRuleRecord, LabelType
from catalog.rules import DEFAULT_BRAND_RULES, DEFAULT_CATEGORY_RULES


class Command(BaseCommand):
    help = "Seed classification rules from the built-in defaults"

    def add_arguments(self, parser):
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Delete stored rules before seeding",
        )

    def handle(self, *args, **options):
        with transaction.atomic():
            if options["replace"]:
                deleted, _ = ClassificationRuleRecord.objects.all().delete()
                self.stdout.write(self.style.WARNING(f"Deleted {deleted} stored rules"))

            for label_type, rules in (
                (LabelType.BRAND, DEFAULT_BRAND_RULES),
                (LabelType.CATEGORY, DEFAULT_CATEGORY_RULES),
            ):
                created = 0
                for sort_order, (target, keywords) in enumerate(rules):
                    _, was_created = ClassificationRuleRecord.objects.get_or_create(
                        label_type=label_type,
                        target_label_name=target,
                        defaults={
                            "keywords": list(keywords),
                            "sort_order": sort_order,
                        },
                    )
                    created += int(was_created)

                self.stdout.write(
                    f"  {label_type}: {created} created, {len(rules) - created} already present"
                )

        self.stdout.write(self.style.SUCCESS("Seeding complete!"))
