"""
Management command to reconcile catalog brands, categories and duplicates.

Usage:
    python manage.py reconcile_catalog            # Apply changes
    python manage.py reconcile_catalog --dry-run  # Report without writing
    python manage.py reconcile_catalog --json     # Print the report as JSON
"""

import json

from django.core.management.base import BaseCommand, CommandError

from catalog.exceptions import CatalogReconciliationError
from catalog.services.maintenance import run_reconciliation


class Command(BaseCommand):
    help = "Reclassify products, remove duplicates and compact brand/category labels"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would change without writing",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the report as JSON",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]

        if dry_run and not options["json"]:
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))

        try:
            run, report = run_reconciliation(dry_run=dry_run)
        except CatalogReconciliationError as e:
            raise CommandError(f"Reconciliation failed: {e}")

        if options["json"]:
            self.stdout.write(json.dumps({"run_id": run.id, **report.to_dict()}, indent=2))
            return

        self.stdout.write(f"Run {run.id}")
        self.stdout.write(f"  Products scanned:       {report.entries_scanned}")
        self.stdout.write(f"  Products reclassified:  {report.entries_reclassified}")
        self.stdout.write(f"  Duplicate groups:       {report.duplicate_groups}")
        self.stdout.write(f"  Duplicates deleted:     {report.entries_deleted}")
        self.stdout.write(f"  Labels created:         {report.labels_created}")
        self.stdout.write(f"  Labels merged:          {report.labels_merged}")
        self.stdout.write(f"  Labels deleted:         {report.labels_deleted}")

        for error in report.errors:
            self.stdout.write(self.style.ERROR(f"  Error: {error}"))
        for group in report.failed_groups:
            self.stdout.write(
                self.style.ERROR(f"  Failed group '{group['canonical_key']}': {group['error']}")
            )

        if report.is_noop:
            self.stdout.write(self.style.SUCCESS("Catalog already reconciled"))
        else:
            self.stdout.write(self.style.SUCCESS("Reconciliation complete!"))
