"""
Management command to find primary images for products that have none.

Usage:
    python manage.py resolve_missing_images
    python manage.py resolve_missing_images --limit 50 --workers 2
    python manage.py resolve_missing_images --providers duckduckgo,google_images
"""

import json

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from catalog.services.maintenance import run_image_resolution


class Command(BaseCommand):
    help = "Resolve primary images for products without one"

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=None,
            help="Maximum number of products to process",
        )
        parser.add_argument(
            "--workers",
            type=int,
            default=None,
            help="Number of products resolved concurrently",
        )
        parser.add_argument(
            "--providers",
            type=str,
            default=None,
            help="Comma-separated provider names, in the order they are tried",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the report as JSON",
        )

    def handle(self, *args, **options):
        providers = None
        if options["providers"]:
            providers = [name.strip() for name in options["providers"].split(",") if name.strip()]

        if options["workers"] is not None and options["workers"] < 1:
            raise CommandError("--workers must be at least 1")

        try:
            run, report = run_image_resolution(
                limit=options["limit"],
                max_workers=options["workers"],
                provider_names=providers,
            )
        except ImproperlyConfigured as e:
            raise CommandError(str(e))

        if options["json"]:
            data = report.to_dict(include_attempts=True)
            self.stdout.write(json.dumps({"run_id": run.id, **data}, indent=2))
            return

        self.stdout.write(f"Run {run.id}")
        self.stdout.write(f"  Processed:  {report.processed}")
        self.stdout.write(f"  Resolved:   {report.resolved}")
        self.stdout.write(f"  Unresolved: {report.unresolved}")
        for provider, count in sorted(report.by_provider.items()):
            self.stdout.write(f"    {provider}: {count}")

        if report.unresolved_entries:
            ids = ", ".join(str(entry_id) for entry_id in sorted(report.unresolved_entries))
            self.stdout.write(self.style.WARNING(f"  No image found for: {ids}"))

        self.stdout.write(self.style.SUCCESS("Image resolution complete!"))
