"""Management command to load the course catalog.

Reads a catalog JSON document (colleges, majors, courses) from a file or
URL and upserts it into the database. Running it twice is harmless: rows
are matched on college name, (college, major name) and (division, number).

Usage::

    python manage.py load_catalog --file catalog.json
    python manage.py load_catalog --url https://example.edu/catalog.json

With neither flag the ``CATALOG_URL`` setting is used.
"""

import json

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.services.catalog import CatalogError, fetch_catalog, load_catalog


class Command(BaseCommand):
    help = "Load colleges, majors and courses from a catalog JSON document."

    def add_arguments(self, parser):
        source = parser.add_mutually_exclusive_group()
        source.add_argument("--file", help="Path to a catalog JSON file.")
        source.add_argument("--url", help="URL of a catalog JSON document.")

    def handle(self, *args, **options):
        path = options.get("file")
        url = options.get("url") or (None if path else settings.CATALOG_URL)

        if path:
            try:
                with open(path, encoding="utf-8") as fh:
                    payload = json.load(fh)
            except OSError as e:
                raise CommandError(f"Cannot read {path}: {e}") from e
            except json.JSONDecodeError as e:
                raise CommandError(f"{path} is not valid JSON: {e}") from e
        elif url:
            self.stdout.write(f"Downloading catalog from {url} ...")
            try:
                payload = fetch_catalog(url)
            except CatalogError as e:
                raise CommandError(str(e)) from e
        else:
            raise CommandError("Pass --file or --url (or set CATALOG_URL).")

        try:
            counts = load_catalog(payload)
        except CatalogError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(
            self.style.SUCCESS(
                "Catalog loaded: {colleges} colleges, {majors} majors, {courses} courses added.".format(**counts)
            )
        )
