import csv

from django.core.management.base import BaseCommand, CommandError

from apps.locations.services import PincodeService

# India Post directory exports use several header spellings
HEADER_ALIASES = {
    'pincode': ('pincode', 'pin_code', 'pin'),
    'office_name': ('officename', 'office_name', 'office'),
    'district': ('district', 'districtname', 'district_name'),
    'state': ('statename', 'state', 'state_name'),
}


def _resolve_headers(fieldnames):
    lowered = {name.strip().lower(): name for name in fieldnames or []}
    resolved = {}
    for key, aliases in HEADER_ALIASES.items():
        match = next((lowered[a] for a in aliases if a in lowered), None)
        if match is None:
            raise CommandError(f"CSV is missing a '{key}' column")
        resolved[key] = match
    return resolved


class Command(BaseCommand):
    help = "Load the pincode directory from a CSV file (pincode, office name, district, state)."

    def add_arguments(self, parser):
        parser.add_argument("csv_path")

    def handle(self, *args, **options):
        path = options["csv_path"]
        try:
            with open(path, newline="", encoding="utf-8-sig") as handle:
                reader = csv.DictReader(handle)
                headers = _resolve_headers(reader.fieldnames)
                rows = (
                    {key: row[column] or "" for key, column in headers.items()}
                    for row in reader
                    if (row.get(headers['pincode']) or "").strip()
                )
                count = PincodeService.load(rows)
        except FileNotFoundError:
            raise CommandError(f"File not found: {path}")

        self.stdout.write(self.style.SUCCESS(f"Loaded {count} pincode rows"))
