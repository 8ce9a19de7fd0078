"""
Management command to add the default expense categories
"""
from django.core.management.base import BaseCommand
from shopdesk.finance.models import ExpenseCategory
from shopdesk.finance.services import ensure_default_categories


class Command(BaseCommand):
    help = "Adds the default expense categories to the database"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Remove categories that no expense uses before adding the defaults',
        )

    def handle(self, *args, **options):
        if options['clear']:
            deleted, _ = ExpenseCategory.objects.filter(expenses__isnull=True).delete()
            self.stdout.write(self.style.WARNING(f"Removed {deleted} unused categories"))

        created = ensure_default_categories()
        total = ExpenseCategory.objects.count()
        self.stdout.write(self.style.SUCCESS(f"Added {created} categories ({total} in total)"))
