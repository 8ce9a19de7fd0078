"""
Management command to raise low stock alerts from reorder points
"""
from django.core.management.base import BaseCommand
from shopdesk.inventory.services import generate_low_stock_alerts
from shopdesk.locations.models import Store


class Command(BaseCommand):
    help = "Creates low stock alerts for products below their reorder point"

    def add_arguments(self, parser):
        parser.add_argument(
            '--store',
            help='Store code to check (default: all active stores)',
        )

    def handle(self, *args, **options):
        stores = Store.objects.filter(is_active=True)
        if options['store']:
            stores = stores.filter(code=options['store'].upper())
            if not stores.exists():
                self.stdout.write(self.style.ERROR(f"Store {options['store']} not found"))
                return

        total = 0
        for store in stores:
            alerts = generate_low_stock_alerts(store)
            total += len(alerts)
            for alert in alerts:
                self.stdout.write(
                    f"  {store.code}: {alert.product.name} at {alert.current_stock} (min {alert.minimum_threshold})"
                )
        self.stdout.write(self.style.SUCCESS(f"Created {total} low stock alerts"))
