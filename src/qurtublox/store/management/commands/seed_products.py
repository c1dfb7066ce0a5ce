"""Management command to seed the default product catalog."""

from django.core.management.base import BaseCommand

from qurtublox.core.conf import get_default_products
from qurtublox.store.services import seed_default_products


class Command(BaseCommand):
    help = "Write the default products if the catalog is empty"

    def handle(self, *args, **options):
        created = seed_default_products()
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created {created} products"))
        else:
            self.stdout.write(
                self.style.WARNING(
                    f"Catalog already has products; {len(get_default_products())} defaults not written"
                )
            )
