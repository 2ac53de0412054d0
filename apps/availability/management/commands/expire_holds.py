from django.core.management.base import BaseCommand

from apps.availability.application.engine import build_engine


class Command(BaseCommand):
    help = "Release availability holds whose TTL has elapsed"

    def handle(self, *args, **options):
        result = build_engine().expire_holds()
        self.stdout.write(
            self.style.SUCCESS(f"Released {result.cleaned_count} hold(s) older than {result.cutoff.isoformat()}")
        )
