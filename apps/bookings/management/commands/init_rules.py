from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError  # type: ignore

from apps.bookings.application.rule_config import ensure_rules
from apps.bookings.domain.errors import RuleConfigError
from apps.bookings.domain.rules import BookingRules


class Command(BaseCommand):
    help = "Create the booking rule configuration with default values if it does not exist"

    def add_arguments(self, parser):  # type: ignore
        for name in BookingRules.field_names():
            parser.add_argument(f"--{name.replace('_', '-')}", dest=name, type=int)

    def handle(self, *args, **options):  # type: ignore
        overrides = {
            name: options[name]
            for name in BookingRules.field_names()
            if options.get(name) is not None
        }
        try:
            config, created = ensure_rules(overrides)
        except RuleConfigError as exc:
            raise CommandError(f"{exc.code}: {exc.message}") from exc

        if created:
            self.stdout.write(self.style.SUCCESS("Booking rules created"))
        else:
            self.stdout.write("Booking rules already exist; nothing changed")
        for name, value in config.to_rules().as_dict().items():
            self.stdout.write(f"  {name} = {value}")
