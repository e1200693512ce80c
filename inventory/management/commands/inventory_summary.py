"""
Management command to print sell-through and forecast accuracy per date.
"""
from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError

from core.exceptions import ValidationError
from core.utils import parse_date, today
from inventory.models import InventoryRecord
from reports.aggregation import forecast_accuracy, group_by_date, per_date_summary


class Command(BaseCommand):
    help = 'Print per-date sell-through and forecast accuracy'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            type=str,
            help='Last date to report (YYYY-MM-DD), defaults to today',
        )
        parser.add_argument(
            '--days',
            type=int,
            default=7,
            help='Number of days to cover, counting back from --date',
        )

    def handle(self, *args, **options):
        try:
            end = parse_date(options['date']) if options.get('date') else today()
        except ValidationError as e:
            raise CommandError(e.message)
        days = options['days']
        if days < 1:
            raise CommandError('--days must be at least 1')
        start = end - timedelta(days=days - 1)

        records = (
            InventoryRecord.objects.select_related('product')
            .filter(date__range=(start, end))
        )
        groups = group_by_date(records)

        if not groups:
            self.stdout.write(
                self.style.WARNING(f'No inventory between {start} and {end}')
            )
            return

        for day, day_records in groups.items():
            summary = per_date_summary(day_records, date=day)
            forecast = forecast_accuracy(day_records, date=day)

            line = (
                f'{day}: {summary.product_count} product(s), '
                f'produced {summary.total_produced}, sold {summary.total_sold}, '
                f'sell-through {summary.sell_through_pct}%'
            )
            if forecast.product_count:
                line += (
                    f', planned {forecast.total_planned}, '
                    f'accuracy {forecast.precision_pct}%'
                )

            style = {
                'good': self.style.SUCCESS,
                'average': self.style.WARNING,
            }.get(summary.band, self.style.ERROR)
            self.stdout.write(style(line))
