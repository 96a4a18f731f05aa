"""
Close a payroll month from the shell: snapshot every active driver/turnboy's net salary
(base salary minus the month's fines) and mark the period processed.
Usage: python manage.py process_month_end 2 2026            # February 2026
       python manage.py process_month_end 2 2026 --actor 7  # record employee 7 as processed_by
"""
from django.core.management.base import BaseCommand, CommandError

from core.exceptions import FleetError
from core.payroll_logic import process_month_end


class Command(BaseCommand):
    help = 'Process month-end payroll for a month. Args: month year [--actor employee_id]'

    def add_arguments(self, parser):
        parser.add_argument('month', type=int, help='Month (1-12)')
        parser.add_argument('year', type=int, help='Year (e.g. 2026)')
        parser.add_argument('--actor', type=int, default=None, help='Employee id recorded as processed_by')

    def handle(self, *args, **options):
        month = options['month']
        year = options['year']
        if month < 1 or month > 12:
            raise CommandError('Month must be 1-12')
        try:
            period, records_created = process_month_end(year, month, actor_id=options['actor'])
        except FleetError as e:
            raise CommandError(str(e))
        self.stdout.write(
            self.style.SUCCESS(
                f'Processed {period.period_name}: {records_created} payroll record(s) written.'
            )
        )
