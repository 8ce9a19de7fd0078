"""
Management command to generate the monthly payroll
"""
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from shopdesk.hrms.services import generate_payroll, payroll_totals


class Command(BaseCommand):
    help = "Generates payslips for every active employee (final payslips are left alone)"

    def add_arguments(self, parser):
        today = timezone.localdate()
        parser.add_argument('--month', type=int, default=today.month)
        parser.add_argument('--year', type=int, default=today.year)

    def handle(self, *args, **options):
        month, year = options['month'], options['year']
        if not 1 <= month <= 12:
            raise CommandError('Month must be between 1 and 12')

        generated, skipped = generate_payroll(month, year)
        for payslip in generated:
            self.stdout.write(f"  {payslip.employee.employee_code}: net {payslip.net_salary}")
        for employee in skipped:
            self.stdout.write(self.style.WARNING(f"  {employee.employee_code}: final payslip exists, skipped"))

        totals = payroll_totals(generated)
        self.stdout.write(self.style.SUCCESS(
            f"Generated {len(generated)} payslips for {month:02d}/{year}, total net {totals['total_net']}"
        ))
