"""
Attendance, leave and payroll rules.
"""
import calendar
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from shopdesk.core.exceptions import BusinessRuleError
from shopdesk.core.models import Setting
from .models import (
    Attendance, BreakLog, EmployeeShift, LeaveRequest, PermissionRequest,
    Advance, SalaryTransaction, InventoryPenalty, Payslip, Employee
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
HOURS = Decimal('0.01')


def _sum(queryset, field):
    return queryset.aggregate(total=Sum(field))['total'] or ZERO


def get_employee_current_shift(employee, on_date=None):
    """The active assignment with the latest assigned_date on or before ``on_date``"""
    on_date = on_date or timezone.localdate()
    return (EmployeeShift.objects.select_related('shift', 'store')
            .filter(employee=employee, is_active=True, assigned_date__lte=on_date)
            .order_by('-assigned_date', '-id')
            .first())


def calculate_working_hours(check_in, check_out, break_minutes=0):
    """Hours between check in and out less breaks, rounded to 2 places"""
    minutes = Decimal((check_out - check_in).total_seconds()) / Decimal(60)
    worked = max(Decimal(0), minutes - Decimal(break_minutes or 0))
    return (worked / Decimal(60)).quantize(HOURS, rounding=ROUND_HALF_UP)


def _shift_start(shift, on_date):
    return timezone.make_aware(datetime.combine(on_date, shift.start_time))


# Attendance

def check_in(employee, store=None, shift=None, latitude=None, longitude=None, address='', when=None):
    when = when or timezone.now()
    on_date = timezone.localdate(when)

    existing = Attendance.objects.filter(employee=employee, attendance_date=on_date).first()
    if existing is not None:
        if existing.check_in_time:
            raise BusinessRuleError('Already checked in today.')
        raise BusinessRuleError(f"Attendance for today is already recorded as {existing.get_status_display()}.")

    assignment = None
    if shift is None:
        assignment = get_employee_current_shift(employee, on_date)
        shift = assignment.shift if assignment else None
    if store is None:
        store = (assignment.store if assignment else None) or (shift.store if shift else None)

    if store is not None and latitude is not None and longitude is not None and store.has_location():
        distance = store.distance_to(latitude, longitude)
        if distance > store.geo_fence_radius:
            raise BusinessRuleError(
                f"You are {distance:.0f}m away from {store.name}. "
                f"Check-in is allowed within {store.geo_fence_radius}m."
            )

    is_late = False
    late_by = 0
    if shift is not None:
        start = _shift_start(shift, on_date)
        if when > start + timedelta(minutes=shift.grace_period):
            is_late = True
            late_by = int((when - start).total_seconds() // 60)

    attendance = Attendance.objects.create(
        employee=employee,
        store=store,
        shift=shift,
        attendance_date=on_date,
        check_in_time=when,
        check_in_latitude=latitude,
        check_in_longitude=longitude,
        check_in_address=address or '',
        status='late' if is_late else 'present',
        is_late=is_late,
        late_by_minutes=late_by,
    )
    if is_late:
        logger.info(f"{employee.employee_code} checked in late by {late_by} min")
    else:
        logger.info(f"{employee.employee_code} checked in")
    return attendance


def _open_attendance(employee, when):
    """
    The row still waiting for a check out. Night shifts check out the day
    after they check in, so yesterday's open row counts too.
    """
    today = timezone.localdate(when)
    attendance = (Attendance.objects
                  .filter(employee=employee,
                          attendance_date__in=(today, today - timedelta(days=1)),
                          check_in_time__isnull=False,
                          check_out_time__isnull=True)
                  .order_by('-attendance_date')
                  .first())
    if attendance is not None:
        return attendance
    if Attendance.objects.filter(employee=employee, attendance_date=today, check_out_time__isnull=False).exists():
        raise BusinessRuleError('Already checked out today.')
    raise BusinessRuleError('You have not checked in today.')


def start_break(employee, break_type='regular', latitude=None, longitude=None, when=None):
    when = when or timezone.now()
    attendance = _open_attendance(employee, when)
    if attendance.open_break is not None:
        raise BusinessRuleError('A break is already in progress.')
    return BreakLog.objects.create(
        attendance=attendance,
        break_type=break_type or 'regular',
        break_start=when,
        latitude=latitude,
        longitude=longitude,
    )


def end_break(employee, when=None):
    when = when or timezone.now()
    attendance = _open_attendance(employee, when)
    current = attendance.open_break
    if current is None:
        raise BusinessRuleError('No break in progress.')
    current.break_end = when
    current.break_duration = max(0, int((when - current.break_start).total_seconds() // 60))
    current.save(update_fields=['break_end', 'break_duration'])
    return current


def check_out(employee, latitude=None, longitude=None, address='', when=None):
    when = when or timezone.now()
    attendance = _open_attendance(employee, when)
    if attendance.open_break is not None:
        raise BusinessRuleError('End your break before checking out.')

    break_minutes = attendance.breaks.aggregate(total=Sum('break_duration'))['total'] or 0
    total = calculate_working_hours(attendance.check_in_time, when, break_minutes)

    attendance.check_out_time = when
    attendance.check_out_latitude = latitude
    attendance.check_out_longitude = longitude
    attendance.check_out_address = address or ''
    attendance.total_hours = total
    attendance.break_hours = (Decimal(break_minutes) / Decimal(60)).quantize(HOURS, rounding=ROUND_HALF_UP)

    if attendance.shift is not None:
        scheduled = attendance.shift.scheduled_hours
        attendance.overtime_hours = max(ZERO, total - scheduled)
        if total < scheduled / 2:
            attendance.status = 'half_day'
    attendance.save()
    logger.info(f"{employee.employee_code} checked out after {total}h")
    return attendance


def mark_attendance(employee, on_date, status, user=None, notes='', store=None):
    """Admin entry for days without a check in (absent, on leave...)"""
    defaults = {
        'status': status,
        'notes': notes or '',
        'approved_by': user,
        'approved_at': timezone.now(),
    }
    if store is not None:
        defaults['store'] = store
    attendance, _ = Attendance.objects.update_or_create(
        employee=employee, attendance_date=on_date, defaults=defaults,
    )
    return attendance


def attendance_summary(records):
    counts = {status: 0 for status, _ in Attendance.STATUS_CHOICES}
    worked = []
    for record in records:
        counts[record.status] = counts.get(record.status, 0) + 1
        if record.total_hours:
            worked.append(record.total_hours)
    average = (sum(worked, ZERO) / len(worked)).quantize(HOURS) if worked else ZERO
    return {
        'total_records': sum(counts.values()),
        'present': counts['present'],
        'late': counts['late'],
        'absent': counts['absent'],
        'half_day': counts['half_day'],
        'on_leave': counts['on_leave'],
        'average_hours': average,
    }


# Leave and requests

def create_leave_request(employee, leave_type, start_date, end_date, reason, is_half_day=False):
    if end_date < start_date:
        raise BusinessRuleError('End date cannot be before start date.')
    if is_half_day and start_date != end_date:
        raise BusinessRuleError('Half day leave must start and end on the same day.')

    overlapping = LeaveRequest.objects.filter(
        employee=employee,
        status__in=('pending', 'approved'),
        start_date__lte=end_date,
        end_date__gte=start_date,
    )
    if overlapping.exists():
        raise BusinessRuleError('Leave request overlaps an existing pending or approved request.')

    leave = LeaveRequest(
        employee=employee,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        is_half_day=is_half_day,
        reason=reason,
    )
    leave.total_days = leave.calculate_total_days()
    leave.save()
    return leave


def approve_leave(leave, user=None):
    with transaction.atomic():
        leave = LeaveRequest.objects.select_for_update().get(pk=leave.pk)
        if leave.status != 'pending':
            raise BusinessRuleError(f"Only pending leave requests can be approved (this one is {leave.status}).")
        leave.status = 'approved'
        leave.approved_by = user
        leave.approved_on = timezone.now()
        leave.save()

        day = leave.start_date
        while day <= leave.end_date:
            Attendance.objects.get_or_create(
                employee=leave.employee,
                attendance_date=day,
                defaults={
                    'status': 'on_leave',
                    'notes': f"{leave.get_leave_type_display()} leave",
                    'approved_by': user,
                    'approved_at': leave.approved_on,
                },
            )
            day += timedelta(days=1)
    logger.info(f"Leave {leave.id} for {leave.employee.employee_code} approved")
    return leave


def reject_leave(leave, user=None, reason=''):
    if not reason or not reason.strip():
        raise BusinessRuleError('A rejection reason is required.')
    if leave.status != 'pending':
        raise BusinessRuleError(f"Only pending leave requests can be rejected (this one is {leave.status}).")
    leave.status = 'rejected'
    leave.rejection_reason = reason.strip()
    leave.approved_by = user
    leave.approved_on = timezone.now()
    leave.save()
    return leave


def cancel_leave(leave):
    if leave.status != 'pending':
        raise BusinessRuleError('Only pending leave requests can be cancelled.')
    leave.status = 'cancelled'
    leave.save(update_fields=['status', 'updated_at'])
    return leave


def decide_request(obj, approve, user=None, reason=''):
    """Approve or reject a pending permission, advance, salary transaction or penalty"""
    if obj.status != 'pending':
        raise BusinessRuleError(f"Only pending records can be {'approved' if approve else 'rejected'}.")
    obj.status = 'approved' if approve else 'rejected'
    obj.approved_by = user
    obj.approved_on = timezone.now()
    if not approve and hasattr(obj, 'rejection_reason'):
        obj.rejection_reason = reason or ''
    obj.save()
    return obj


# Payroll

def overtime_multiplier():
    value = Setting.get_value('overtime_multiplier', settings.OVERTIME_MULTIPLIER)
    return Decimal(str(value))


def working_days_in_month(year, month):
    """Days in the month excluding Sundays"""
    days = calendar.monthrange(year, month)[1]
    return sum(1 for day in range(1, days + 1) if date(year, month, day).weekday() != calendar.SUNDAY)


def _month_bounds(year, month):
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def generate_payslip(employee, month, year, user=None):
    """
    Build (or rebuild) an employee's payslip for a month.

    Final payslips are never touched. Advances and penalties recovered by
    the payslip are linked to it so they are not deducted twice.
    """
    if not 1 <= int(month) <= 12:
        raise BusinessRuleError('Month must be between 1 and 12.')
    month, year = int(month), int(year)
    month_start, month_end = _month_bounds(year, month)

    with transaction.atomic():
        payslip = Payslip.objects.select_for_update().filter(employee=employee, month=month, year=year).first()
        if payslip is not None and payslip.is_final:
            raise BusinessRuleError(f"Payslip for {month:02d}/{year} is final and cannot be regenerated.")
        if payslip is not None:
            Advance.objects.filter(deducted_in_payslip=payslip).update(deducted_in_payslip=None)
            InventoryPenalty.objects.filter(deducted_in_payslip=payslip).update(deducted_in_payslip=None)
        else:
            payslip = Payslip(employee=employee, month=month, year=year)

        attendance = Attendance.objects.filter(employee=employee, attendance_date__range=(month_start, month_end))
        total_hours = _sum(attendance, 'total_hours')
        overtime_hours = _sum(attendance, 'overtime_hours')
        regular_hours = total_hours - overtime_hours
        days_worked = (Decimal(attendance.filter(status__in=('present', 'late')).count()) +
                       Decimal('0.5') * attendance.filter(status='half_day').count())

        rate = employee.hourly_rate
        gross = (regular_hours * rate + overtime_hours * rate * overtime_multiplier()).quantize(HOURS, rounding=ROUND_HALF_UP)

        transactions = SalaryTransaction.objects.filter(
            employee=employee, status='approved', transaction_date__range=(month_start, month_end)
        )
        bonuses = _sum(transactions.filter(transaction_type__in=('bonus', 'overtime')), 'amount')
        other_deductions = _sum(transactions.filter(transaction_type='deduction'), 'amount')

        penalties = InventoryPenalty.objects.filter(
            employee=employee, status='approved', deducted_in_payslip__isnull=True, incident_date__lte=month_end
        )
        penalty_deductions = _sum(penalties, 'total_penalty') + _sum(transactions.filter(transaction_type='penalty'), 'amount')

        advances = Advance.objects.filter(
            employee=employee, status='approved', deducted_in_payslip__isnull=True, advance_date__lte=month_end
        )
        advance_deductions = _sum(advances, 'amount') + _sum(transactions.filter(transaction_type='advance'), 'amount')

        permission_minutes = PermissionRequest.objects.filter(
            employee=employee, status='approved', deduct_from_salary=True,
            permission_date__range=(month_start, month_end),
        ).aggregate(total=Sum('duration_minutes'))['total'] or 0
        unpaid_leave_deductions = (Decimal(permission_minutes) / Decimal(60) * rate).quantize(HOURS, rounding=ROUND_HALF_UP)

        deductions = other_deductions + penalty_deductions + advance_deductions + unpaid_leave_deductions
        payslip.total_hours = total_hours
        payslip.regular_hours = regular_hours
        payslip.overtime_hours = overtime_hours
        payslip.days_worked = days_worked
        payslip.total_working_days = working_days_in_month(year, month)
        payslip.gross_salary = gross
        payslip.bonuses = bonuses
        payslip.other_deductions = other_deductions
        payslip.penalty_deductions = penalty_deductions
        payslip.advance_deductions = advance_deductions
        payslip.unpaid_leave_deductions = unpaid_leave_deductions
        payslip.net_salary = max(ZERO, gross + bonuses - deductions)
        payslip.generated_by = user
        payslip.generated_on = timezone.now()
        payslip.save()

        advances.update(deducted_in_payslip=payslip)
        penalties.update(deducted_in_payslip=payslip)

    logger.info(f"Payslip {month:02d}/{year} for {employee.employee_code}: net {payslip.net_salary}")
    return payslip


def finalize_payslip(payslip):
    if payslip.is_final:
        raise BusinessRuleError('Payslip is already final.')
    payslip.is_final = True
    payslip.save(update_fields=['is_final'])
    return payslip


def generate_payroll(month, year, user=None):
    """Payslips for every active employee; final ones are skipped"""
    generated, skipped = [], []
    for employee in Employee.objects.filter(employment_status='active'):
        if Payslip.objects.filter(employee=employee, month=month, year=year, is_final=True).exists():
            skipped.append(employee)
            continue
        generated.append(generate_payslip(employee, month, year, user=user))
    return generated, skipped


def payroll_totals(payslips):
    totals = {
        'employees': 0,
        'total_gross': ZERO,
        'total_bonuses': ZERO,
        'total_deductions': ZERO,
        'total_net': ZERO,
    }
    for payslip in payslips:
        totals['employees'] += 1
        totals['total_gross'] += payslip.gross_salary
        totals['total_bonuses'] += payslip.bonuses
        totals['total_deductions'] += payslip.total_deductions
        totals['total_net'] += payslip.net_salary
    return totals


def employee_delete_blocker(employee):
    if employee.payslips.filter(is_final=True).exists():
        return f'Cannot delete "{employee.full_name}" because they have final payslips. Mark them terminated instead.'
    return None


def pending_requests(employee=None):
    """Counts of records waiting for a decision"""
    scope = Q(employee=employee) if employee is not None else Q()
    return {
        'leave_requests': LeaveRequest.objects.filter(scope, status='pending').count(),
        'permission_requests': PermissionRequest.objects.filter(scope, status='pending').count(),
        'advances': Advance.objects.filter(scope, status='pending').count(),
        'salary_transactions': SalaryTransaction.objects.filter(scope, status='pending').count(),
        'penalties': InventoryPenalty.objects.filter(scope, status='pending').count(),
    }
