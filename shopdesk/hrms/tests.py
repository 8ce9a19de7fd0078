"""
Test suite for HRMS module
Tests: Employees, shifts, attendance with breaks and geo-fence, leave, approval
workflows and payroll
"""
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from decimal import Decimal
from datetime import date, datetime, time
from shopdesk.core.exceptions import BusinessRuleError
from shopdesk.core.models import AuditLog, Setting
from shopdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shopdesk.hrms import services
from shopdesk.hrms.models import (
    Employee, EmployeeShift, Attendance, LeaveRequest, PermissionRequest,
    Advance, SalaryTransaction, InventoryPenalty, Payslip
)


def at(day, hour, minute=0):
    """Aware datetime on a March 2024 day in the project time zone"""
    return timezone.make_aware(datetime(2024, 3, day, hour, minute))


class EmployeeAndShiftTests(TestCase):
    """Test employee records and shift arithmetic"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())

    def test_employee_code_is_generated(self):
        response = self.client.post('/api/v1/hrms/employees/', {
            'first_name': 'Anita', 'last_name': 'Rao', 'email': 'anita@staff.test', 'hourly_rate': '120.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['employee_code'], 'EMP0001')
        self.assertEqual(response.data['full_name'], 'Anita Rao')

        response = self.client.post('/api/v1/hrms/employees/', {
            'first_name': 'Vikram', 'email': 'vikram@staff.test', 'employee_code': 'emp0001'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('employee_code', response.data)

    def test_negative_hourly_rate(self):
        response = self.client.post('/api/v1/hrms/employees/', {
            'first_name': 'Neg', 'email': 'neg@staff.test', 'hourly_rate': '-5'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_scheduled_hours(self):
        self.assertEqual(TestDataFactory.create_shift().scheduled_hours, Decimal('7.00'))
        night = TestDataFactory.create_shift(name='Night', start=time(22, 0), end=time(6, 0), break_duration=0)
        self.assertEqual(night.scheduled_hours, Decimal('8.00'))

    def test_shift_start_must_differ_from_end(self):
        response = self.client.post('/api/v1/hrms/shifts/', {
            'shift_name': 'Broken', 'start_time': '09:00', 'end_time': '09:00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_current_shift_is_latest_assignment(self):
        employee = TestDataFactory.create_employee()
        morning = TestDataFactory.create_shift()
        evening = TestDataFactory.create_shift(name='Evening', start=time(14, 0), end=time(22, 0))
        EmployeeShift.objects.create(employee=employee, shift=morning, assigned_date=date(2024, 3, 1))
        EmployeeShift.objects.create(employee=employee, shift=evening, assigned_date=date(2024, 3, 10))

        self.assertEqual(services.get_employee_current_shift(employee, date(2024, 3, 5)).shift, morning)
        response = self.client.get(f'/api/v1/hrms/employees/{employee.id}/current-shift/', {'date': '2024-03-12'})
        self.assertEqual(response.data['shift']['shift_name'], 'Evening')
        response = self.client.get(f'/api/v1/hrms/employees/{employee.id}/current-shift/', {'date': '2024-02-01'})
        self.assertIsNone(response.data['shift'])

    def test_delete_blocked_by_final_payslip(self):
        employee = TestDataFactory.create_employee()
        Payslip.objects.create(employee=employee, month=3, year=2024, is_final=True)
        response = self.client.delete(f'/api/v1/hrms/employees/{employee.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Employee.objects.filter(pk=employee.id).exists())

    def test_hrms_requires_page_access(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user(page_access=['dashboard']))
        response = client.get('/api/v1/hrms/employees/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AttendanceServiceTests(TestCase):
    """Test check in, breaks and check out"""

    def setUp(self):
        self.employee = TestDataFactory.create_employee()
        self.shift = TestDataFactory.create_shift()
        EmployeeShift.objects.create(employee=self.employee, shift=self.shift, assigned_date=date(2024, 3, 1))

    def test_working_hours(self):
        self.assertEqual(services.calculate_working_hours(at(4, 9), at(4, 17, 30), 30), Decimal('8.00'))
        self.assertEqual(services.calculate_working_hours(at(4, 9), at(4, 9, 10), 30), Decimal('0.00'))

    def test_check_in_within_grace_period(self):
        attendance = services.check_in(self.employee, when=at(4, 9, 10))
        self.assertEqual(attendance.status, 'present')
        self.assertEqual(attendance.shift, self.shift)
        self.assertFalse(attendance.is_late)

    def test_late_check_in(self):
        attendance = services.check_in(self.employee, when=at(4, 9, 20))
        self.assertEqual(attendance.status, 'late')
        self.assertTrue(attendance.is_late)
        self.assertEqual(attendance.late_by_minutes, 20)

    def test_single_check_in_per_day(self):
        services.check_in(self.employee, when=at(4, 9))
        with self.assertRaises(BusinessRuleError):
            services.check_in(self.employee, when=at(4, 10))

    def test_geo_fence(self):
        store = TestDataFactory.create_store(latitude=Decimal('12.971600'), longitude=Decimal('77.594600'),
                                             geo_fence_radius=100)
        with self.assertRaises(BusinessRuleError) as ctx:
            services.check_in(self.employee, store=store, latitude=Decimal('12.981600'),
                              longitude=Decimal('77.594600'), when=at(4, 9))
        self.assertIn('away from', str(ctx.exception))

        attendance = services.check_in(self.employee, store=store, latitude=Decimal('12.971650'),
                                       longitude=Decimal('77.594600'), when=at(4, 9))
        self.assertEqual(attendance.store, store)

    def test_breaks_and_overtime(self):
        services.check_in(self.employee, when=at(4, 9))
        services.start_break(self.employee, when=at(4, 12))
        with self.assertRaises(BusinessRuleError):
            services.start_break(self.employee, when=at(4, 12, 5))
        with self.assertRaises(BusinessRuleError):
            services.check_out(self.employee, when=at(4, 12, 30))
        log = services.end_break(self.employee, when=at(4, 12, 45))
        self.assertEqual(log.break_duration, 45)

        attendance = services.check_out(self.employee, when=at(4, 18))
        self.assertEqual(attendance.total_hours, Decimal('8.25'))
        self.assertEqual(attendance.break_hours, Decimal('0.75'))
        self.assertEqual(attendance.overtime_hours, Decimal('1.25'))
        self.assertEqual(attendance.status, 'present')

        with self.assertRaises(BusinessRuleError):
            services.check_out(self.employee, when=at(4, 19))

    def test_short_day_is_half_day(self):
        services.check_in(self.employee, when=at(4, 9))
        attendance = services.check_out(self.employee, when=at(4, 12))
        self.assertEqual(attendance.total_hours, Decimal('3.00'))
        self.assertEqual(attendance.status, 'half_day')

    def test_night_shift_checks_out_next_day(self):
        night = TestDataFactory.create_shift(name='Night', start=time(22, 0), end=time(6, 0))
        services.check_in(self.employee, shift=night, when=at(4, 22))
        services.start_break(self.employee, when=at(5, 2))
        services.end_break(self.employee, when=at(5, 2, 30))

        attendance = services.check_out(self.employee, when=at(5, 6))
        self.assertEqual(attendance.attendance_date, date(2024, 3, 4))
        self.assertEqual(attendance.total_hours, Decimal('7.50'))
        self.assertEqual(attendance.overtime_hours, Decimal('0.50'))
        self.assertFalse(Attendance.objects.filter(attendance_date=date(2024, 3, 5)).exists())

    def test_break_without_check_in(self):
        with self.assertRaises(BusinessRuleError):
            services.start_break(self.employee, when=at(4, 12))

    def test_marked_absent_cannot_check_in(self):
        services.mark_attendance(self.employee, date(2024, 3, 4), 'absent')
        with self.assertRaises(BusinessRuleError):
            services.check_in(self.employee, when=at(4, 9))


class AttendanceAPITests(TestCase):
    """Test self-service clocking and attendance management endpoints"""

    def setUp(self):
        self.staff_user = TestDataFactory.create_user(page_access=['dashboard'])
        self.employee = TestDataFactory.create_employee(user=self.staff_user)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff_user)

    def test_employee_clocks_in_and_out_for_self(self):
        response = self.client.post('/api/v1/hrms/attendance/check-in/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['employee'], self.employee.id)

        response = self.client.post('/api/v1/hrms/attendance/break/start/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/hrms/attendance/break/end/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/v1/hrms/attendance/check-out/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['check_out_time'])
        self.assertEqual(len(response.data['breaks']), 1)

    def test_employee_cannot_clock_in_colleague(self):
        colleague = TestDataFactory.create_employee()
        response = self.client.post('/api/v1/hrms/attendance/check-in/', {'employee': colleague.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Attendance.objects.exists())

    def test_hr_user_can_clock_in_anyone(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user(role='lead', page_access=['hrms']))
        response = client.post('/api/v1/hrms/attendance/check-in/', {'employee': self.employee.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_double_check_in_returns_error(self):
        self.client.post('/api/v1/hrms/attendance/check-in/', {}, format='json')
        response = self.client.post('/api/v1/hrms/attendance/check-in/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Already checked in today.')

    def test_mark_and_summarise(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_admin())
        response = client.post('/api/v1/hrms/attendance/mark/', {
            'employee': self.employee.id, 'attendance_date': '2024-03-04', 'status': 'absent'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        Attendance.objects.create(employee=self.employee, attendance_date=date(2024, 3, 5), status='present',
                                  total_hours=Decimal('8.00'))

        response = client.get('/api/v1/hrms/attendance/summary/', {'date_from': '2024-03-01', 'date_to': '2024-03-31'})
        self.assertEqual(response.data['total_records'], 2)
        self.assertEqual(response.data['absent'], 1)
        self.assertEqual(response.data['average_hours'], Decimal('8.00'))

        response = client.get('/api/v1/hrms/attendance/', {'employee_id': self.employee.id})
        self.assertEqual(response.data['count'], 2)

    def test_correction_is_audited(self):
        record = Attendance.objects.create(employee=self.employee, attendance_date=date(2024, 3, 4))
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_admin())
        response = client.patch(f'/api/v1/hrms/attendance/{record.id}/', {'status': 'late'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(AuditLog.objects.filter(model_name='Attendance', action='update').exists())


class LeaveTests(TestCase):
    """Test leave requests"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.employee = TestDataFactory.create_employee()

    def _apply(self, start, end, **extra):
        payload = {'employee': self.employee.id, 'leave_type': 'casual', 'start_date': start, 'end_date': end,
                   'reason': 'Family function'}
        payload.update(extra)
        return self.client.post('/api/v1/hrms/leaves/', payload, format='json')

    def test_total_days(self):
        response = self._apply('2024-03-04', '2024-03-06')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_days'], '3.0')

        response = self._apply('2024-03-08', '2024-03-08', is_half_day=True)
        self.assertEqual(response.data['total_days'], '0.5')

    def test_invalid_ranges(self):
        self.assertEqual(self._apply('2024-03-06', '2024-03-04').status_code, status.HTTP_400_BAD_REQUEST)
        response = self._apply('2024-03-04', '2024-03-05', is_half_day=True)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_overlap_rejected(self):
        self._apply('2024-03-04', '2024-03-06')
        response = self._apply('2024-03-06', '2024-03-08')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('overlaps', response.data['error'])

    def test_approve_marks_attendance(self):
        leave_id = self._apply('2024-03-04', '2024-03-06').data['id']
        response = self.client.post(f'/api/v1/hrms/leaves/{leave_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        days = Attendance.objects.filter(employee=self.employee, status='on_leave')
        self.assertEqual(days.count(), 3)
        self.assertTrue(AuditLog.objects.filter(action='leave_approve').exists())

        response = self.client.post(f'/api/v1/hrms/leaves/{leave_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reject_needs_reason(self):
        leave_id = self._apply('2024-03-04', '2024-03-04').data['id']
        response = self.client.post(f'/api/v1/hrms/leaves/{leave_id}/reject/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/hrms/leaves/{leave_id}/reject/', {'reason': 'Stock taking'},
                                    format='json')
        self.assertEqual(response.data['status'], 'rejected')
        self.assertEqual(response.data['rejection_reason'], 'Stock taking')
        self.assertTrue(AuditLog.objects.filter(action='leave_reject').exists())

    def test_cancelled_leave_frees_the_dates(self):
        leave_id = self._apply('2024-03-04', '2024-03-04').data['id']
        self.client.post(f'/api/v1/hrms/leaves/{leave_id}/cancel/')
        self.assertEqual(LeaveRequest.objects.get(pk=leave_id).status, 'cancelled')
        self.assertEqual(self._apply('2024-03-04', '2024-03-04').status_code, status.HTTP_201_CREATED)


class ApprovalWorkflowTests(TestCase):
    """Test permissions, advances, salary transactions and penalties"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.employee = TestDataFactory.create_employee()

    def test_permission_duration(self):
        response = self.client.post('/api/v1/hrms/permissions/', {
            'employee': self.employee.id, 'permission_date': '2024-03-04',
            'start_time': '10:00', 'end_time': '11:30', 'reason': 'Bank visit',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['duration_minutes'], 90)

        response = self.client.post('/api/v1/hrms/permissions/', {
            'employee': self.employee.id, 'permission_date': '2024-03-04',
            'start_time': '11:00', 'end_time': '10:00', 'reason': 'Backwards',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_penalty_total(self):
        response = self.client.post('/api/v1/hrms/penalties/', {
            'employee': self.employee.id, 'product_name': 'Milk 1L', 'quantity_lost': '3', 'unit_value': '27.50'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_penalty'], '82.50')

    def test_advance_decision_locks_record(self):
        advance = Advance.objects.create(employee=self.employee, amount=Decimal('500.00'))
        self.assertEqual(services.pending_requests(self.employee)['advances'], 1)

        response = self.client.post(f'/api/v1/hrms/advances/{advance.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        log = AuditLog.objects.get(model_name='Advance')
        self.assertEqual(log.changes['decision'], 'approve')

        response = self.client.patch(f'/api/v1/hrms/advances/{advance.id}/', {'amount': '900.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/v1/hrms/advances/{advance.id}/reject/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reject_salary_transaction(self):
        tx = SalaryTransaction.objects.create(employee=self.employee, transaction_type='bonus',
                                              amount=Decimal('100.00'), description='Festival')
        response = self.client.post(f'/api/v1/hrms/salary-transactions/{tx.id}/reject/', {'reason': 'Duplicate'},
                                    format='json')
        self.assertEqual(response.data['status'], 'rejected')

    def test_pending_counts_endpoint(self):
        PermissionRequest.objects.create(employee=self.employee, permission_date=date(2024, 3, 4),
                                         start_time=time(10, 0), end_time=time(10, 30), reason='Doctor')
        response = self.client.get('/api/v1/hrms/pending/')
        self.assertEqual(response.data['permission_requests'], 1)
        self.assertEqual(response.data['leave_requests'], 0)


class PayrollTests(TestCase):
    """Test payslip computation and payroll runs"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.employee = TestDataFactory.create_employee(hourly_rate=Decimal('100.00'))

        Attendance.objects.create(employee=self.employee, attendance_date=date(2024, 3, 4), status='present',
                                  total_hours=Decimal('8.00'), overtime_hours=Decimal('1.00'))
        Attendance.objects.create(employee=self.employee, attendance_date=date(2024, 3, 5), status='late',
                                  total_hours=Decimal('6.00'))
        Attendance.objects.create(employee=self.employee, attendance_date=date(2024, 3, 6), status='half_day',
                                  total_hours=Decimal('3.00'))
        # Outside the month
        Attendance.objects.create(employee=self.employee, attendance_date=date(2024, 4, 1), status='present',
                                  total_hours=Decimal('8.00'))

        SalaryTransaction.objects.create(employee=self.employee, transaction_type='bonus', amount=Decimal('200.00'),
                                         transaction_date=date(2024, 3, 10), description='Target', status='approved')
        SalaryTransaction.objects.create(employee=self.employee, transaction_type='deduction', amount=Decimal('50.00'),
                                         transaction_date=date(2024, 3, 11), description='Uniform', status='approved')
        SalaryTransaction.objects.create(employee=self.employee, transaction_type='bonus', amount=Decimal('999.00'),
                                         transaction_date=date(2024, 3, 12), description='Not approved')
        self.advance = Advance.objects.create(employee=self.employee, amount=Decimal('300.00'),
                                              advance_date=date(2024, 3, 8), status='approved')
        InventoryPenalty.objects.create(employee=self.employee, product_name='Eggs', quantity_lost=Decimal('2'),
                                        unit_value=Decimal('25.00'), incident_date=date(2024, 3, 12), status='approved')
        PermissionRequest.objects.create(employee=self.employee, permission_date=date(2024, 3, 15),
                                         start_time=time(10, 0), end_time=time(10, 30), reason='Bank',
                                         deduct_from_salary=True, status='approved')

    def test_working_days_exclude_sundays(self):
        self.assertEqual(services.working_days_in_month(2024, 3), 26)
        self.assertEqual(services.working_days_in_month(2024, 2), 25)

    def test_payslip_figures(self):
        payslip = services.generate_payslip(self.employee, 3, 2024, user=self.admin)
        self.assertEqual(payslip.total_hours, Decimal('17.00'))
        self.assertEqual(payslip.regular_hours, Decimal('16.00'))
        self.assertEqual(payslip.overtime_hours, Decimal('1.00'))
        self.assertEqual(payslip.days_worked, Decimal('2.5'))
        self.assertEqual(payslip.total_working_days, 26)
        self.assertEqual(payslip.gross_salary, Decimal('1750.00'))
        self.assertEqual(payslip.bonuses, Decimal('200.00'))
        self.assertEqual(payslip.other_deductions, Decimal('50.00'))
        self.assertEqual(payslip.penalty_deductions, Decimal('50.00'))
        self.assertEqual(payslip.advance_deductions, Decimal('300.00'))
        self.assertEqual(payslip.unpaid_leave_deductions, Decimal('50.00'))
        self.assertEqual(payslip.total_deductions, Decimal('450.00'))
        self.assertEqual(payslip.net_salary, Decimal('1500.00'))

        self.advance.refresh_from_db()
        self.assertEqual(self.advance.deducted_in_payslip, payslip)

    def test_overtime_multiplier_setting(self):
        Setting.objects.create(key='overtime_multiplier', value='2')
        payslip = services.generate_payslip(self.employee, 3, 2024)
        self.assertEqual(payslip.gross_salary, Decimal('1800.00'))

    def test_regenerate_does_not_double_deduct(self):
        first = services.generate_payslip(self.employee, 3, 2024)
        second = services.generate_payslip(self.employee, 3, 2024)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.advance_deductions, Decimal('300.00'))
        self.assertEqual(Payslip.objects.count(), 1)

    def test_recovered_advance_not_deducted_next_month(self):
        services.generate_payslip(self.employee, 3, 2024)
        april = services.generate_payslip(self.employee, 4, 2024)
        self.assertEqual(april.advance_deductions, Decimal('0.00'))
        self.assertEqual(april.penalty_deductions, Decimal('0.00'))
        self.assertEqual(april.gross_salary, Decimal('800.00'))

    def test_net_salary_never_negative(self):
        Advance.objects.create(employee=self.employee, amount=Decimal('10000.00'),
                               advance_date=date(2024, 3, 9), status='approved')
        payslip = services.generate_payslip(self.employee, 3, 2024)
        self.assertEqual(payslip.net_salary, Decimal('0.00'))

    def test_final_payslip_is_immutable(self):
        response = self.client.post('/api/v1/hrms/payslips/generate/', {
            'employee': self.employee.id, 'month': 3, 'year': 2024
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['net_salary'], '1500.00')
        payslip_id = response.data['id']

        response = self.client.post(f'/api/v1/hrms/payslips/{payslip_id}/finalize/')
        self.assertTrue(response.data['is_final'])
        self.assertTrue(AuditLog.objects.filter(action='payslip_finalize').exists())

        response = self.client.post('/api/v1/hrms/payslips/generate/', {
            'employee': self.employee.id, 'month': 3, 'year': 2024
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/v1/hrms/payslips/{payslip_id}/finalize/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_payroll_run_skips_final_payslips(self):
        other = TestDataFactory.create_employee(hourly_rate=Decimal('50.00'))
        TestDataFactory.create_employee(employment_status='terminated')
        Payslip.objects.create(employee=other, month=3, year=2024, is_final=True)

        response = self.client.post('/api/v1/hrms/payslips/generate/', {'month': 3, 'year': 2024}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['generated']), 1)
        self.assertEqual(response.data['skipped'], [other.employee_code])
        self.assertEqual(response.data['totals']['total_net'], Decimal('1500.00'))
        self.assertTrue(AuditLog.objects.filter(action='payslip_generate', object_id='2024-03').exists())

        response = self.client.get('/api/v1/hrms/payroll/', {'month': 3, 'year': 2024})
        self.assertEqual(response.data['totals']['employees'], 2)

    def test_payslip_detail_lists_recoveries(self):
        payslip = services.generate_payslip(self.employee, 3, 2024)
        response = self.client.get(f'/api/v1/hrms/payslips/{payslip.id}/')
        self.assertEqual(len(response.data['advances']), 1)
        self.assertEqual(len(response.data['penalties']), 1)

    def test_invalid_month(self):
        with self.assertRaises(BusinessRuleError):
            services.generate_payslip(self.employee, 13, 2024)
        response = self.client.post('/api/v1/hrms/payslips/generate/', {'month': 0, 'year': 2024}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_generate_payroll_command(self):
        out = StringIO()
        call_command('generate_payroll', month=3, year=2024, stdout=out)
        self.assertIn('Generated 1 payslips for 03/2024', out.getvalue())
        self.assertTrue(Payslip.objects.filter(employee=self.employee, month=3, year=2024).exists())
