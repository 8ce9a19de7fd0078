from datetime import datetime, timedelta
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


REQUEST_STATUS_CHOICES = [
    ('pending', 'Pending'),
    ('approved', 'Approved'),
    ('rejected', 'Rejected'),
]


class Employee(models.Model):
    """Staff members on the payroll"""
    EMPLOYMENT_STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('terminated', 'Terminated'),
        ('on_leave', 'On Leave'),
    ]

    employee_code = models.CharField(max_length=20, unique=True, blank=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    date_of_joining = models.DateField(default=timezone.localdate)
    employment_status = models.CharField(max_length=20, choices=EMPLOYMENT_STATUS_CHOICES, default='active')
    department = models.CharField(max_length=100, blank=True)
    designation = models.CharField(max_length=100, blank=True)
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    bank_name = models.CharField(max_length=100, blank=True)
    bank_account_number = models.CharField(max_length=50, blank=True)
    bank_ifsc = models.CharField(max_length=20, blank=True)
    emergency_contact_name = models.CharField(max_length=200, blank=True)
    emergency_contact_phone = models.CharField(max_length=20, blank=True)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='employee_profile')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_employees')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.employee_code} {self.full_name}"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @staticmethod
    def next_employee_code():
        codes = Employee.objects.filter(employee_code__regex=r'^EMP\d+$').values_list('employee_code', flat=True)
        highest = max((int(code[3:]) for code in codes), default=0)
        return f"EMP{highest + 1:04d}"

    def save(self, *args, **kwargs):
        if not self.employee_code:
            self.employee_code = self.next_employee_code()
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'hr_employees'
        ordering = ['employee_code']


class Shift(models.Model):
    SHIFT_TYPE_CHOICES = [
        ('regular', 'Regular'),
        ('rotational', 'Rotational'),
        ('split', 'Split'),
        ('flexible', 'Flexible'),
    ]

    shift_name = models.CharField(max_length=100)
    shift_type = models.CharField(max_length=20, choices=SHIFT_TYPE_CHOICES, default='regular')
    start_time = models.TimeField()
    end_time = models.TimeField()
    break_duration = models.PositiveIntegerField(default=0, help_text="Minutes")
    grace_period = models.PositiveIntegerField(default=15, help_text="Minutes allowed after start before marking late")
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, null=True, blank=True, related_name='shifts')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.shift_name} ({self.start_time:%H:%M}-{self.end_time:%H:%M})"

    def duration_minutes(self):
        """Start to end in minutes; shifts ending before they start cross midnight"""
        start = datetime.combine(datetime.min.date(), self.start_time)
        end = datetime.combine(datetime.min.date(), self.end_time)
        if end <= start:
            end += timedelta(days=1)
        return int((end - start).total_seconds() // 60)

    @property
    def scheduled_hours(self):
        minutes = max(0, self.duration_minutes() - self.break_duration)
        return (Decimal(minutes) / Decimal(60)).quantize(Decimal('0.01'))

    class Meta:
        db_table = 'hr_shifts'
        ordering = ['start_time']


class EmployeeShift(models.Model):
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='shift_assignments')
    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name='assignments')
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, null=True, blank=True, related_name='shift_assignments')
    assigned_date = models.DateField(default=timezone.localdate)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.employee} -> {self.shift.shift_name} from {self.assigned_date}"

    class Meta:
        db_table = 'hr_employee_shifts'
        ordering = ['-assigned_date']


class Attendance(models.Model):
    STATUS_CHOICES = [
        ('present', 'Present'),
        ('absent', 'Absent'),
        ('late', 'Late'),
        ('half_day', 'Half Day'),
        ('on_leave', 'On Leave'),
    ]

    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='attendance_records')
    store = models.ForeignKey('locations.Store', on_delete=models.PROTECT, null=True, blank=True, related_name='attendance_records')
    shift = models.ForeignKey(Shift, on_delete=models.SET_NULL, null=True, blank=True, related_name='attendance_records')
    attendance_date = models.DateField(default=timezone.localdate)
    check_in_time = models.DateTimeField(null=True, blank=True)
    check_out_time = models.DateTimeField(null=True, blank=True)
    check_in_latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    check_in_longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    check_in_address = models.TextField(blank=True)
    check_out_latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    check_out_longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    check_out_address = models.TextField(blank=True)
    total_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0.00'))
    break_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0.00'))
    overtime_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='present')
    is_late = models.BooleanField(default=False)
    late_by_minutes = models.PositiveIntegerField(default=0)
    notes = models.TextField(blank=True)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_attendance')
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.employee} {self.attendance_date} {self.status}"

    @property
    def open_break(self):
        return self.breaks.filter(break_end__isnull=True).first()

    class Meta:
        db_table = 'hr_attendance'
        ordering = ['-attendance_date', 'employee__employee_code']
        unique_together = ['employee', 'attendance_date']
        indexes = [
            models.Index(fields=['attendance_date', 'store'], name='idx_attendance_date_store'),
        ]


class BreakLog(models.Model):
    attendance = models.ForeignKey(Attendance, on_delete=models.CASCADE, related_name='breaks')
    break_type = models.CharField(max_length=50, default='regular')
    break_start = models.DateTimeField(default=timezone.now)
    break_end = models.DateTimeField(null=True, blank=True)
    break_duration = models.PositiveIntegerField(default=0, help_text="Minutes")
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Break {self.break_start:%H:%M} for {self.attendance}"

    class Meta:
        db_table = 'hr_break_logs'
        ordering = ['break_start']


class LeaveRequest(models.Model):
    LEAVE_TYPE_CHOICES = [
        ('sick', 'Sick'),
        ('casual', 'Casual'),
        ('paid', 'Paid'),
        ('unpaid', 'Unpaid'),
        ('maternity', 'Maternity'),
        ('paternity', 'Paternity'),
    ]
    STATUS_CHOICES = REQUEST_STATUS_CHOICES + [('cancelled', 'Cancelled')]

    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='leave_requests')
    leave_type = models.CharField(max_length=20, choices=LEAVE_TYPE_CHOICES)
    start_date = models.DateField()
    end_date = models.DateField()
    is_half_day = models.BooleanField(default=False)
    total_days = models.DecimalField(max_digits=5, decimal_places=1, default=Decimal('0.0'))
    reason = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    rejection_reason = models.TextField(blank=True)
    applied_on = models.DateTimeField(auto_now_add=True)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_leaves')
    approved_on = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.employee} {self.leave_type} {self.start_date}-{self.end_date}"

    def calculate_total_days(self):
        if self.is_half_day:
            return Decimal('0.5')
        return Decimal((self.end_date - self.start_date).days + 1)

    class Meta:
        db_table = 'hr_leave_requests'
        ordering = ['-start_date']


class PermissionRequest(models.Model):
    """Short leave within a working day"""
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='permission_requests')
    permission_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    duration_minutes = models.PositiveIntegerField(default=0)
    reason = models.TextField()
    deduct_from_salary = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=REQUEST_STATUS_CHOICES, default='pending')
    rejection_reason = models.TextField(blank=True)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_permissions')
    approved_on = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        start = datetime.combine(self.permission_date, self.start_time)
        end = datetime.combine(self.permission_date, self.end_time)
        self.duration_minutes = max(0, int((end - start).total_seconds() // 60))
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.employee} permission {self.permission_date}"

    class Meta:
        db_table = 'hr_permission_requests'
        ordering = ['-permission_date']


class Payslip(models.Model):
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='payslips')
    month = models.PositiveSmallIntegerField()
    year = models.PositiveIntegerField()
    total_hours = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0.00'))
    regular_hours = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0.00'))
    overtime_hours = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0.00'))
    days_worked = models.DecimalField(max_digits=5, decimal_places=1, default=Decimal('0.0'))
    total_working_days = models.PositiveSmallIntegerField(default=0)
    gross_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    bonuses = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    other_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    penalty_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    advance_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    unpaid_leave_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    net_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    is_final = models.BooleanField(default=False)
    generated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='generated_payslips')
    generated_on = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.employee} {self.month:02d}/{self.year}"

    @property
    def total_deductions(self):
        return (self.other_deductions + self.penalty_deductions +
                self.advance_deductions + self.unpaid_leave_deductions)

    class Meta:
        db_table = 'hr_payslips'
        ordering = ['-year', '-month', 'employee__employee_code']
        unique_together = ['employee', 'month', 'year']


class Advance(models.Model):
    """Salary advance recovered from a later payslip"""
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='advances')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    advance_date = models.DateField(default=timezone.localdate)
    reason = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=REQUEST_STATUS_CHOICES, default='pending')
    deducted_in_payslip = models.ForeignKey(Payslip, on_delete=models.SET_NULL, null=True, blank=True, related_name='advances')
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_advances')
    approved_on = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Advance {self.amount} to {self.employee}"

    class Meta:
        db_table = 'hr_advances'
        ordering = ['-advance_date']


class SalaryTransaction(models.Model):
    TRANSACTION_TYPE_CHOICES = [
        ('advance', 'Advance'),
        ('deduction', 'Deduction'),
        ('bonus', 'Bonus'),
        ('overtime', 'Overtime'),
        ('penalty', 'Penalty'),
    ]

    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='salary_transactions')
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    transaction_date = models.DateField(default=timezone.localdate)
    description = models.TextField()
    status = models.CharField(max_length=20, choices=REQUEST_STATUS_CHOICES, default='pending')
    reference_type = models.CharField(max_length=50, blank=True)
    reference_id = models.CharField(max_length=50, blank=True)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_salary_transactions')
    approved_on = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_transaction_type_display()} {self.amount} for {self.employee}"

    class Meta:
        db_table = 'hr_salary_transactions'
        ordering = ['-transaction_date']


class InventoryPenalty(models.Model):
    """Stock lost on an employee's watch, recovered through payroll"""
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='inventory_penalties')
    store = models.ForeignKey('locations.Store', on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_penalties')
    product_name = models.CharField(max_length=200)
    quantity_lost = models.DecimalField(max_digits=10, decimal_places=3)
    unit_value = models.DecimalField(max_digits=10, decimal_places=2)
    total_penalty = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    incident_date = models.DateField(default=timezone.localdate)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=REQUEST_STATUS_CHOICES, default='pending')
    deducted_in_payslip = models.ForeignKey(Payslip, on_delete=models.SET_NULL, null=True, blank=True, related_name='penalties')
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_penalties')
    approved_on = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        self.total_penalty = (self.quantity_lost * self.unit_value).quantize(Decimal('0.01'))
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Penalty {self.total_penalty} for {self.employee}"

    class Meta:
        db_table = 'hr_inventory_penalties'
        ordering = ['-incident_date']
        verbose_name_plural = 'inventory penalties'
