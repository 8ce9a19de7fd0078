from django.contrib import admin
from .models import (
    Employee, Shift, EmployeeShift, Attendance, BreakLog, LeaveRequest, PermissionRequest,
    Advance, SalaryTransaction, InventoryPenalty, Payslip
)


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['employee_code', 'full_name', 'email', 'designation', 'employment_status', 'hourly_rate']
    list_filter = ['employment_status', 'department']
    search_fields = ['employee_code', 'first_name', 'last_name', 'email']


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ['shift_name', 'shift_type', 'start_time', 'end_time', 'grace_period', 'store', 'is_active']
    list_filter = ['shift_type', 'is_active', 'store']


@admin.register(EmployeeShift)
class EmployeeShiftAdmin(admin.ModelAdmin):
    list_display = ['employee', 'shift', 'store', 'assigned_date', 'is_active']
    list_filter = ['is_active', 'store']


class BreakLogInline(admin.TabularInline):
    model = BreakLog
    extra = 0


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ['attendance_date', 'employee', 'store', 'status', 'check_in_time', 'check_out_time', 'total_hours']
    list_filter = ['status', 'store', 'is_late']
    search_fields = ['employee__employee_code', 'employee__first_name']
    date_hierarchy = 'attendance_date'
    inlines = [BreakLogInline]


@admin.register(LeaveRequest)
class LeaveRequestAdmin(admin.ModelAdmin):
    list_display = ['employee', 'leave_type', 'start_date', 'end_date', 'total_days', 'status']
    list_filter = ['status', 'leave_type']


@admin.register(PermissionRequest)
class PermissionRequestAdmin(admin.ModelAdmin):
    list_display = ['employee', 'permission_date', 'start_time', 'end_time', 'duration_minutes', 'status']
    list_filter = ['status', 'deduct_from_salary']


@admin.register(Advance)
class AdvanceAdmin(admin.ModelAdmin):
    list_display = ['employee', 'amount', 'advance_date', 'status', 'deducted_in_payslip']
    list_filter = ['status']


@admin.register(SalaryTransaction)
class SalaryTransactionAdmin(admin.ModelAdmin):
    list_display = ['employee', 'transaction_type', 'amount', 'transaction_date', 'status']
    list_filter = ['transaction_type', 'status']


@admin.register(InventoryPenalty)
class InventoryPenaltyAdmin(admin.ModelAdmin):
    list_display = ['employee', 'product_name', 'quantity_lost', 'unit_value', 'total_penalty', 'status']
    list_filter = ['status', 'store']


@admin.register(Payslip)
class PayslipAdmin(admin.ModelAdmin):
    list_display = ['employee', 'month', 'year', 'gross_salary', 'net_salary', 'is_final']
    list_filter = ['year', 'month', 'is_final']
    readonly_fields = ['generated_on']
