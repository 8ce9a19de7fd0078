from rest_framework import serializers
from shopdesk.locations.models import Store
from .models import (
    Employee, Shift, EmployeeShift, Attendance, BreakLog, LeaveRequest, PermissionRequest,
    Advance, SalaryTransaction, InventoryPenalty, Payslip
)


class EmployeeSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    employee_code = serializers.CharField(required=False, allow_blank=True, max_length=20)

    class Meta:
        model = Employee
        fields = ['id', 'employee_code', 'first_name', 'last_name', 'full_name', 'email', 'phone', 'address',
                  'date_of_birth', 'date_of_joining', 'employment_status', 'department', 'designation',
                  'hourly_rate', 'bank_name', 'bank_account_number', 'bank_ifsc',
                  'emergency_contact_name', 'emergency_contact_phone', 'user',
                  'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_employee_code(self, value):
        value = (value or '').strip().upper()
        if value:
            qs = Employee.objects.filter(employee_code=value)
            if self.instance:
                qs = qs.exclude(pk=self.instance.pk)
            if qs.exists():
                raise serializers.ValidationError("Employee code already exists")
        return value

    def validate_hourly_rate(self, value):
        if value < 0:
            raise serializers.ValidationError("Hourly rate cannot be negative")
        return value


class ShiftSerializer(serializers.ModelSerializer):
    scheduled_hours = serializers.DecimalField(max_digits=5, decimal_places=2, read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)

    class Meta:
        model = Shift
        fields = ['id', 'shift_name', 'shift_type', 'start_time', 'end_time', 'break_duration', 'grace_period',
                  'scheduled_hours', 'store', 'store_name', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start is not None and start == end:
            raise serializers.ValidationError({'end_time': 'End time must differ from start time'})
        return attrs


class EmployeeShiftSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.full_name', read_only=True)
    shift_name = serializers.CharField(source='shift.shift_name', read_only=True)

    class Meta:
        model = EmployeeShift
        fields = ['id', 'employee', 'employee_name', 'shift', 'shift_name', 'store', 'assigned_date',
                  'is_active', 'created_at']
        read_only_fields = ['created_at']


class BreakLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = BreakLog
        fields = ['id', 'attendance', 'break_type', 'break_start', 'break_end', 'break_duration',
                  'latitude', 'longitude']
        read_only_fields = fields


class AttendanceSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.full_name', read_only=True)
    employee_code = serializers.CharField(source='employee.employee_code', read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)
    shift_name = serializers.CharField(source='shift.shift_name', read_only=True, default=None)
    breaks = BreakLogSerializer(many=True, read_only=True)

    class Meta:
        model = Attendance
        fields = ['id', 'employee', 'employee_name', 'employee_code', 'store', 'store_name', 'shift', 'shift_name',
                  'attendance_date', 'check_in_time', 'check_out_time',
                  'check_in_latitude', 'check_in_longitude', 'check_in_address',
                  'check_out_latitude', 'check_out_longitude', 'check_out_address',
                  'total_hours', 'break_hours', 'overtime_hours', 'status', 'is_late', 'late_by_minutes',
                  'notes', 'breaks', 'approved_by', 'approved_at', 'created_at', 'updated_at']
        read_only_fields = ['approved_by', 'approved_at', 'created_at', 'updated_at']


class CheckInSerializer(serializers.Serializer):
    employee = serializers.PrimaryKeyRelatedField(queryset=Employee.objects.filter(employment_status='active'))
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.filter(is_active=True), required=False, allow_null=True)
    shift = serializers.PrimaryKeyRelatedField(queryset=Shift.objects.filter(is_active=True), required=False, allow_null=True)
    latitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)
    longitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True, default='')


class CheckOutSerializer(serializers.Serializer):
    employee = serializers.PrimaryKeyRelatedField(queryset=Employee.objects.all())
    latitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)
    longitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True, default='')


class BreakSerializer(serializers.Serializer):
    employee = serializers.PrimaryKeyRelatedField(queryset=Employee.objects.all())
    break_type = serializers.CharField(required=False, allow_blank=True, default='regular')
    latitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)
    longitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)


class MarkAttendanceSerializer(serializers.Serializer):
    employee = serializers.PrimaryKeyRelatedField(queryset=Employee.objects.all())
    attendance_date = serializers.DateField()
    status = serializers.ChoiceField(choices=[('absent', 'Absent'), ('on_leave', 'On Leave'),
                                              ('present', 'Present'), ('half_day', 'Half Day')])
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all(), required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class LeaveRequestSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.full_name', read_only=True)

    class Meta:
        model = LeaveRequest
        fields = ['id', 'employee', 'employee_name', 'leave_type', 'start_date', 'end_date', 'is_half_day',
                  'total_days', 'reason', 'status', 'rejection_reason', 'applied_on',
                  'approved_by', 'approved_on', 'updated_at']
        read_only_fields = ['total_days', 'status', 'rejection_reason', 'applied_on',
                            'approved_by', 'approved_on', 'updated_at']


class PermissionRequestSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.full_name', read_only=True)

    class Meta:
        model = PermissionRequest
        fields = ['id', 'employee', 'employee_name', 'permission_date', 'start_time', 'end_time',
                  'duration_minutes', 'reason', 'deduct_from_salary', 'status', 'rejection_reason',
                  'approved_by', 'approved_on', 'created_at']
        read_only_fields = ['duration_minutes', 'status', 'rejection_reason', 'approved_by', 'approved_on', 'created_at']

    def validate(self, attrs):
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start and end and end <= start:
            raise serializers.ValidationError({'end_time': 'End time must be after start time'})
        return attrs


class AdvanceSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.full_name', read_only=True)

    class Meta:
        model = Advance
        fields = ['id', 'employee', 'employee_name', 'amount', 'advance_date', 'reason', 'status',
                  'deducted_in_payslip', 'approved_by', 'approved_on', 'created_at']
        read_only_fields = ['status', 'deducted_in_payslip', 'approved_by', 'approved_on', 'created_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero")
        return value


class SalaryTransactionSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.full_name', read_only=True)

    class Meta:
        model = SalaryTransaction
        fields = ['id', 'employee', 'employee_name', 'transaction_type', 'amount', 'transaction_date',
                  'description', 'status', 'reference_type', 'reference_id',
                  'approved_by', 'approved_on', 'created_at']
        read_only_fields = ['status', 'approved_by', 'approved_on', 'created_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero")
        return value


class InventoryPenaltySerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.full_name', read_only=True)

    class Meta:
        model = InventoryPenalty
        fields = ['id', 'employee', 'employee_name', 'store', 'product_name', 'quantity_lost', 'unit_value',
                  'total_penalty', 'incident_date', 'description', 'status', 'deducted_in_payslip',
                  'approved_by', 'approved_on', 'created_at']
        read_only_fields = ['total_penalty', 'status', 'deducted_in_payslip', 'approved_by', 'approved_on', 'created_at']

    def validate_quantity_lost(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity lost must be greater than zero")
        return value

    def validate_unit_value(self, value):
        if value < 0:
            raise serializers.ValidationError("Unit value cannot be negative")
        return value


class PayslipSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.full_name', read_only=True)
    employee_code = serializers.CharField(source='employee.employee_code', read_only=True)
    hourly_rate = serializers.DecimalField(source='employee.hourly_rate', max_digits=10, decimal_places=2, read_only=True)
    total_deductions = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Payslip
        fields = ['id', 'employee', 'employee_name', 'employee_code', 'hourly_rate', 'month', 'year',
                  'total_hours', 'regular_hours', 'overtime_hours', 'days_worked', 'total_working_days',
                  'gross_salary', 'bonuses', 'other_deductions', 'penalty_deductions', 'advance_deductions',
                  'unpaid_leave_deductions', 'total_deductions', 'net_salary', 'is_final',
                  'generated_by', 'generated_on']
        read_only_fields = fields


class PayslipGenerateSerializer(serializers.Serializer):
    employee = serializers.PrimaryKeyRelatedField(queryset=Employee.objects.all(), required=False, allow_null=True)
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2000, max_value=2100)


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')
