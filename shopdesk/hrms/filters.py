import django_filters
from .models import Employee, Attendance, LeaveRequest, Payslip


class EmployeeFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name='employment_status')
    department = django_filters.CharFilter(field_name='department', lookup_expr='iexact')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Employee
        fields = ['status', 'department', 'search']

    def filter_search(self, queryset, name, value):
        from django.db.models import Q
        return queryset.filter(
            Q(first_name__icontains=value) | Q(last_name__icontains=value) |
            Q(employee_code__icontains=value) | Q(email__icontains=value)
        )


class AttendanceFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='attendance_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='attendance_date', lookup_expr='lte')
    employee_id = django_filters.NumberFilter(field_name='employee_id')
    store_id = django_filters.NumberFilter(field_name='store_id')
    status = django_filters.CharFilter(field_name='status')

    class Meta:
        model = Attendance
        fields = ['date_from', 'date_to', 'employee_id', 'store_id', 'status']


class LeaveRequestFilter(django_filters.FilterSet):
    employee_id = django_filters.NumberFilter(field_name='employee_id')
    status = django_filters.CharFilter(field_name='status')
    leave_type = django_filters.CharFilter(field_name='leave_type')

    class Meta:
        model = LeaveRequest
        fields = ['employee_id', 'status', 'leave_type']


class PayslipFilter(django_filters.FilterSet):
    employee_id = django_filters.NumberFilter(field_name='employee_id')
    month = django_filters.NumberFilter(field_name='month')
    year = django_filters.NumberFilter(field_name='year')
    is_final = django_filters.BooleanFilter(field_name='is_final')

    class Meta:
        model = Payslip
        fields = ['employee_id', 'month', 'year', 'is_final']
