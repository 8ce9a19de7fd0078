import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.paginator import Paginator
from django.shortcuts import get_object_or_404
from shopdesk.core.pages import has_page_permission
from shopdesk.core.permissions import page_permission
from shopdesk.core.utils import create_audit_log, parse_date_param
from .filters import EmployeeFilter, AttendanceFilter, LeaveRequestFilter, PayslipFilter
from .models import (
    Employee, Shift, EmployeeShift, Attendance, LeaveRequest, PermissionRequest,
    Advance, SalaryTransaction, InventoryPenalty, Payslip
)
from .serializers import (
    EmployeeSerializer, ShiftSerializer, EmployeeShiftSerializer, AttendanceSerializer, BreakLogSerializer,
    CheckInSerializer, CheckOutSerializer, BreakSerializer, MarkAttendanceSerializer,
    LeaveRequestSerializer, PermissionRequestSerializer, AdvanceSerializer, SalaryTransactionSerializer,
    InventoryPenaltySerializer, PayslipSerializer, PayslipGenerateSerializer, RejectSerializer
)
from . import services

logger = logging.getLogger(__name__)


# Records that go through a pending -> approved/rejected decision
DECISION_RECORDS = {
    'permissions': (PermissionRequest, PermissionRequestSerializer),
    'advances': (Advance, AdvanceSerializer),
    'salary-transactions': (SalaryTransaction, SalaryTransactionSerializer),
    'penalties': (InventoryPenalty, InventoryPenaltySerializer),
}


def _paginate(request, queryset, serializer_class):
    page = int(request.query_params.get('page', 1))
    limit = int(request.query_params.get('limit', 50))
    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    return {
        'results': serializer_class(page_obj, many=True).data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    }


def _self_service_data(request):
    """Request data with ``employee`` defaulting to the caller's own profile"""
    data = request.data.copy()
    profile = getattr(request.user, 'employee_profile', None)
    if not data.get('employee') and profile is not None:
        data['employee'] = profile.id
    return data


def _can_act_for(user, employee):
    """Employees may clock themselves in; anyone else needs HRMS edit access"""
    profile = getattr(user, 'employee_profile', None)
    if profile is not None and profile.pk == employee.pk:
        return True
    return has_page_permission(user, 'hrms', 'edit')


_FORBIDDEN = {'error': 'You can only record attendance for yourself.'}


# Employees
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def employee_list_create(request):
    """List employees (?status, department, search) or add one"""
    if request.method == 'GET':
        employees = EmployeeFilter(request.query_params, queryset=Employee.objects.all()).qs
        return Response(EmployeeSerializer(employees, many=True).data)

    serializer = EmployeeSerializer(data=request.data)
    if serializer.is_valid():
        employee = serializer.save(created_by=request.user)
        logger.info(f"Employee {employee.employee_code} created by {request.user.username}")
        return Response(EmployeeSerializer(employee).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def employee_detail(request, pk):
    employee = get_object_or_404(Employee, pk=pk)

    if request.method == 'GET':
        return Response(EmployeeSerializer(employee).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = EmployeeSerializer(employee, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    blocker = services.employee_delete_blocker(employee)
    if blocker:
        return Response({'error': blocker}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(
        request=request,
        action='delete',
        model_name='Employee',
        object_id=str(employee.id),
        object_name=employee.full_name,
        object_reference=employee.employee_code,
    )
    employee.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def employee_current_shift(request, pk):
    employee = get_object_or_404(Employee, pk=pk)
    on_date = parse_date_param(request.query_params.get('date'))
    assignment = services.get_employee_current_shift(employee, on_date)
    if assignment is None:
        return Response({'shift': None})
    return Response({
        'assignment': EmployeeShiftSerializer(assignment).data,
        'shift': ShiftSerializer(assignment.shift).data,
    })


# Shifts
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def shift_list_create(request):
    if request.method == 'GET':
        shifts = Shift.objects.select_related('store')
        store_id = request.query_params.get('store_id')
        if store_id:
            shifts = shifts.filter(store_id=store_id)
        if request.query_params.get('active') == 'true':
            shifts = shifts.filter(is_active=True)
        return Response(ShiftSerializer(shifts, many=True).data)

    serializer = ShiftSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def shift_detail(request, pk):
    shift = get_object_or_404(Shift, pk=pk)

    if request.method == 'GET':
        return Response(ShiftSerializer(shift).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ShiftSerializer(shift, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:
        shift.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def shift_assignment_list_create(request):
    if request.method == 'GET':
        assignments = EmployeeShift.objects.select_related('employee', 'shift', 'store')
        employee_id = request.query_params.get('employee_id')
        if employee_id:
            assignments = assignments.filter(employee_id=employee_id)
        return Response(EmployeeShiftSerializer(assignments, many=True).data)

    serializer = EmployeeShiftSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def shift_assignment_detail(request, pk):
    assignment = get_object_or_404(EmployeeShift, pk=pk)
    if request.method == 'DELETE':
        assignment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = EmployeeShiftSerializer(assignment, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Attendance
@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def attendance_list(request):
    """Attendance records (?date_from, date_to, employee_id, store_id, status), paginated"""
    queryset = Attendance.objects.select_related('employee', 'store', 'shift').prefetch_related('breaks')
    records = AttendanceFilter(request.query_params, queryset=queryset).qs
    return Response(_paginate(request, records, AttendanceSerializer))


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def attendance_detail(request, pk):
    attendance = get_object_or_404(Attendance, pk=pk)
    if request.method == 'GET':
        return Response(AttendanceSerializer(attendance).data)

    serializer = AttendanceSerializer(attendance, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save(approved_by=request.user)
        create_audit_log(
            request=request,
            action='update',
            model_name='Attendance',
            object_id=str(attendance.id),
            object_name=str(attendance),
            changes={key: str(value) for key, value in request.data.items()},
        )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def attendance_summary(request):
    records = AttendanceFilter(request.query_params, queryset=Attendance.objects.all()).qs
    return Response(services.attendance_summary(records))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def attendance_check_in(request):
    serializer = CheckInSerializer(data=_self_service_data(request))
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    if not _can_act_for(request.user, data['employee']):
        return Response(_FORBIDDEN, status=status.HTTP_403_FORBIDDEN)

    attendance = services.check_in(
        data['employee'],
        store=data.get('store'),
        shift=data.get('shift'),
        latitude=data.get('latitude'),
        longitude=data.get('longitude'),
        address=data.get('address', ''),
    )
    return Response(AttendanceSerializer(attendance).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def attendance_check_out(request):
    serializer = CheckOutSerializer(data=_self_service_data(request))
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    if not _can_act_for(request.user, data['employee']):
        return Response(_FORBIDDEN, status=status.HTTP_403_FORBIDDEN)

    attendance = services.check_out(
        data['employee'],
        latitude=data.get('latitude'),
        longitude=data.get('longitude'),
        address=data.get('address', ''),
    )
    return Response(AttendanceSerializer(attendance).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def attendance_break_start(request):
    serializer = BreakSerializer(data=_self_service_data(request))
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    if not _can_act_for(request.user, data['employee']):
        return Response(_FORBIDDEN, status=status.HTTP_403_FORBIDDEN)

    break_log = services.start_break(
        data['employee'],
        break_type=data.get('break_type'),
        latitude=data.get('latitude'),
        longitude=data.get('longitude'),
    )
    return Response(BreakLogSerializer(break_log).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def attendance_break_end(request):
    serializer = BreakSerializer(data=_self_service_data(request))
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    employee = serializer.validated_data['employee']
    if not _can_act_for(request.user, employee):
        return Response(_FORBIDDEN, status=status.HTTP_403_FORBIDDEN)

    break_log = services.end_break(employee)
    return Response(BreakLogSerializer(break_log).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def attendance_mark(request):
    """Manual entry for a day the employee did not clock in (absent, on leave...)"""
    serializer = MarkAttendanceSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    attendance = services.mark_attendance(
        data['employee'], data['attendance_date'], data['status'],
        user=request.user, notes=data.get('notes', ''), store=data.get('store'),
    )
    return Response(AttendanceSerializer(attendance).data, status=status.HTTP_201_CREATED)


# Leave
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def leave_list_create(request):
    if request.method == 'GET':
        queryset = LeaveRequest.objects.select_related('employee')
        leaves = LeaveRequestFilter(request.query_params, queryset=queryset).qs
        return Response(LeaveRequestSerializer(leaves, many=True).data)

    serializer = LeaveRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    leave = services.create_leave_request(
        data['employee'], data['leave_type'], data['start_date'], data['end_date'],
        data['reason'], is_half_day=data.get('is_half_day', False),
    )
    return Response(LeaveRequestSerializer(leave).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def leave_detail(request, pk):
    leave = get_object_or_404(LeaveRequest, pk=pk)
    return Response(LeaveRequestSerializer(leave).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def leave_approve(request, pk):
    leave = get_object_or_404(LeaveRequest, pk=pk)
    leave = services.approve_leave(leave, user=request.user)
    create_audit_log(
        request=request,
        action='leave_approve',
        model_name='LeaveRequest',
        object_id=str(leave.id),
        object_name=str(leave),
        changes={'total_days': str(leave.total_days), 'leave_type': leave.leave_type},
    )
    return Response(LeaveRequestSerializer(leave).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def leave_reject(request, pk):
    leave = get_object_or_404(LeaveRequest, pk=pk)
    serializer = RejectSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    leave = services.reject_leave(leave, user=request.user, reason=serializer.validated_data['reason'])
    create_audit_log(
        request=request,
        action='leave_reject',
        model_name='LeaveRequest',
        object_id=str(leave.id),
        object_name=str(leave),
        changes={'rejection_reason': leave.rejection_reason},
    )
    return Response(LeaveRequestSerializer(leave).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def leave_cancel(request, pk):
    leave = get_object_or_404(LeaveRequest, pk=pk)
    leave = services.cancel_leave(leave)
    return Response(LeaveRequestSerializer(leave).data)


# Permissions, advances, salary transactions and penalties
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def record_list_create(request, kind):
    model, serializer_class = DECISION_RECORDS[kind]
    if request.method == 'GET':
        records = model.objects.select_related('employee')
        employee_id = request.query_params.get('employee_id')
        if employee_id:
            records = records.filter(employee_id=employee_id)
        status_param = request.query_params.get('status')
        if status_param:
            records = records.filter(status=status_param)
        return Response(serializer_class(records, many=True).data)

    serializer = serializer_class(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def record_detail(request, kind, pk):
    model, serializer_class = DECISION_RECORDS[kind]
    record = get_object_or_404(model, pk=pk)

    if request.method == 'GET':
        return Response(serializer_class(record).data)
    if record.status != 'pending':
        return Response({'error': f"Only pending records can be changed (this one is {record.status})."},
                        status=status.HTTP_400_BAD_REQUEST)
    if request.method == 'DELETE':
        record.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = serializer_class(record, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def record_decide(request, kind, pk, decision):
    model, serializer_class = DECISION_RECORDS[kind]
    record = get_object_or_404(model, pk=pk)
    serializer = RejectSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    record = services.decide_request(
        record, approve=decision == 'approve', user=request.user, reason=serializer.validated_data['reason'],
    )
    create_audit_log(
        request=request,
        action='update',
        model_name=model.__name__,
        object_id=str(record.id),
        object_name=str(record),
        changes={'status': record.status, 'decision': decision},
    )
    return Response(serializer_class(record).data)


# Payroll
@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def payslip_list(request):
    queryset = Payslip.objects.select_related('employee')
    payslips = PayslipFilter(request.query_params, queryset=queryset).qs
    return Response(PayslipSerializer(payslips, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def payslip_detail(request, pk):
    payslip = get_object_or_404(Payslip.objects.select_related('employee'), pk=pk)
    data = PayslipSerializer(payslip).data
    data['advances'] = AdvanceSerializer(payslip.advances.all(), many=True).data
    data['penalties'] = InventoryPenaltySerializer(payslip.penalties.all(), many=True).data
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def payslip_generate(request):
    """Generate one employee's payslip, or the whole payroll when no employee is given"""
    serializer = PayslipGenerateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    month, year = data['month'], data['year']

    employee = data.get('employee')
    if employee is not None:
        payslip = services.generate_payslip(employee, month, year, user=request.user)
        create_audit_log(
            request=request,
            action='payslip_generate',
            model_name='Payslip',
            object_id=str(payslip.id),
            object_name=str(payslip),
            changes={'net_salary': str(payslip.net_salary)},
        )
        return Response(PayslipSerializer(payslip).data, status=status.HTTP_201_CREATED)

    generated, skipped = services.generate_payroll(month, year, user=request.user)
    create_audit_log(
        request=request,
        action='payslip_generate',
        model_name='Payslip',
        object_id=f"{year}-{month:02d}",
        object_name=f"Payroll {month:02d}/{year}",
        changes={'generated': len(generated), 'skipped': len(skipped)},
    )
    return Response({
        'generated': PayslipSerializer(generated, many=True).data,
        'skipped': [employee.employee_code for employee in skipped],
        'totals': services.payroll_totals(generated),
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def payslip_finalize(request, pk):
    payslip = get_object_or_404(Payslip, pk=pk)
    payslip = services.finalize_payslip(payslip)
    create_audit_log(
        request=request,
        action='payslip_finalize',
        model_name='Payslip',
        object_id=str(payslip.id),
        object_name=str(payslip),
        changes={'net_salary': str(payslip.net_salary)},
    )
    return Response(PayslipSerializer(payslip).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def payroll(request):
    """A month's payslips with gross/deduction/net totals (?month, year)"""
    serializer = PayslipGenerateSerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    payslips = (Payslip.objects.select_related('employee')
                .filter(month=serializer.validated_data['month'], year=serializer.validated_data['year']))
    return Response({
        'month': serializer.validated_data['month'],
        'year': serializer.validated_data['year'],
        'payslips': PayslipSerializer(payslips, many=True).data,
        'totals': services.payroll_totals(payslips),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, page_permission('hrms')])
def pending_requests(request):
    employee = None
    employee_id = request.query_params.get('employee_id')
    if employee_id:
        employee = get_object_or_404(Employee, pk=employee_id)
    return Response(services.pending_requests(employee))
