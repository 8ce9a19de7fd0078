from django.urls import path
from . import views

urlpatterns = [
    path('hrms/employees/', views.employee_list_create, name='employee-list-create'),
    path('hrms/employees/<int:pk>/', views.employee_detail, name='employee-detail'),
    path('hrms/employees/<int:pk>/current-shift/', views.employee_current_shift, name='employee-current-shift'),
    path('hrms/shifts/', views.shift_list_create, name='shift-list-create'),
    path('hrms/shifts/<int:pk>/', views.shift_detail, name='shift-detail'),
    path('hrms/shift-assignments/', views.shift_assignment_list_create, name='shift-assignment-list-create'),
    path('hrms/shift-assignments/<int:pk>/', views.shift_assignment_detail, name='shift-assignment-detail'),

    path('hrms/attendance/', views.attendance_list, name='attendance-list'),
    path('hrms/attendance/summary/', views.attendance_summary, name='attendance-summary'),
    path('hrms/attendance/check-in/', views.attendance_check_in, name='attendance-check-in'),
    path('hrms/attendance/check-out/', views.attendance_check_out, name='attendance-check-out'),
    path('hrms/attendance/break/start/', views.attendance_break_start, name='attendance-break-start'),
    path('hrms/attendance/break/end/', views.attendance_break_end, name='attendance-break-end'),
    path('hrms/attendance/mark/', views.attendance_mark, name='attendance-mark'),
    path('hrms/attendance/<int:pk>/', views.attendance_detail, name='attendance-detail'),

    path('hrms/leaves/', views.leave_list_create, name='leave-list-create'),
    path('hrms/leaves/<int:pk>/', views.leave_detail, name='leave-detail'),
    path('hrms/leaves/<int:pk>/approve/', views.leave_approve, name='leave-approve'),
    path('hrms/leaves/<int:pk>/reject/', views.leave_reject, name='leave-reject'),
    path('hrms/leaves/<int:pk>/cancel/', views.leave_cancel, name='leave-cancel'),

    path('hrms/payslips/', views.payslip_list, name='payslip-list'),
    path('hrms/payslips/generate/', views.payslip_generate, name='payslip-generate'),
    path('hrms/payslips/<int:pk>/', views.payslip_detail, name='payslip-detail'),
    path('hrms/payslips/<int:pk>/finalize/', views.payslip_finalize, name='payslip-finalize'),
    path('hrms/payroll/', views.payroll, name='payroll'),
    path('hrms/pending/', views.pending_requests, name='hrms-pending-requests'),
]

for kind in views.DECISION_RECORDS:
    urlpatterns += [
        path(f'hrms/{kind}/', views.record_list_create, {'kind': kind}, name=f'{kind}-list-create'),
        path(f'hrms/{kind}/<int:pk>/', views.record_detail, {'kind': kind}, name=f'{kind}-detail'),
        path(f'hrms/{kind}/<int:pk>/approve/', views.record_decide, {'kind': kind, 'decision': 'approve'},
             name=f'{kind}-approve'),
        path(f'hrms/{kind}/<int:pk>/reject/', views.record_decide, {'kind': kind, 'decision': 'reject'},
             name=f'{kind}-reject'),
    ]
