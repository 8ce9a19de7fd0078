from django.apps import AppConfig


class HrmsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'shopdesk.hrms'
    verbose_name = 'HR & Payroll'
