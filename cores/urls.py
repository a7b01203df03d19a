from django.urls import path
from .views import HealthView, AuditLogListView

urlpatterns = [
    path('health/', HealthView.as_view(), name='health'),
    path('audit-logs/', AuditLogListView.as_view(), name='audit-logs'),
]
