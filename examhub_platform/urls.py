from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication & current user ---
    path('api/', include('users.urls')),

    # --- Exam taking flow (before the router so session paths win) ---
    path('api/', include('assessments.urls')),

    # --- Exams & question bank ---
    path('api/', include('exams.urls')),

    # --- Health & audit ---
    path('api/', include('cores.urls')),
]
