"""
URL configuration for the election ledger project.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # Everything under 'api/v1/' is the ledger API.
    path('api/v1/', include('ledger_api.urls')),
]
