"""URL configuration for Caseload.

Case managers work through the client detail session in
``apps.scheduling.session``; the admin site is the only HTML surface.
"""
from django.contrib import admin
from django.urls import path
from django.views.generic import RedirectView

admin.site.site_header = "Caseload"
admin.site.site_title = "Caseload"

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", RedirectView.as_view(url="/admin/", permanent=False)),
]
