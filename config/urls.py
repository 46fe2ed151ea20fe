# File: config/urls.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Timeflow"
admin.site.index_title = "Dashboard"

urlpatterns = [
    path('i18n/', include('django.conf.urls.i18n')),
    path('admin/', admin.site.urls),
]
