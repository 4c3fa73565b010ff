from django.urls import path
from . import views

app_name = 'schedule'

urlpatterns = [
    path('export.ics', views.export_ics, name='export_ics'),
    path('events/<uuid:event_id>/google/', views.google_calendar_link, name='google_calendar'),
]
