from django.contrib import admin
from django.urls import path, re_path, include
from core.views import EndpointNotFoundView, HealthCheckView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('users.urls')),
    path('api/projects/', include('projects.urls')),
    path('api/applications/', include('applications.urls')),
    path('api/chats/', include('chats.urls')),
    path('api/reviews/', include('reviews.urls')),
    path("api/health/", HealthCheckView.as_view(), name="health-check"),
    # last; slash-terminated so APPEND_SLASH still redirects
    re_path(r"^api/(?:.*/)?$", EndpointNotFoundView.as_view(), name="api-not-found"),
]

handler404 = "core.views.json_not_found"
handler500 = "core.views.json_server_error"
