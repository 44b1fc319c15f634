# config/urls.py
from django.contrib import admin
from django.urls import include, path

from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path("admin/", admin.site.urls),

    # OpenAPI
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),

    # Primary versioned API
    path("api/v1/", include("clinic_core.api.urls")),

    # Backwards-compatible alias
    path("api/", include(("clinic_core.api.urls", "legacy"), namespace="legacy")),
]
