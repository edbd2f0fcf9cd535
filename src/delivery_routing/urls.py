from django.urls import path

from delivery_routing import views

urlpatterns = [
    path("api/v1/health", views.health_view, name="health"),
    path("api/v1/distance", views.distance_view, name="distance"),
    path("api/v1/geocode", views.geocode_view, name="geocode"),
    path("api/v1/geocode/batch", views.geocode_batch_view, name="geocode-batch"),
    path("api/v1/routes/optimize", views.route_optimize_view, name="route-optimize"),
    path("api/v1/google-usage", views.google_usage_view, name="google-usage"),
]
