from django.urls import include, path

urlpatterns = [
    path("", include("delivery_routing.urls")),
]
