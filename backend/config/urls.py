from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('user.urls')),
    path('api/', include('locations.urls')),
    path('api/', include('businesses.urls')),
    path('api/', include('recommendations.urls')),
]
