from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/user/', include('src.accounts.urls')),
    path('api/listing/', include('src.listings.urls')),
    path('api/listing/', include('src.engagement.urls')),
]
