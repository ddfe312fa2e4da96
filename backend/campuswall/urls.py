"""
Campus Wall URL Configuration
"""
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def api_root(request):
    """Root endpoint with API information."""
    return JsonResponse({
        'message': 'Campus Wall API Server',
        'version': '1.0',
        'endpoints': {
            'posts': '/api/v1/posts/',
            'post': '/api/v1/posts/<id>/',
            'comments': '/api/v1/posts/<id>/comments/',
            'likes': '/api/v1/posts/<id>/likes/',
            'auth': '/api/v1/auth/',
        },
        'admin': '/admin/',
    })


urlpatterns = [
    path('', api_root, name='api-root'),
    path('admin/', admin.site.urls),
    path('api/v1/', include('wall.urls')),
]
