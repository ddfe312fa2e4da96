"""
Wall App Configuration
"""
from django.apps import AppConfig


class WallConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'wall'
    verbose_name = 'Campus Wall'

    def ready(self):
        # Import signals when app is ready
        import wall.signals  # noqa
