# hm_ipd/common/apps.py
from django.apps import AppConfig


class CommonConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hm_ipd.common"

    def ready(self):
        # Registers the OpenAPI auth extension with drf-spectacular
        import hm_ipd.common.openapi  # noqa: F401
