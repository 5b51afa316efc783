from django.apps import AppConfig
from django.conf import settings


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.orders"
    label = "orders"

    def ready(self) -> None:
        from modules.orders.config import OrderPipelineConfig

        self.pipeline_config = OrderPipelineConfig.from_mapping(
            getattr(settings, "ORDER_PIPELINE", {})
        )
