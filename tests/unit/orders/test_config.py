import pytest
from django.apps import apps

from modules.orders.config import OrderPipelineConfig

pytestmark = pytest.mark.unit


class TestOrderPipelineConfig:
    def test_defaults(self):
        config = OrderPipelineConfig()
        assert config.reserve_stock is True
        assert config.enforce_forward_transitions is False
        assert config.reprice_from_catalog is False

    def test_from_mapping(self):
        config = OrderPipelineConfig.from_mapping(
            {
                "RESERVE_STOCK": False,
                "ENFORCE_FORWARD_TRANSITIONS": True,
                "REPRICE_FROM_CATALOG": True,
            }
        )
        assert config == OrderPipelineConfig(
            reserve_stock=False,
            enforce_forward_transitions=True,
            reprice_from_catalog=True,
        )

    def test_from_empty_mapping_uses_defaults(self):
        assert OrderPipelineConfig.from_mapping({}) == OrderPipelineConfig()

    def test_is_immutable(self):
        config = OrderPipelineConfig()
        with pytest.raises(AttributeError):
            config.reserve_stock = False

    def test_built_at_startup(self):
        config = apps.get_app_config("orders").pipeline_config
        assert isinstance(config, OrderPipelineConfig)
