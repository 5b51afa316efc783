"""Runtime configuration of the order pipeline.

Built once at startup by ``OrdersConfig.ready()`` from the
``ORDER_PIPELINE`` Django setting and handed to ``OrderService`` through
its constructor.  Services never look settings up on their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class OrderPipelineConfig:
    """Switches for the pipeline's open policy decisions.

    - ``reserve_stock``: decrement stock inside the creation transaction
      and give it back on cancellation.
    - ``enforce_forward_transitions``: reject admin transitions that leave
      the forward-only graph in ``VALID_TRANSITIONS``.
    - ``reprice_from_catalog``: ignore caller-supplied unit prices and use
      the catalog price read inside the creation transaction.
    """

    reserve_stock: bool = True
    enforce_forward_transitions: bool = False
    reprice_from_catalog: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> OrderPipelineConfig:
        defaults = cls()
        return cls(
            reserve_stock=bool(data.get("RESERVE_STOCK", defaults.reserve_stock)),
            enforce_forward_transitions=bool(
                data.get(
                    "ENFORCE_FORWARD_TRANSITIONS",
                    defaults.enforce_forward_transitions,
                )
            ),
            reprice_from_catalog=bool(
                data.get("REPRICE_FROM_CATALOG", defaults.reprice_from_catalog)
            ),
        )
