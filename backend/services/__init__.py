from services.inventory_ledger import InventoryLedger, LedgerChange
from services.order_validator import OrderValidator, OrderDraft, StockWarning
from services.order_lifecycle import OrderLifecycle, OrderCreated
from services.restock_planner import RestockPlanner, RestockSummary
from services.provider_orders import ProviderOrderService

__all__ = [
    "InventoryLedger",
    "LedgerChange",
    "OrderValidator",
    "OrderDraft",
    "StockWarning",
    "OrderLifecycle",
    "OrderCreated",
    "RestockPlanner",
    "RestockSummary",
    "ProviderOrderService",
]
