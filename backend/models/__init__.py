from models.app_config import AppConfig
from models.audit_log import AuditLog
from models.categories import Category
from models.providers import Provider
from models.customers import Customer, CustomerInventory, CustomerInventoryItem
from models.inventory_items import InventoryItem
from models.inventory_item_audit import InventoryItemAudit
from models.orders import Order, OrderStatus
from models.order_items import OrderItem
from models.provider_orders import ProviderOrder, ProviderOrderStatus
from models.provider_order_items import ProviderOrderItem
from models.units import Unit

__all__ = ['AppConfig', 'AuditLog', 'Category', 'Customer', 'CustomerInventory', 'CustomerInventoryItem', 'InventoryItem', 'InventoryItemAudit', 'Order', 'OrderItem', 'OrderStatus', 'Provider', 'ProviderOrder', 'ProviderOrderItem', 'ProviderOrderStatus', 'Unit',]
