from purchase_records.models.purchase_order import PurchaseOrder

__all__ = ["PurchaseOrder"]
