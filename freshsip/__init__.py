"""FreshSip delivery backend: order lifecycle for QuickSip and FreshPlan orders."""
__version__ = "1.0.0"
