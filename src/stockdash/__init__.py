"""StockDash: reporting core for the inventory and sales dashboard."""
__version__ = "1.0.0"
