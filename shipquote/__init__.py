"""
ShipQuote - multi-carrier freight quote aggregation and provider health.
"""

__version__ = "1.0.0"
