"""
Product Pricing Package

Configuration and pricing calculation engine for catalog products.
Resolves unit price and cost through Strategy → Modifiers → Validation,
with rounding, quantity extension and margin for quotation line items.
"""

__version__ = "1.0.0"
