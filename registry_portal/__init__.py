"""
Property Registry Portal - Source Package

A customer portal for property-registry clients and admins.
Presents plot ownership and payment-ledger data derived from
the registry's ERP export, plus AI summaries of a portfolio.

DESIGN PRINCIPLES:
1. The ledger engine is pure: same input, same output
2. Authoritative ERP figures are shown, never "corrected"
3. Malformed dates degrade to "no date", never to an error
4. AI is a narrator of registry data, not a source of it
5. Every render pass is auditable
"""

__version__ = "1.0.0"
__author__ = "Property Registry Portal Team"
