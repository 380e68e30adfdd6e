"""
Proxy-bidding intermediation service.

Customers submit maximum-bid instructions on auction lots and pay a service
fee plus a refundable deposit; employees bid on their behalf and move each bid
through its lifecycle; super admins manage employee accounts.
"""

__version__ = "0.1.0"
