from .base import Base
from .property import Property
from .tenant import Tenant
from .payment import Payment
from .receipt import Receipt

__all__ = [
    "Base",
    "Property",
    "Tenant",
    "Payment",
    "Receipt",
]
