from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


UNKNOWN_PATTERN = "unknown"
MIXED_PATTERN = "mixed"

DETECTION_THRESHOLD = 0.3
KEYWORD_WEIGHT = 0.1
REQUIRED_FIELDS_WEIGHT = 0.7


@dataclass(frozen=True)
class PatternDefinition:
    name: str
    keywords: tuple[str, ...]
    required_fields: tuple[str, ...]
    confidence: float


_PATTERN_LIST: tuple[PatternDefinition, ...] = (
    PatternDefinition(
        name="sales",
        keywords=("hotel", "sale", "quantity", "rate", "amount", "total", "customer", "delivery", "charcoal"),
        required_fields=("hotelName", "quantity", "ratePerKg", "totalAmount"),
        confidence=0.8,
    ),
    PatternDefinition(
        name="purchases",
        keywords=("supplier", "purchase", "buy", "quantity", "rate", "amount", "invoice", "vendor"),
        required_fields=("supplierName", "quantity", "ratePerKg", "totalAmount"),
        confidence=0.8,
    ),
    PatternDefinition(
        name="companies",
        keywords=("company", "business", "organization", "code", "contact", "phone", "email", "address"),
        required_fields=("name", "code"),
        confidence=0.9,
    ),
    PatternDefinition(
        name="suppliers",
        keywords=("supplier", "vendor", "provider", "code", "contact", "phone", "email", "address"),
        required_fields=("name", "code"),
        confidence=0.9,
    ),
    PatternDefinition(
        name="hotels",
        keywords=("hotel", "resort", "restaurant", "customer", "client", "contact", "phone", "email"),
        required_fields=("name", "contactPerson"),
        confidence=0.9,
    ),
    PatternDefinition(
        name="payments",
        keywords=("payment", "paid", "amount", "date", "reference", "transaction", "receipt"),
        required_fields=("totalAmount", "date"),
        confidence=0.7,
    ),
)

# Iteration order is the tie-break order for pattern detection.
PATTERNS: Mapping[str, PatternDefinition] = MappingProxyType({p.name: p for p in _PATTERN_LIST})


# canonical field -> header variants, most specific first
COLUMN_ALIASES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        # sales
        "hotelName": ("hotel name", "hotel", "customer name", "customer", "client name", "client"),
        "quantity": ("quantity", "qty", "amount", "kg", "kilograms", "weight"),
        "ratePerKg": ("rate per kg", "rate", "price per kg", "unit price", "cost per kg"),
        "totalAmount": ("total amount", "total", "amount", "value", "price", "cost"),
        "date": ("date", "delivery date", "sale date", "transaction date"),
        "paymentStatus": ("payment status", "status", "payment", "paid"),
        "paymentDate": ("payment date", "paid date", "payment received"),
        "paymentAmount": ("payment amount", "paid amount", "received amount"),
        # companies / suppliers / hotels
        "name": ("name", "company name", "business name", "supplier name", "hotel name"),
        "code": ("code", "company code", "business code", "supplier code", "hotel code", "id"),
        "contactPerson": ("contact person", "contact", "representative", "manager"),
        "phone": ("phone", "mobile", "contact number", "telephone"),
        "email": ("email", "email address", "contact email"),
        "address": ("address", "location", "full address", "street address"),
        "taxId": ("tax id", "gst number", "tax number", "vat number"),
        # purchases
        "supplierName": ("supplier name", "supplier", "vendor name", "vendor"),
        "invoiceNumber": ("invoice number", "invoice", "bill number", "reference"),
        # general
        "notes": ("notes", "remarks", "comments", "description"),
        "isActive": ("active", "status", "is active", "enabled"),
    }
)


def aliases_for(field: str) -> tuple[str, ...]:
    """Header variants for a canonical field; a field without an entry matches its own name."""

    return COLUMN_ALIASES.get(field) or (field,)


__all__ = [
    "COLUMN_ALIASES",
    "DETECTION_THRESHOLD",
    "KEYWORD_WEIGHT",
    "MIXED_PATTERN",
    "PATTERNS",
    "PatternDefinition",
    "REQUIRED_FIELDS_WEIGHT",
    "UNKNOWN_PATTERN",
    "aliases_for",
]
