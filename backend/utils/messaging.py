# utils/messaging.py
"""Pre-filled chat links for order confirmations.

The link is only opened by the customer's device; nothing is sent from here.
"""
import re
from typing import Optional
from urllib.parse import quote

from models.order import Order, ServiceType

WA_BASE_URL = "https://wa.me"

SERVICE_LABELS = {
    ServiceType.DINE_IN.value: "Dine in",
    ServiceType.TAKEAWAY.value: "Takeaway",
    ServiceType.DELIVERY.value: "Delivery",
    ServiceType.TABLE.value: "Table service",
}


def normalize_phone(phone: Optional[str]) -> str:
    return re.sub(r"\D", "", phone or "")


def order_message(order: Order, currency: str = "USD") -> str:
    lines = [f"Hello! I just placed order {order.order_number}.", ""]
    for item in order.items:
        extras = ", ".join(e["name"] for e in (item.extras or []))
        label = f"{item.quantity} x {item.name}"
        if extras:
            label += f" ({extras})"
        lines.append(f"- {label}: {item.subtotal:.2f}")
    lines.append("")
    lines.append(f"Service: {SERVICE_LABELS.get(order.service_type, order.service_type)}")
    if order.service_type == ServiceType.DELIVERY.value and order.delivery_address:
        addr = order.delivery_address
        lines.append(f"Address: {addr.get('street', '')} {addr.get('number', '')}, {addr.get('city', '')}".strip())
    if order.table_number:
        lines.append(f"Table: {order.table_number}")
    lines.append(f"Payment: {order.payment_method}")
    lines.append(f"Total: {order.total:.2f} {currency}")
    lines.append(f"Name: {order.customer_name}")
    return "\n".join(lines)


# Returns None when the branch has no usable number
def order_confirmation_link(phone: Optional[str], order: Order, currency: str = "USD") -> Optional[str]:
    digits = normalize_phone(phone)
    if not digits:
        return None
    return f"{WA_BASE_URL}/{digits}?text={quote(order_message(order, currency))}"
