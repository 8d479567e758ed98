# backend/services/checkout.py
"""Multi-step checkout wizard turning a cart into an order.

Steps run strictly in order: service -> customer -> payment -> summary.
Each step has a guard; the flow only advances when the guard passes.
"""
import enum
import logging
from dataclasses import dataclass, field, fields, replace
from typing import List, Optional

from sqlalchemy.orm import Session

from models.order import Order, ServiceType
from models.tenant import Branch
from services.cart import Cart
from services.errors import ValidationFailed
from services import orders as order_service

logger = logging.getLogger(__name__)


class CheckoutStep(str, enum.Enum):
    SERVICE = "service"
    CUSTOMER = "customer"
    PAYMENT = "payment"
    SUMMARY = "summary"


STEPS = [CheckoutStep.SERVICE, CheckoutStep.CUSTOMER, CheckoutStep.PAYMENT, CheckoutStep.SUMMARY]


@dataclass
class CustomerInfo:
    name: str = ""
    phone: str = ""
    email: Optional[str] = None


@dataclass
class CheckoutState:
    service_type: Optional[str] = None
    customer: CustomerInfo = field(default_factory=CustomerInfo)
    delivery_address: Optional[dict] = None
    table_number: Optional[str] = None
    payment_method: Optional[str] = None
    needs_change: bool = False
    cash_amount: Optional[float] = None
    tip: float = 0.0
    discount: float = 0.0
    notes: Optional[str] = None


class CheckoutFlow:
    def __init__(self, cart: Cart, branch: Optional[Branch] = None):
        self.cart = cart
        self.branch = branch
        self.state = CheckoutState()
        self.step_index = 0

    @property
    def step(self) -> CheckoutStep:
        return STEPS[self.step_index]

    @property
    def available_services(self) -> List[str]:
        if self.branch is None:
            return [s.value for s in ServiceType]
        return list(self.branch.service_types or [])

    @property
    def available_payment_methods(self) -> Optional[List[str]]:
        # None means any method is accepted
        if self.branch is None:
            return None
        return list(self.branch.payment_methods or [])

    def update(self, **changes) -> CheckoutState:
        known = {f.name for f in fields(CheckoutState)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown checkout fields: {', '.join(sorted(unknown))}")

        if "payment_method" in changes and changes["payment_method"] != "cash":
            # Cash specific fields only make sense for cash payments
            changes.setdefault("needs_change", False)
            changes.setdefault("cash_amount", None)
        if changes.get("needs_change") is False:
            changes.setdefault("cash_amount", None)

        self.state = replace(self.state, **changes)
        return self.state

    def reset(self) -> None:
        self.state = CheckoutState()
        self.step_index = 0

    def totals(self) -> dict:
        return order_service.compute_totals(
            self.cart.items,
            service_type=self.state.service_type or "",
            tax_rate=self.branch.tax_rate if self.branch else 0.0,
            delivery_fee=self.branch.delivery_fee if self.branch else 0.0,
            discount=self.state.discount,
            tip=self.state.tip,
        )

    # --- guards -----------------------------------------------------------

    def _service_problems(self) -> List[str]:
        service_type = self.state.service_type
        if not service_type:
            return ["service_type"]
        if service_type not in self.available_services:
            return ["service_type"]
        return []

    def _customer_problems(self) -> List[str]:
        problems = []
        if not self.state.customer.name.strip():
            problems.append("customer.name")
        if not self.state.customer.phone.strip():
            problems.append("customer.phone")
        if self.state.service_type == ServiceType.DELIVERY.value:
            problems.extend(order_service.missing_address_fields(self.state.delivery_address))
        if self.state.service_type == ServiceType.TABLE.value and not (self.state.table_number or "").strip():
            problems.append("table_number")
        return problems

    def _payment_problems(self) -> List[str]:
        method = self.state.payment_method
        if not method:
            return ["payment_method"]
        methods = self.available_payment_methods
        if methods is not None and method not in methods:
            return ["payment_method"]
        if method == "cash" and self.state.needs_change:
            cash = self.state.cash_amount
            if cash is None or cash < self.totals()["total"]:
                return ["cash_amount"]
        return []

    _GUARDS = {
        CheckoutStep.SERVICE: "_service_problems",
        CheckoutStep.CUSTOMER: "_customer_problems",
        CheckoutStep.PAYMENT: "_payment_problems",
    }

    def problems(self, step: Optional[CheckoutStep] = None) -> List[str]:
        guard = self._GUARDS.get(step or self.step)
        return getattr(self, guard)() if guard else []

    def can_proceed(self) -> bool:
        return not self.problems()

    # --- navigation -------------------------------------------------------

    def next(self) -> CheckoutStep:
        problems = self.problems()
        if problems:
            raise ValidationFailed(
                f"Cannot leave step '{self.step.value}': missing or invalid {', '.join(problems)}",
                step=self.step.value,
                missing=problems,
            )
        if self.step_index < len(STEPS) - 1:
            self.step_index += 1
        return self.step

    def back(self) -> CheckoutStep:
        if self.step_index > 0:
            self.step_index -= 1
        return self.step

    def place_order(self, db: Session, branch: Optional[Branch] = None) -> Order:
        """Persist the order, then clear the cart and reset the flow.

        On any failure the flow keeps its step and state and nothing is written.
        """
        branch = branch or self.branch
        if branch is None:
            raise ValueError("A branch is required to place an order")
        if self.step != CheckoutStep.SUMMARY:
            raise ValidationFailed("Checkout is not complete", step=self.step.value)
        if self.cart.is_empty():
            raise ValidationFailed("Cart is empty", step=self.step.value)
        for step in STEPS[:-1]:
            problems = self.problems(step)
            if problems:
                raise ValidationFailed(
                    f"Checkout data changed: missing or invalid {', '.join(problems)}",
                    step=step.value,
                    missing=problems,
                )

        state = self.state
        try:
            order = order_service.create_order(
                db,
                branch,
                lines=self.cart.items,
                service_type=state.service_type,
                customer_name=state.customer.name,
                customer_phone=state.customer.phone,
                customer_email=state.customer.email,
                delivery_address=state.delivery_address,
                table_number=state.table_number,
                payment_method=state.payment_method,
                cash_amount=state.cash_amount if state.needs_change else None,
                discount=state.discount,
                tip=state.tip,
                notes=state.notes,
            )
        except Exception:
            db.rollback()
            logger.exception("Placing order failed for branch %s", branch.id)
            raise

        self.cart.clear()
        self.reset()
        return order
