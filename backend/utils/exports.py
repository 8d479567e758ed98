# utils/exports.py
from io import StringIO
from typing import Iterable

import pandas as pd
from fastapi.responses import StreamingResponse

from models.finance import Expense
from models.order import Order

ORDER_COLUMNS = [
    "order_number", "created_at", "status", "service_type", "customer_name", "customer_phone",
    "payment_method", "payment_status", "subtotal", "tax", "delivery_fee", "discount", "tip", "total",
]
EXPENSE_COLUMNS = ["id", "date", "category", "description", "amount", "payment_method", "status", "notes"]


def orders_frame(orders: Iterable[Order]) -> pd.DataFrame:
    rows = []
    for order in orders:
        row = {col: getattr(order, col) for col in ORDER_COLUMNS}
        row["items"] = "; ".join(f"{i.quantity} x {i.name}" for i in order.items)
        rows.append(row)
    return pd.DataFrame(rows, columns=ORDER_COLUMNS + ["items"])


def expenses_frame(expenses: Iterable[Expense]) -> pd.DataFrame:
    rows = [{col: getattr(e, col) for col in EXPENSE_COLUMNS} for e in expenses]
    return pd.DataFrame(rows, columns=EXPENSE_COLUMNS)


def csv_response(df: pd.DataFrame, filename: str) -> StreamingResponse:
    buffer = StringIO()
    df.to_csv(buffer, index=False)
    buffer.seek(0)
    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
