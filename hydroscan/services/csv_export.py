# hydroscan/services/csv_export.py
"""
Sales report CSV, one block per date:

    DATE:,MM/DD/YYYY
    <blank>
    CUSTOMER,PRODUCT,UOM,QTY,TOTAL
    <one row per order item>
    <blank>
    Total Revenue:,<amount>
    Total UOM:,<sum>
    <blank>

Total Revenue is gross: the sum of the printed line totals, before any
HydroCoin discount. Daily summaries report the net order totals instead,
so the two differ for orders paid partly with coins.
"""
import csv
import io
from datetime import date
from itertools import groupby

from sqlalchemy.orm import Session

from hydroscan.data.models.order import OrderModel
from hydroscan.domain.enums import OrderStatus, ProductCategory
from hydroscan.domain.errors import ValidationError
from hydroscan.domain.money import format_money
from hydroscan.domain.products import Uom
from hydroscan.domain.session import SessionContext
from hydroscan.repos.order_repo import OrderRepo
from hydroscan.services.pricing_catalog import PricingCatalog

HEADER = ["CUSTOMER", "PRODUCT", "UOM", "QTY", "TOTAL"]
NO_UOM = "N/A"


def export_uom(item) -> str:
    if item.category.is_accessory:
        return NO_UOM
    if item.category is ProductCategory.NEW_GALLON:
        return f"{Uom.parse(item.uom).liters or 20}L"
    return f"{Uom.parse(item.uom).liters}L"


def write_date_block(writer, day: date, orders: list[OrderModel]) -> None:
    """Writes one date block. Revenue is summed from the rows written, before discounts."""
    writer.writerow(["DATE:", day.strftime("%m/%d/%Y")])
    writer.writerow([])
    writer.writerow(HEADER)

    revenue = 0
    units = 0
    for order in orders:
        for item in order.items:
            uom = export_uom(item)
            line_total = item.quantity * item.unit_price_centavos
            revenue += line_total
            if uom != NO_UOM:
                units += Uom.parse(item.uom).numeric_value * item.quantity
            writer.writerow([
                item.recipient_name,
                PricingCatalog.export_label(item.variant),
                uom,
                item.quantity,
                format_money(line_total),
            ])

    writer.writerow([])
    writer.writerow(["Total Revenue:", format_money(revenue)])
    writer.writerow(["Total UOM:", units])
    writer.writerow([])


def export_orders_csv(orders: list[OrderModel]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    ordered = sorted(orders, key=lambda o: (o.order_date, o.id or 0))
    for day, group in groupby(ordered, key=lambda o: o.order_date):
        write_date_block(writer, day, list(group))
    return buf.getvalue()


class CsvExportService:
    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def export_range(self, ctx: SessionContext, start: date, end: date) -> str:
        owner_id = ctx.require_user()
        if end < start:
            raise ValidationError("End date must not be before start date")
        orders = self.repo.orders_between(owner_id, start, end, exclude_status=OrderStatus.CANCELLED)
        return export_orders_csv(orders)
