"""
Catalogue of upstream endpoints and their destination tables
"""

from typing import Iterable, List, Optional

from schemas.endpoint import EndpointDescriptor, NestedTableDescriptor

ENDPOINTS: List[EndpointDescriptor] = [
    # Master data
    EndpointDescriptor(
        path="/api/client/master/customer",
        table_name="jasper_customer",
    ),
    EndpointDescriptor(
        path="/api/client/master/item",
        table_name="jasper_item",
    ),
    EndpointDescriptor(
        path="/api/client/master/item-group",
        table_name="jasper_item_group",
    ),
    EndpointDescriptor(
        path="/api/client/master/sales",
        table_name="jasper_sales",
    ),
    EndpointDescriptor(
        path="/api/client/master/warehouse",
        table_name="jasper_warehouse",
        nested_tables=[
            NestedTableDescriptor(
                nested_key="locations",
                child_table="jasper_warehouse_location",
                parent_key="warehouse_code",
            ),
        ],
    ),

    # Reports (require date_from and date_to)
    EndpointDescriptor(
        path="/api/client/report/generate/stock-balance-location-report",
        table_name="jasper_stock_balance_location_report",
        requires_date=True,
    ),
    EndpointDescriptor(
        path="/api/client/report/generate/stock-aging-location-report",
        table_name="jasper_stock_aging_location_report",
        requires_date=True,
    ),
    EndpointDescriptor(
        path="/api/client/report/generate/ar-aging-report",
        table_name="jasper_ar_aging_report",
        requires_date=True,
    ),
    EndpointDescriptor(
        path="/api/client/report/generate/sales-quote-report",
        table_name="jasper_sales_quote_report",
        requires_date=True,
    ),
    EndpointDescriptor(
        path="/api/client/report/generate/sales-order-report",
        table_name="jasper_sales_order_report",
        requires_date=True,
    ),
    EndpointDescriptor(
        path="/api/client/report/generate/sales-target-report",
        table_name="jasper_sales_target_report",
        requires_date=True,
    ),
    EndpointDescriptor(
        path="/api/client/report/generate/operational-expense-report",
        table_name="jasper_operational_expense_report",
        requires_date=True,
    ),
    EndpointDescriptor(
        path="/api/client/report/generate/margin-report",
        table_name="jasper_margin_report",
        requires_date=True,
    ),
    EndpointDescriptor(
        path="/api/client/report/generate/vehicle-service-report",
        table_name="jasper_vehicle_service_report",
        requires_date=True,
    ),

    # Transactions
    EndpointDescriptor(
        path="/api/client/transaction/purchase-receipt",
        table_name="jasper_purchase_receipt",
        nested_tables=[
            NestedTableDescriptor(
                nested_key="items",
                child_table="jasper_purchase_receipt_item",
                parent_key="purchase_receipt_no",
            ),
        ],
    ),
]

# Shared across offices, fetched once rather than per office code
SHARED_TABLES = ("jasper_item", "jasper_item_group")


def filter_endpoints(
    endpoints: Iterable[EndpointDescriptor],
    name_filter: Optional[str] = None
) -> List[EndpointDescriptor]:
    """Keep endpoints whose table name contains ``name_filter``"""
    if not name_filter:
        return list(endpoints)
    return [e for e in endpoints if name_filter in e.table_name]
