"""
Pydantic schemas for configuration and API serialization.

Schemas:
    endpoint: Endpoint and nested-table descriptors (static configuration)
    api: Operations API response models

Usage:
    from schemas.endpoint import EndpointDescriptor, NestedTableDescriptor
    from schemas.api import HealthCheckResponse, TablesResponse

Example:
    endpoint = EndpointDescriptor(
        path="/api/client/master/warehouse",
        table_name="jasper_warehouse",
        nested_tables=[
            NestedTableDescriptor(
                nested_key="locations",
                child_table="jasper_warehouse_location",
                parent_key="warehouse_code",
            )
        ],
    )

    # Descriptors are frozen once loaded
    assert endpoint.nested_tables[0].parent_column == "_parent_warehouse_code"
"""

__all__ = [
    "EndpointDescriptor",
    "NestedTableDescriptor",
    "HealthCheckResponse",
    "TablesResponse",
    "EndpointsResponse",
]
