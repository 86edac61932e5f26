"""
Standardized pagination parameters for the read endpoints.
"""

from fastapi import Query
from typing import Annotated

PaginationSkip = Annotated[int, Query(ge=0, description="Number of records to skip")]

# Sanction history of a single user
PaginationLimit = Annotated[
    int, Query(ge=1, le=100, description="Maximum number of records to return")
]

# Audit log browsing (admin panels)
PaginationLimitLarge = Annotated[
    int, Query(ge=1, le=200, description="Maximum number of records to return")
]
