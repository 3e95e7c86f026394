# =============================================================================
# core/bookings.py  —  Microsoft Bookings read operations
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Maps each Bookings question onto one Graph resource path and returns the
#   response's "value" array untouched.  Only the first page is returned.
#
#     list_businesses    → /solutions/bookingBusinesses
#     list_staff         → /solutions/bookingBusinesses/{id}/staffMembers
#     list_services      → /solutions/bookingBusinesses/{id}/services
#     list_appointments  → /solutions/bookingBusinesses/{id}/appointments
#                          (+ optional $filter on start/end)
# =============================================================================

from typing import Any, Optional
from urllib.parse import quote

from core.graph import GraphClient

BUSINESSES_PATH = "/solutions/bookingBusinesses"


def _segment(business_id: str) -> str:
    # Business ids look like mailbox addresses; keep "@", escape "/", "?", "#".
    return quote(business_id, safe="@")


def staff_path(business_id: str) -> str:
    return f"{BUSINESSES_PATH}/{_segment(business_id)}/staffMembers"


def services_path(business_id: str) -> str:
    return f"{BUSINESSES_PATH}/{_segment(business_id)}/services"


def appointments_path(business_id: str) -> str:
    return f"{BUSINESSES_PATH}/{_segment(business_id)}/appointments"


def build_appointment_filter(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Optional[str]:
    """Build the OData filter for an appointment date range.

    Examples:
        ("2024-01-01", "2024-01-31") → "start ge 2024-01-01 and end le 2024-01-31"
        ("2024-01-01", None)         → "start ge 2024-01-01"
        (None, None)                 → None
    """
    clauses = []
    if start_date:
        clauses.append(f"start ge {start_date}")
    if end_date:
        clauses.append(f"end le {end_date}")
    return " and ".join(clauses) or None


async def list_businesses(graph: GraphClient) -> Any:
    response = await graph.get(BUSINESSES_PATH)
    return response.get("value")


async def list_staff(graph: GraphClient, business_id: str) -> Any:
    response = await graph.get(staff_path(business_id))
    return response.get("value")


async def list_services(graph: GraphClient, business_id: str) -> Any:
    response = await graph.get(services_path(business_id))
    return response.get("value")


async def list_appointments(
    graph: GraphClient,
    business_id: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Any:
    response = await graph.get(
        appointments_path(business_id),
        filter=build_appointment_filter(start_date, end_date),
    )
    return response.get("value")
