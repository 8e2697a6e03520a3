"""
PMS - Lead analytics

statusCounts: non-deleted leads per status, role scoped
totalPoints:  sum of points, excluding CLOSED and DUPLICATE leads
"""

from typing import Dict, Any

from models import Actor, LeadStatus, ANALYTICS_STATUSES
from services.permissions import lead_scope
from services.store import LeadQuery


async def lead_analytics(store, actor: Actor) -> Dict[str, Any]:
    scope = lead_scope(actor)

    status_counts = {}
    for status in ANALYTICS_STATUSES:
        status_counts[status.value] = await store.leads.count(LeadQuery(**scope, status=status.value))

    total_points = await store.leads.sum_points(LeadQuery(
        **scope,
        exclude_statuses=[LeadStatus.CLOSED.value, LeadStatus.DUPLICATE.value],
    ))
    return {"statusCounts": status_counts, "totalPoints": total_points}
