# storefront/routers/analytics.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_permission
from storefront.database import get_session
from storefront.repositories.stats_repo import StatsRepository
from storefront.schemas.stats import DashboardStats
from storefront.services.stats_service import StatsService

router = APIRouter(prefix="/admin/stats", tags=["Analytics"])

repo = StatsRepository()
service = StatsService(repo)


@router.get(
    "",
    response_model=DashboardStats,
    dependencies=[Depends(require_permission("view_analytics"))],
)
def get_dashboard_stats(
    top: int = 5,
    latest: int = 5,
    session: Session = Depends(get_session),
):
    """
    Aggregated statistics for the analytics dashboard.

    Query params (optional):
      - top: number of best-selling products to return
      - latest: number of most recent orders to return

    Requires the view_analytics permission (superadmin by default).
    """
    return service.get_dashboard_stats(
        session=session,
        top_n_products=top,
        latest_n_orders=latest,
    )
