# storefront/services/stats_service.py
from sqlmodel import Session

from storefront.core.pricing import ZERO, round_money, to_money
from storefront.repositories.stats_repo import StatsRepository
from storefront.schemas.stats import (
    DashboardStats,
    LatestOrderSummary,
    TopProduct,
)


def _money(value) -> float:
    return float(round_money(to_money(value or 0)))


class StatsService:
    """
    Builds the analytics dashboard (view_analytics).
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_dashboard_stats(
        self,
        session: Session,
        top_n_products: int = 5,
        latest_n_orders: int = 5,
    ) -> DashboardStats:
        by_status = self.repo.orders_by_status(session)
        billable, revenue = self.repo.revenue(session)
        revenue = round_money(to_money(revenue))
        average = round_money(revenue / billable) if billable else ZERO

        top_products = [
            TopProduct(
                product_id=product_id,
                name=name,
                total_quantity=int(units or 0),
                total_revenue=_money(product_revenue),
            )
            for product_id, name, units, product_revenue in self.repo.best_sellers(
                session, limit=top_n_products
            )
        ]

        latest_orders = [
            LatestOrderSummary.model_validate(o, from_attributes=True)
            for o in self.repo.recent_orders(session, limit=latest_n_orders)
        ]

        return DashboardStats(
            total_customers=self.repo.customer_count(session),
            total_orders=sum(by_status.values()),
            orders_by_status=by_status,
            total_revenue=float(revenue),
            average_order_value=float(average),
            top_products=top_products,
            latest_orders=latest_orders,
        )
