"""Streamlit dashboard entry point."""

from datetime import date
from decimal import Decimal

import altair as alt
import streamlit as st

from cashplan.domain.errors import ValidationError
from cashplan.domain.models import BalanceIndicators, MonthView, Period
from cashplan.infrastructure.container import build_cashflow_service
from cashplan.infrastructure.settings import CashplanSettings

# Upper bound on how long changes made outside this process stay hidden.
CACHE_TTL_SECONDS = 60


def _fetch_month(owner_id: str, period_key: str) -> MonthView:
    """Fetch the merged month view."""
    service = build_cashflow_service()
    return service.for_month(owner_id, Period.parse(period_key))


@st.cache_data(ttl=CACHE_TTL_SECONDS, show_spinner=False)
def _load_month(owner_id: str, period_key: str) -> MonthView:
    """Cached wrapper around _fetch_month for Streamlit sessions."""
    return _fetch_month(owner_id, period_key)


def _fetch_projection(
    owner_id: str,
    start_key: str,
    months: int,
) -> list[BalanceIndicators]:
    """Fetch chained indicators for consecutive months."""
    service = build_cashflow_service()
    return service.project_months(owner_id, Period.parse(start_key), months)


@st.cache_data(ttl=CACHE_TTL_SECONDS, show_spinner=False)
def _load_projection(
    owner_id: str,
    start_key: str,
    months: int,
) -> list[BalanceIndicators]:
    """Cached wrapper around _fetch_projection."""
    return _fetch_projection(owner_id, start_key, months)


def _format_currency(value: Decimal) -> str:
    """Format currency values for display."""
    return f"{value:,.2f}"


def _format_rate(value: Decimal) -> str:
    return f"{value * Decimal('100'):.2f}%"


def _month_rows(view: MonthView) -> list[dict]:
    """Convert the month view into dataframe rows."""
    return [
        {
            "Date": row.entry_date.isoformat(),
            "Description": row.description,
            "Kind": row.kind.value,
            "Status": "projected" if row.is_virtual else row.status.value,
            "Amount": float(row.signed_amount),
            "Category": row.category_name or "—",
            "Account": row.account_name or row.card_name or "—",
            "Covered by invoice": row.covered_by_invoice_id or "",
        }
        for row in view
    ]


def _projection_chart_data(
    projection: list[BalanceIndicators],
) -> list[dict]:
    """Return long-form rows for the projection chart."""
    data = []
    for item in projection:
        data.append(
            {
                "period": item.period.key,
                "series": "Income",
                "amount": float(item.total_income),
            }
        )
        data.append(
            {
                "period": item.period.key,
                "series": "Expense",
                "amount": float(-item.total_expense),
            }
        )
    return data


def _render_projection_chart(projection: list[BalanceIndicators]) -> None:
    """Render income and expense bars with the projected end balance."""
    if not projection:
        st.info("Nothing to project.")
        return
    bars = alt.Chart(
        alt.Data(values=_projection_chart_data(projection))
    ).mark_bar().encode(
        x=alt.X("period:N", title="Month"),
        y=alt.Y("amount:Q", title="Amount"),
        color=alt.Color(
            "series:N",
            scale=alt.Scale(
                domain=["Income", "Expense"],
                range=["#2E7D32", "#C62828"],
            ),
        ),
        tooltip=[alt.Tooltip("series:N"), alt.Tooltip("amount:Q")],
    )
    balance = alt.Chart(
        alt.Data(
            values=[
                {
                    "period": item.period.key,
                    "balance": float(item.projected_end_balance),
                }
                for item in projection
            ]
        )
    ).mark_line(point=True, color="#1565C0").encode(
        x="period:N",
        y="balance:Q",
        tooltip=[alt.Tooltip("balance:Q", title="End balance")],
    )
    st.subheader("Projection")
    st.altair_chart(alt.layer(bars, balance), width="stretch")


def _render_indicators(indicators: BalanceIndicators) -> None:
    income_col, expense_col, flow_col, rate_col = st.columns(4)
    income_col.metric("Income", _format_currency(indicators.total_income))
    expense_col.metric("Expense", _format_currency(indicators.total_expense))
    flow_col.metric(
        "Net flow",
        _format_currency(indicators.net_flow),
        f"end {_format_currency(indicators.projected_end_balance)}",
    )
    rate_col.metric("Savings rate", _format_rate(indicators.savings_rate))


def _selected_period(raw: str) -> Period:
    try:
        return Period.parse(raw)
    except ValidationError as exc:
        st.warning(str(exc))
        return Period.from_date(date.today())


def main() -> None:
    """Render the Streamlit app."""
    st.set_page_config(page_title="Cashplan", layout="wide")
    st.title("Cashplan")
    settings = CashplanSettings.from_env()

    page = st.sidebar.selectbox("Page", ["Month", "Projection"])
    period = _selected_period(
        st.sidebar.text_input(
            "Month (YYYY-MM)",
            value=Period.from_date(date.today()).key,
        )
    )

    if page == "Month":
        view = _load_month(settings.owner_id, period.key)
        projection = _load_projection(settings.owner_id, period.key, 1)
        if projection:
            _render_indicators(projection[0])
        if view.partial:
            st.warning("Some data could not be loaded; totals are partial.")
        st.caption(f"{len(view)} transactions in {period}")
        st.dataframe(_month_rows(view), width="stretch", hide_index=True)
    else:
        projection = _load_projection(
            settings.owner_id,
            period.key,
            settings.projection_months,
        )
        _render_projection_chart(projection)


if __name__ == "__main__":  # pragma: no cover
    main()
