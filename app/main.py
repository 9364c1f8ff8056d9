"""
Streamlit Frontend for the Cash Ledger

Renders what the ledger service computes. It never sums or accumulates
amounts itself: every number on screen comes from LedgerViews or a
ReportTable, recomputed after each change.
"""

import asyncio
from datetime import date, datetime

import streamlit as st

from cashledger.config import get_settings
from cashledger.errors import LedgerError, ValidationError
from cashledger.events import create_correlation_id
from cashledger.ledger import export_filename, format_currency
from cashledger.ledger.export import dumps
from cashledger.models.transaction import Category, Identity, Transaction, ViewCategory, ViewFilter
from cashledger.models.views import LedgerViews, ReportType
from cashledger.orchestrator import LedgerService, create_app_components
from cashledger.services.session import SessionProvider


# Page configuration
st.set_page_config(
    page_title="Cash Ledger",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_service() -> LedgerService:
    """Get or create the ledger service (cached)."""
    service, _ = create_app_components()
    return service


def get_session() -> SessionProvider:
    if "session" not in st.session_state:
        st.session_state.session = SessionProvider()
    return st.session_state.session


def money(amount) -> str:
    return format_currency(amount, get_settings().ledger.currency_symbol)


def show_error(e: LedgerError) -> None:
    st.error(str(e))
    if isinstance(e, ValidationError):
        for issue in e.issues:
            if issue.suggested_fix:
                st.caption(f"{issue.field}: {issue.suggested_fix}")


def main():
    """Main application entry point."""
    service = get_service()
    session = get_session()

    st.sidebar.title("💰 Cash Ledger")
    st.sidebar.markdown("---")

    identity = session.current_identity()
    if identity is None:
        render_sign_in(session)
        return

    st.sidebar.markdown(f"**{identity.display_name}**  \n{identity.key}")
    if st.sidebar.button("Sign out"):
        session.sign_out()
        st.rerun()

    view_filter = render_filters()
    try:
        views = run_async(service.recompute_views(identity, view_filter))
    except LedgerError as e:
        show_error(e)
        return

    render_statistics(views)
    render_add_form(service, identity)

    tab_list, tab_summary, tab_history, tab_reports = st.tabs(
        ["Transactions", "Daily summary", "Savings history", "Reports & export"]
    )
    with tab_list:
        render_transactions(service, identity, views)
    with tab_summary:
        render_daily_summary(views)
    with tab_history:
        render_history(views)
    with tab_reports:
        render_reports(service, identity, view_filter)


def render_sign_in(session: SessionProvider):
    st.title("Sign in")
    with st.form("sign_in"):
        key = st.text_input("Email")
        name = st.text_input("Display name")
        if st.form_submit_button("Sign in", type="primary"):
            if not key.strip() or not name.strip():
                st.error("Please enter both email and display name")
            else:
                session.sign_in(key, name)
                st.rerun()


def render_filters() -> ViewFilter:
    today = date.today()
    first_of_month = today.replace(day=1)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        start = st.date_input("From", value=first_of_month)
    with col2:
        end = st.date_input("To", value=today)
    with col3:
        category = st.selectbox(
            "View",
            options=list(ViewCategory),
            format_func=lambda c: c.value.title(),
        )
    with col4:
        search = st.text_input("Search notes or amounts")

    return ViewFilter(
        start_date=start or None,
        end_date=end or None,
        category=category,
        search_text=search or None,
    )


def render_statistics(views: LedgerViews):
    stats = views.statistics
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Inflow", money(stats.total_inflow))
    col2.metric("Outflow", money(stats.total_outflow))
    col3.metric("Savings", money(stats.net))
    col4.metric("Transactions", stats.count)

    monthly = views.monthly_savings
    st.caption(f"Monthly savings {monthly.year}")
    st.line_chart(
        {"Savings": [float(v) for v in monthly.values]},
    )


def render_add_form(service: LedgerService, identity: Identity):
    with st.expander("➕ Add transaction"):
        with st.form("add_transaction", clear_on_submit=True):
            category = st.selectbox(
                "Type", options=list(Category), format_func=lambda c: c.value.title()
            )
            amount = st.text_input("Amount")
            note = st.text_input("Note")
            if st.form_submit_button("Save", type="primary"):
                try:
                    run_async(service.add_transaction(
                        identity, category, amount, note,
                        correlation_id=create_correlation_id(),
                    ))
                except LedgerError as e:
                    show_error(e)
                else:
                    st.success("Transaction saved successfully")
                    st.rerun()


def render_edit_form(service: LedgerService, identity: Identity, tx: Transaction):
    with st.form(f"edit_{tx.id}"):
        category = st.selectbox(
            "Type",
            options=list(Category),
            index=list(Category).index(tx.category),
            format_func=lambda c: c.value.title(),
        )
        amount = st.text_input("Amount", value=str(tx.amount))
        note = st.text_input("Note", value=tx.note)
        st.caption(
            f"Created by {tx.created_by} on {tx.created_at.display}"
            + (f" · Last edited by {tx.editor_display}" if tx.editor_display else "")
        )
        if st.form_submit_button("Update"):
            try:
                run_async(service.edit_transaction(identity, tx.id, category, amount, note))
            except LedgerError as e:
                show_error(e)
            else:
                st.success("Transaction updated successfully")
                st.rerun()


def render_transactions(service: LedgerService, identity: Identity, views: LedgerViews):
    if not views.transaction_days:
        st.info("No transactions found")
        return

    for day in views.transaction_days:
        st.markdown(
            f"**{day.calendar_date}** · inflow {money(day.inflow_total)}, "
            f"outflow {money(day.outflow_total)} · Savings {money(day.cumulative_balance)}"
        )
        for tx in day.transactions:
            badge = "IN" if tx.category == Category.INFLOW else "OUT"
            with st.expander(f"{badge} {money(tx.amount)} | {tx.note}"):
                st.caption(f"{tx.calendar_date} {tx.created_at.time} by {tx.created_by}")
                render_edit_form(service, identity, tx)
                confirm = st.checkbox("I want to delete this transaction", key=f"confirm_{tx.id}")
                if st.button("Delete", key=f"delete_{tx.id}"):
                    try:
                        run_async(service.delete_transaction(identity, tx.id, confirmed=confirm))
                    except LedgerError as e:
                        show_error(e)
                    else:
                        st.success("Transaction deleted")
                        st.rerun()


def render_daily_summary(views: LedgerViews):
    rows = views.savings_summary.rows
    if not rows:
        st.info("No transactions for selected period.")
        return
    st.table([
        {
            "Date": row.calendar_date,
            "Inflow": money(row.inflow_total),
            "Outflow": money(row.outflow_total),
            "Savings": money(row.cumulative_balance),
        }
        for row in rows
    ])


def render_history(views: LedgerViews):
    if not views.history:
        st.info("No history yet.")
        return
    st.table([
        {
            "Date": row.calendar_date,
            "Savings": money(row.cumulative_balance),
            "Notes": f"Inflow: {money(row.inflow_total)} | Outflow: {money(row.outflow_total)}",
        }
        for row in views.history
    ])


def render_reports(service: LedgerService, identity: Identity, view_filter: ViewFilter):
    report_type = st.selectbox(
        "Report",
        options=list(ReportType),
        format_func=lambda r: r.value.replace("-", " ").title(),
    )
    try:
        table = run_async(service.build_report(identity, report_type, view_filter))
    except LedgerError as e:
        show_error(e)
        return

    st.subheader(table.title)
    if table.user_line:
        st.markdown(f"**User:** {table.user_line}")
    st.markdown(f"**Generated:** {table.generated_at}")
    if table.period_line:
        st.markdown(f"**Period:** {table.period_line}")
    st.table([dict(zip(table.headers, row)) for row in table.rows])

    st.markdown("---")
    document = run_async(service.export(identity))
    st.download_button(
        "Export data",
        data=dumps(document),
        file_name=export_filename(document.exported_at),
        mime="application/json",
    )
    st.caption(f"Last refreshed {datetime.now().strftime('%H:%M:%S')}")


if __name__ == "__main__":
    main()
