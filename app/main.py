"""
Streamlit Frontend for the Property Registry Portal

This is the interface clients and registry admins use to see their
property files, account statements and payment alerts.

DESIGN PRINCIPLES:
1. Every figure on screen comes from the ledger engine
2. One render pass, one "today"
3. Overdue lines are impossible to miss
4. The AI panel is optional and never blocks the page

View state (signed-in user, selected file) lives in st.session_state and
is passed down explicitly to each page.
"""

import asyncio

import pandas as pd
import streamlit as st

from registry_portal.config import get_settings, validate_all_settings
from registry_portal.ledger import format_amount, format_currency, format_sap_date
from registry_portal.models.ledger import FileStatus, LedgerStatement
from registry_portal.models.portal import NotificationType, User
from registry_portal.orchestrator import (
    AppComponents,
    DashboardView,
    RenderContext,
    create_app_components,
)
from registry_portal.services.registry import FileNotFoundInRegistryError, RegistryError


st.set_page_config(
    page_title="Property Registry Portal",
    page_icon="🏡",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .alert-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .upcoming-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .clear-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)

STATUS_ICONS = {
    FileStatus.ACTION_REQUIRED: "🔴",
    FileStatus.ACTIVE_LEDGER: "🔵",
    FileStatus.CLEARANCE_VERIFIED: "🟢",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    components = get_components()
    settings = get_settings()

    st.sidebar.title(f"🏡 {settings.app.portal_name}")
    st.sidebar.markdown("---")

    user = render_sign_in(components)
    if user is None:
        st.title("Welcome")
        st.info("Select your registry profile in the sidebar to continue.")
        return

    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Dashboard", "📄 Statement", "🔔 Alerts", "💬 Assistant", "⚙️ Settings"],
        index=0,
    )

    # One render pass, one day
    context = RenderContext()

    try:
        if page == "🏠 Dashboard":
            render_dashboard_page(components, user, context)
        elif page == "📄 Statement":
            render_statement_page(components, user, context)
        elif page == "🔔 Alerts":
            render_alerts_page(components, user, context)
        elif page == "💬 Assistant":
            render_assistant_page(components, user, context)
        elif page == "⚙️ Settings":
            render_settings_page(components)
    except RegistryError as e:
        st.error(f"Registry unavailable: {e}")


def render_sign_in(components: AppComponents):
    """Profile picker standing in for the portal's sign-in."""
    users = run_async(components.registry.list_users())
    if not users:
        st.sidebar.warning("No users in the registry export.")
        return None

    labels = {f"{u.name} ({u.role.value})": u for u in users}
    choice = st.sidebar.selectbox("Signed in as", ["Select a profile"] + list(labels))
    return labels.get(choice)


def render_dashboard_page(components: AppComponents, user: User, context: RenderContext):
    """Render the portfolio dashboard."""
    st.title(f"Welcome, {user.name}")
    currency = get_settings().ledger.currency_code

    view = run_async(components.dashboard_flow.render(user, context))

    col1, col2, col3 = st.columns(3)
    col1.metric("Verified Assets", f"{view.stats.verified_assets:02d}")
    col2.metric("Active Records", f"{view.stats.active_records:02d}")
    col3.metric("Alerts", f"{view.stats.alerts:02d}")

    with st.expander("🤖 Portfolio Summary", expanded=True):
        st.markdown(portfolio_summary(components, user, view, context))

    st.markdown("### Priority Alerts")
    if not view.alerts:
        st.markdown(
            '<div class="clear-box"><h4>Registry Status: Clear</h4></div>',
            unsafe_allow_html=True,
        )
    for alert in view.alerts:
        css = "alert-box" if alert.is_overdue else "upcoming-box"
        heading = "Overdue" if alert.is_overdue else "Upcoming"
        st.markdown(f"""
        <div class="{css}">
            <h4>{heading}: {alert.transaction.installment_name or 'Ledger entry'}</h4>
            <p>File {alert.file_no} · {alert.plot_size} · due {format_sap_date(alert.due_date)}</p>
            <p><strong>{format_currency(alert.amount, currency)}</strong></p>
        </div>
        """, unsafe_allow_html=True)

    st.markdown("### Property Files")
    if not view.cards:
        st.info("No active property files found in your registry profile.")
    for card in view.cards:
        with st.container(border=True):
            left, right = st.columns([3, 2])
            left.markdown(f"**{card.file_no}** · {card.plot_size}")
            left.caption(f"Plot value: {format_currency(card.plot_value, currency)}")
            right.markdown(f"{STATUS_ICONS[card.status]} {card.status.value}")
            if card.headline_amount is None:
                right.caption("Registry Clear")
            else:
                label = "Overdue" if card.headline_is_overdue else "Next payment"
                right.caption(f"{label}: {format_currency(card.headline_amount, currency)}")
            if st.button("Open statement", key=f"open-{card.file_no}"):
                st.session_state.selected_file = card.file_no
                st.info("Switch to the Statement page to view this file.")


def portfolio_summary(
    components: AppComponents,
    user: User,
    view: DashboardView,
    context: RenderContext,
) -> str:
    """AI summary of the portfolio, regenerated only when the user or file set changes."""
    key = view.summary_key(user.id)
    cached = st.session_state.get("portfolio_summary")
    if cached is None or cached[0] != key:
        with st.spinner("Analyzing your registry..."):
            reply = run_async(components.assistant_flow.summarize(user, context))
        cached = (key, reply.text)
        st.session_state.portfolio_summary = cached
    return cached[1]


def _statement_frame(statement: LedgerStatement, plan: bool) -> pd.DataFrame:
    rows = statement.plan_rows if plan else statement.other_rows
    return pd.DataFrame([
        {
            "Description": r.transaction.installment_name,
            "Due Date": format_sap_date(r.due_date),
            "Receivable": format_amount(r.transaction.receivable),
            "Received": format_amount(r.transaction.amount_paid),
            "Receipt Date": format_sap_date(r.receipt_date),
            "Mode": r.transaction.payment_mode or "-",
            "Instrument": r.transaction.instrument_number or "-",
            "Balance": format_amount(r.transaction.outstanding_balance),
            "Surcharge": format_amount(r.transaction.surcharge),
            "Overdue": r.is_overdue,
        }
        for r in rows
    ])


def _highlight_overdue(row: pd.Series) -> list[str]:
    style = "background-color: #ffff00" if row["Overdue"] else ""
    return [style] * len(row)


def render_statement_page(components: AppComponents, user: User, context: RenderContext):
    """Render the account statement of one file."""
    st.title("📄 Account Statement")
    ledger_settings = get_settings().ledger

    files = run_async(components.registry.files_for_user(user))
    if not files:
        st.info("No property files are registered to your profile.")
        return

    file_numbers = [f.file_no for f in files]
    selected = st.session_state.get("selected_file")
    index = file_numbers.index(selected) if selected in file_numbers else 0
    file_no = st.selectbox("Property file", file_numbers, index=index)
    st.session_state.selected_file = file_no

    try:
        statement = run_async(components.statement_flow.render(file_no, user, context))
    except FileNotFoundInRegistryError as e:
        st.error(str(e))
        return

    file = next(f for f in files if f.file_no == file_no)
    col1, col2 = st.columns(2)
    col1.markdown(
        f"**Owner:** {file.owner_name}  \n**Father Name:** {file.father_name}  \n"
        f"**CNIC:** {file.owner_cnic}  \n**Cell:** {file.cell_no}"
    )
    col2.markdown(
        f"**File No:** {file.file_no}  \n**Plot Size:** {file.plot_size}  \n"
        f"**Registered:** {file.reg_date}  \n**Address:** {file.address}"
    )
    st.caption(
        f"Plot No: {file.plot_no} · Block: {file.block} · Park: {file.park} · "
        f"Corner: {file.corner} · Main Boulevard: {file.main_boulevard}"
    )
    st.caption(ledger_settings.statement_note)

    totals = statement.totals

    st.markdown("#### Payment Plan")
    plan = _statement_frame(statement, plan=True)
    if not plan.empty:
        st.dataframe(plan.style.apply(_highlight_overdue, axis=1), hide_index=True)
    st.markdown(
        f"**Total:** receivable {format_amount(totals.plan_receivable)} · "
        f"received {format_amount(totals.plan_received)} · "
        f"balance {format_amount(totals.plan_balance)} · "
        f"surcharge {format_amount(totals.plan_surcharge)}"
    )

    if statement.other_rows:
        st.markdown("#### Other")
        st.dataframe(_statement_frame(statement, plan=False), hide_index=True)
        st.markdown(
            f"**Total:** receivable {format_amount(totals.other_receivable)} · "
            f"received {format_amount(totals.other_received)} · "
            f"balance {format_amount(totals.other_balance)}"
        )

    st.markdown("---")
    col1, col2, col3 = st.columns(3)
    col1.metric("Grand Receivable", format_amount(totals.grand_receivable))
    col2.metric("Grand Received", format_amount(totals.grand_received))
    col3.metric("Grand Balance", format_amount(totals.grand_balance))

    export = pd.concat([plan, _statement_frame(statement, plan=False)], ignore_index=True)
    st.download_button(
        "⬇️ Download ledger (CSV)",
        data=export.to_csv(index=False).encode("utf-8"),
        file_name=f"Account_Statement_{file.file_no}.csv",
        mime="text/csv",
    )
    st.caption(f"Generated as of {format_sap_date(statement.as_of)}")


def render_alerts_page(components: AppComponents, user: User, context: RenderContext):
    """Render the alert center."""
    st.title("🔔 Alert Center")
    st.markdown("Payment reminders derived from your ledger.")

    view = run_async(components.dashboard_flow.render(user, context))
    if not view.notifications:
        st.success("No payment alerts. Your registry is clear.")
        return

    for notification in view.notifications:
        if notification.type == NotificationType.CRITICAL:
            st.error(f"**{notification.title}**  \n{notification.message}")
        else:
            st.warning(f"**{notification.title}**  \n{notification.message}")


def render_assistant_page(components: AppComponents, user: User, context: RenderContext):
    """Render the registry assistant chat."""
    st.title("💬 Registry Assistant")
    if not components.assistant_flow.is_configured:
        st.warning("The AI assistant is not configured. Set GEMINI_API_KEY to enable it.")

    if "chat_history" not in st.session_state:
        st.session_state.chat_history = []

    for role, text in st.session_state.chat_history:
        with st.chat_message(role):
            st.markdown(text)

    message = st.chat_input("Ask about your installments, dues or payments")
    if message:
        st.session_state.chat_history.append(("user", message))
        with st.chat_message("user"):
            st.markdown(message)
        with st.chat_message("assistant"):
            with st.spinner("Consulting the registry..."):
                reply = run_async(components.assistant_flow.chat(user, message, context))
            st.markdown(reply.text)
        st.session_state.chat_history.append(("assistant", reply.text))


def render_settings_page(components: AppComponents):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")
    status = validate_all_settings()
    services = [
        ("Gemini (AI)", "gemini"),
        ("Ledger policy", "ledger"),
        ("Registry export", "registry"),
        ("Application", "app"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    if status.get("registry", False):
        st.caption(get_settings().registry.sync_note)

    st.markdown("### Recent Activity")
    events = run_async(components.audit_storage.get_recent_events(limit=20))
    if events:
        st.dataframe(
            pd.DataFrame([e.to_log_dict() for e in events])[
                ["timestamp", "event_type", "severity", "entity_id", "description"]
            ],
            hide_index=True,
        )
    else:
        st.caption("No activity yet.")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file with your API keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
