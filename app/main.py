"""
Streamlit Frontend for PagoTrack

This is the page the employer opens to record the weekly payment and
check the running balance.

DESIGN PRINCIPLES:
1. The balance is always recomputed, never stored
2. Nothing is saved without an explicit "Save" action
3. Receipt suggestions only fill the form; the user confirms them
4. Warnings are shown before saving, never silently applied
5. Clear messages when storage is not persistent

The UI only talks to PaymentTracker; it never touches a store directly.
"""

import asyncio
import json
from datetime import date

import streamlit as st

from pagotrack.config import get_settings, validate_all_settings
from pagotrack.models.ledger import DebtFormula, WeekStatus
from pagotrack.models.payment import PendingPayment
from pagotrack.orchestrator import PaymentTracker, create_app_components
from pagotrack.reports.assembler import MONTH_NAMES
from pagotrack.services.backup import ImportFormatError, backup_file_name
from pagotrack.validation import ValidationError, get_user_friendly_summary


# Page configuration
st.set_page_config(
    page_title="PagoTrack",
    page_icon="💵",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_tracker() -> PaymentTracker:
    """Get or create the tracker (cached for the session)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to open saved data: {e}")
        return create_app_components(use_storage=False)


def money(value) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol}{value:,.2f}"


def main():
    """Main application entry point."""
    tracker = get_tracker()

    # Sidebar navigation
    st.sidebar.title("💵 PagoTrack")
    st.sidebar.markdown(f"**Employee:** {tracker.settings.name}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📅 Ledger", "✍️ Record Payment", "📄 Reports", "⚙️ Settings"],
        index=0,
    )

    if not tracker.is_persistent:
        st.sidebar.warning("Changes are kept in memory only for this session.")

    # Route to appropriate page
    if page == "📅 Ledger":
        render_ledger_page(tracker)
    elif page == "✍️ Record Payment":
        render_payment_page(tracker)
    elif page == "📄 Reports":
        render_reports_page(tracker)
    elif page == "⚙️ Settings":
        render_settings_page(tracker)


def render_ledger_page(tracker: PaymentTracker):
    """Render the balance and the week-by-week ledger."""
    st.title("📅 Ledger")

    snapshot = tracker.reconcile()
    summary = snapshot.summary

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Weeks elapsed", summary.weeks_elapsed)
    col2.metric("Expected", money(summary.expected_total))
    col3.metric("Paid", money(summary.actual_total))
    col4.metric(summary.balance_label, money(abs(summary.debt)))

    if summary.is_underpaid:
        st.markdown(f"""
        <div class="warning-box">
            <h4>⚠️ {summary.missed_weeks} missed week(s)</h4>
            <p>{money(summary.debt)} is owed up to {snapshot.cutoff.strftime('%d %B %Y')}.</p>
        </div>
        """, unsafe_allow_html=True)
    else:
        st.markdown("""
        <div class="success-box">
            <h4>✅ Up to date</h4>
        </div>
        """, unsafe_allow_html=True)

    if snapshot.all_time_paid != summary.actual_total:
        st.caption(
            f"All recorded payments add up to {money(snapshot.all_time_paid)}; "
            "payments outside the reconciliation window or second payments "
            "in a week are not counted in the balance."
        )

    st.markdown("---")

    if not snapshot.ledger:
        st.info("No payment is due yet. The first due date is after today.")
        return

    rows = []
    for slot in reversed(snapshot.ledger):
        note = ""
        if slot.linked_payment is not None:
            note = slot.linked_payment.note or ""
        rows.append({
            "Due": slot.due_date.isoformat(),
            "Date": slot.anchor_date.isoformat(),
            "Status": "✅ Paid" if slot.status == WeekStatus.PAID else "❌ Missed",
            "Amount": float(slot.amount),
            "Note": note,
        })
    st.dataframe(rows, use_container_width=True, hide_index=True)


def render_payment_page(tracker: PaymentTracker):
    """Render the payment entry form."""
    st.title("✍️ Record Payment")
    st.markdown("Pick a day. If a payment is already recorded there, you will edit it.")

    selected_day = st.date_input("Day", value=date.today())

    # Reset the form when a different day is picked
    if st.session_state.get("form_day") != selected_day:
        pending, editing_id = tracker.pending_for(selected_day)
        st.session_state.form_day = selected_day
        st.session_state.pending = pending
        st.session_state.editing_id = editing_id
        st.session_state.review = None

    pending: PendingPayment = st.session_state.pending
    editing_id = st.session_state.editing_id

    if editing_id:
        st.info("Editing the payment recorded on this day.")

    # Optional receipt suggestion
    uploaded_file = st.file_uploader(
        "Receipt photo (optional)",
        type=get_settings().app.supported_formats_list,
        help="Amount and date will be suggested from the photo. Check them before saving.",
    )
    if uploaded_file and st.button("🔍 Read Receipt"):
        with st.spinner("Reading the receipt..."):
            receipt_url, suggestion = run_async(
                tracker.suggest_from_receipt(uploaded_file.read())
            )
        if receipt_url is None:
            st.error("That file could not be read as an image.")
        else:
            pending.receipt_image = receipt_url
            pending.apply_suggestion(suggestion)
            if suggestion.is_empty:
                st.warning("Nothing could be read from the receipt. Please type the values.")
            else:
                st.success("Values suggested from the receipt. Please check them.")

    col1, col2 = st.columns(2)
    with col1:
        pending.date = st.text_input("Date (YYYY-MM-DD) *", value=pending.date)
    with col2:
        pending.amount = st.text_input("Amount *", value=pending.amount)
    pending.note = st.text_area("Note (optional)", value=pending.note)

    if pending.receipt_image:
        with st.expander("📷 Receipt"):
            st.image(pending.receipt_image, width=400)

    st.markdown("---")
    col1, col2, col3 = st.columns([2, 2, 1])

    with col1:
        if st.button("💾 Save", type="primary"):
            try:
                review = tracker.review(pending, identity_id=editing_id)
            except ValidationError as e:
                st.markdown(f"""
                <div class="error-box">
                    <h4>❌ Please fix the form</h4>
                    <p>{get_user_friendly_summary(e.issues)}</p>
                </div>
                """, unsafe_allow_html=True)
            else:
                if review.has_warnings:
                    st.session_state.review = review
                else:
                    save_pending(tracker, pending, editing_id)

    with col2:
        if editing_id and st.button("🗑️ Delete"):
            tracker.delete_payment(editing_id)
            st.session_state.form_day = None
            st.success("Payment deleted.")
            st.rerun()

    review = st.session_state.get("review")
    if review is not None:
        st.markdown(f"""
        <div class="warning-box">
            <h4>⚠️ Please verify</h4>
            <p>{get_user_friendly_summary(review.warnings)}</p>
        </div>
        """, unsafe_allow_html=True)
        if st.button("✅ Save anyway"):
            save_pending(tracker, pending, editing_id)


def save_pending(tracker: PaymentTracker, pending: PendingPayment, editing_id):
    try:
        payment = tracker.save_payment(pending, identity_id=editing_id)
    except ValidationError as e:
        st.error(get_user_friendly_summary(e.issues))
        return
    st.session_state.form_day = None
    st.session_state.review = None
    st.success(f"Saved {money(payment.amount)} on {payment.date.strftime('%d %B %Y')}.")


def render_reports_page(tracker: PaymentTracker):
    """Render the total and monthly report tables."""
    st.title("📄 Reports")

    tab_total, tab_monthly = st.tabs(["Salary and Debt", "Monthly"])

    with tab_total:
        formula = st.selectbox(
            "Weeks counted by",
            options=list(DebtFormula),
            format_func=lambda f: f.value.replace("_", " ").capitalize(),
        )
        report = tracker.total_report(formula=formula)
        render_report(report)

    with tab_monthly:
        today = date.today()
        col1, col2 = st.columns(2)
        with col1:
            month = st.selectbox(
                "Month",
                options=list(range(1, 13)),
                index=today.month - 1,
                format_func=lambda m: MONTH_NAMES[m - 1],
            )
        with col2:
            year = st.number_input("Year", value=today.year, step=1, format="%d")
        report = tracker.monthly_report(int(year), int(month))
        render_report(report)


def render_report(report):
    st.subheader(report.title)
    st.caption(f"{report.employee_name} · {report.subtitle}")
    table = report.table()
    st.dataframe(table, use_container_width=True, hide_index=True)
    st.download_button(
        "⬇️ Download rows",
        data=json.dumps(table, indent=2, ensure_ascii=False),
        file_name=report.file_name.replace(".pdf", ".json"),
        mime="application/json",
        key=f"download_{report.kind.value}",
    )


def render_settings_page(tracker: PaymentTracker):
    """Render the settings, backup and connection status page."""
    st.title("⚙️ Settings")

    current = tracker.settings
    weekdays = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

    with st.form("settings_form"):
        name = st.text_input("Employee name", value=current.name)
        weekday = st.selectbox(
            "Payment day",
            options=list(range(7)),
            index=current.weekly_payment_day,
            format_func=lambda d: weekdays[d],
        )
        expected = st.number_input(
            "Expected weekly amount",
            value=float(current.expected_amount),
            min_value=0.0,
            step=0.01,
            format="%.2f",
        )
        start = st.date_input("Start date", value=current.start_date)
        has_end = st.checkbox("Stop counting at an end date", value=current.end_date is not None)
        end = st.date_input("End date", value=current.end_date or date.today())

        if st.form_submit_button("💾 Save settings", type="primary"):
            try:
                tracker.update_settings({
                    "name": name,
                    "weekly_payment_day": weekday,
                    "expected_amount": str(expected),
                    "start_date": start,
                    "end_date": end if has_end else None,
                })
                st.success("Settings saved.")
            except ValidationError as e:
                st.error(get_user_friendly_summary(e.issues))

    st.markdown("---")
    st.markdown("### Backup")

    st.download_button(
        "⬇️ Export backup",
        data=tracker.export_backup_json(),
        file_name=backup_file_name(),
        mime="application/json",
    )

    backup_file = st.file_uploader("Import backup", type=["json"])
    if backup_file and st.button("📥 Replace all data with this backup"):
        try:
            document = tracker.import_backup(backup_file.read())
            st.success(f"Imported {len(document.payments)} payment(s).")
        except ImportFormatError as e:
            st.error(f"Backup rejected, nothing was changed: {e}")

    st.markdown("---")
    st.markdown("### Reset")
    confirm = st.checkbox("I understand this deletes every payment")
    if st.button("🗑️ Reset all data", disabled=not confirm):
        tracker.reset()
        st.session_state.form_day = None
        st.success("All data was reset.")

    st.markdown("---")
    st.markdown("### Connection Status")

    status = validate_all_settings()
    services = [
        ("Local storage", "storage"),
        ("Gemini (receipt reading)", "gemini"),
        ("Application", "app"),
    ]
    for label, key in services:
        if status.get(key, False):
            st.success(f"✅ {label} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {label} - {error}")

    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
