"""
Streamlit Frontend for the Association Ledger

This is the screen the organizer uses on their device.

DESIGN PRINCIPLES:
1. The UI never edits the ledger directly - it dispatches actions
2. Every render reads totals from the derivation engine
3. Names and descriptions are upper-cased here, at the edit boundary
4. Destructive actions need an explicit confirmation
5. Storage problems show as warnings, never as crashes
"""

import asyncio
from datetime import date

import streamlit as st

from ledger.config import get_settings
from ledger.derivation import (
    build_expense_report,
    build_statement,
    ledger_totals,
    toggle_month,
)
from ledger.models import ALL_MONTHS_FILTER, MONTHS, Month
from ledger.mutations import (
    AddMember,
    CreateExpenditure,
    RecordPayment,
    RemoveMember,
    RenameMember,
    UpdateExpenditure,
    UpdateProfile,
)
from ledger.services import (
    VoucherError,
    encode_voucher,
    suggested_export_filename,
)
from ledger.session import DispatchOutcome, LedgerSession, create_ledger_session


# Page configuration
st.set_page_config(
    page_title="SPSIB Ledger",
    page_icon="📒",
    layout="centered",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_loop() -> asyncio.AbstractEventLoop:
    """One event loop for the app's lifetime, so the session's save lock stays valid."""
    return asyncio.new_event_loop()


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    return get_loop().run_until_complete(coro)


@st.cache_resource
def get_session() -> LedgerSession:
    """Get or create the ledger session (cached)."""
    session = create_ledger_session(use_storage=True)
    run_async(session.start())
    return session


def show_outcome(outcome: DispatchOutcome, success: str) -> bool:
    """Report a dispatch outcome to the user. Returns True if it applied."""
    if not outcome.applied:
        st.error(outcome.result.message or "Nothing was changed.")
        return False
    if outcome.warning:
        st.warning(outcome.warning)
    st.success(success)
    return True


def format_amount(value: float) -> str:
    return f"₹{value:,.0f}" if float(value).is_integer() else f"₹{value:,.2f}"


def main():
    """Main application entry point."""
    session = get_session()

    if session.last_warning:
        st.warning(session.last_warning)

    state = session.state
    if state.logo:
        st.image(state.logo, width=80)
    st.title(state.main_title)
    st.caption(state.sub_title)

    totals = ledger_totals(state)
    col1, col2, col3 = st.columns(3)
    col1.metric("COLLECT", format_amount(totals.income))
    col2.metric("EXPENSE", format_amount(totals.expense))
    col3.metric("BALANCE", format_amount(totals.balance))

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Ledger Matrix", "🧾 Expenditure", "👥 Members", "⚙️ Settings"],
        index=0,
    )

    if page == "📊 Ledger Matrix":
        render_matrix_page(session)
    elif page == "🧾 Expenditure":
        render_expenditure_page(session)
    elif page == "👥 Members":
        render_members_page(session)
    elif page == "⚙️ Settings":
        render_settings_page(session)


def render_matrix_page(session: LedgerSession):
    """Render the ledger matrix and the payment entry form."""
    st.header("LEDGER MATRIX")

    if "selected_months" not in st.session_state:
        st.session_state.selected_months = list(Month)

    col_all, col_clear = st.columns(2)
    if col_all.button("SELECT ALL"):
        st.session_state.selected_months = list(Month)
    if col_clear.button("CLEAR"):
        st.session_state.selected_months = []

    month_columns = st.columns(6)
    for position, month in enumerate(Month):
        is_selected = month in st.session_state.selected_months
        if month_columns[position % 6].button(
            month.value,
            key=f"month_{month.value}",
            type="primary" if is_selected else "secondary",
            use_container_width=True,
        ):
            st.session_state.selected_months = toggle_month(
                st.session_state.selected_months, month
            )
            st.rerun()

    statement = build_statement(session.state, st.session_state.selected_months)

    rows = []
    for row in statement.rows:
        line = {"MEMBER NAME": row.name}
        for month in statement.months:
            amount = row.amounts.get(month)
            line[month.value] = format_amount(amount) if amount else "-"
        line["TOTAL"] = format_amount(row.total)
        rows.append(line)

    income_line = {"MEMBER NAME": "TOTAL INCOME"}
    expense_line = {"MEMBER NAME": "TOTAL EXPENSE"}
    for month in statement.months:
        income_line[month.value] = format_amount(statement.monthly[month].income)
        expense_line[month.value] = format_amount(statement.monthly[month].expense)
    rows.extend([income_line, expense_line])

    st.dataframe(rows, hide_index=True, use_container_width=True)

    st.subheader("NEW PAYMENT ENTRY")
    members = session.state.members
    if not members:
        st.info("Add members first on the Members page.")
        return

    with st.form("payment_form", clear_on_submit=False):
        member_index = st.selectbox(
            "Player",
            options=range(len(members)),
            format_func=lambda i: members[i].name,
        )
        month = st.selectbox(
            "Month",
            options=MONTHS,
            index=date.today().month - 1,
        )
        amount = st.number_input(
            "Amount (₹)",
            min_value=0.0,
            value=float(get_settings().branding.default_payment_amount),
            step=50.0,
        )
        if st.form_submit_button("RECORD PAYMENT", type="primary"):
            outcome = run_async(session.dispatch(RecordPayment(
                member_index=member_index,
                month=month,
                amount=amount,
            )))
            if show_outcome(outcome, f"Recorded {format_amount(amount)} for {month}"):
                st.rerun()


def render_expenditure_page(session: LedgerSession):
    """Render the bill form and the expenditure log."""
    if "editing_id" not in st.session_state:
        st.session_state.editing_id = None

    editing = next(
        (ex for ex in session.state.expenditures if ex.id == st.session_state.editing_id),
        None,
    )
    st.header("EDIT BILL RECORD" if editing else "CREATE NEW BILL")

    with st.form("expense_form", clear_on_submit=True):
        description = st.text_input(
            "Bill description",
            value=editing.description if editing else "",
            placeholder="E.G. TURF RENT",
        )
        bill_date = st.date_input(
            "Date",
            value=(editing.parsed_date if editing and editing.parsed_date else date.today()),
        )
        amount = st.number_input(
            "Amount (₹)",
            min_value=0.0,
            value=float(editing.amount) if editing else 0.0,
            step=50.0,
        )
        keep_images = []
        if editing and editing.images:
            st.caption(f"VOUCHERS ({len(editing.images)})")
            st.image(editing.images, width=80)
            keep_images = list(editing.images)
            if st.checkbox("Remove existing vouchers"):
                keep_images = []
        uploads = st.file_uploader(
            "Add vouchers",
            type=["jpg", "jpeg", "png", "webp", "gif"],
            accept_multiple_files=True,
        )
        submitted = st.form_submit_button(
            "UPDATE BILL ENTRY" if editing else "SAVE AUDIT ENTRY",
            type="primary",
        )

    if submitted:
        images = list(keep_images)
        for upload in uploads or []:
            try:
                images.append(encode_voucher(upload.getvalue(), upload.type))
            except VoucherError as e:
                st.error(f"{upload.name}: {e}")
                return

        fields = dict(
            date=bill_date.isoformat(),
            description=description.upper(),
            amount=amount,
            images=images,
        )
        if editing:
            outcome = run_async(session.dispatch(UpdateExpenditure(id=editing.id, **fields)))
        else:
            outcome = run_async(session.dispatch(CreateExpenditure(**fields)))

        if show_outcome(outcome, "Bill saved"):
            st.session_state.editing_id = None
            st.rerun()

    if editing and st.button("Cancel edit"):
        st.session_state.editing_id = None
        st.rerun()

    st.subheader("AUDIT LOG")
    month_filter = st.selectbox(
        "Month",
        options=[ALL_MONTHS_FILTER, *MONTHS],
        format_func=lambda m: "ALL MONTHS" if m == ALL_MONTHS_FILTER else m,
    )
    report = build_expense_report(session.state, month_filter)

    for ex in report.expenditures:
        col1, col2, col3, col4 = st.columns([2, 5, 2, 1])
        parsed = ex.parsed_date
        col1.write(parsed.strftime("%d/%m") if parsed else ex.date or "-")
        col2.write(ex.description)
        col3.write(format_amount(ex.amount))
        if col4.button("✏️", key=f"edit_{ex.id}"):
            st.session_state.editing_id = ex.id
            st.rerun()
        if ex.images:
            with st.expander(f"Vouchers ({len(ex.images)})"):
                st.image(ex.images, width=200)

    st.markdown(f"**TOTAL: {format_amount(report.total)}** ({report.count} bills)")


def render_members_page(session: LedgerSession):
    """Render the roster with add, rename and remove."""
    st.header("MANAGE ROSTER")

    for index, member in enumerate(session.state.members):
        with st.expander(member.name):
            new_name = st.text_input("Rename", value=member.name, key=f"rename_{index}")
            col1, col2 = st.columns(2)
            if col1.button("SAVE NAME", key=f"save_{index}"):
                outcome = run_async(session.dispatch(
                    RenameMember(index=index, new_name=new_name.upper())
                ))
                if show_outcome(outcome, "Name updated"):
                    st.rerun()

            confirm = col2.checkbox(f"Confirm removal of {member.name}", key=f"confirm_{index}")
            if col2.button("REMOVE PLAYER", key=f"remove_{index}", disabled=not confirm):
                outcome = run_async(session.dispatch(RemoveMember(index=index)))
                if show_outcome(outcome, f"Removed {member.name}"):
                    st.rerun()

    with st.form("add_member_form", clear_on_submit=True):
        name = st.text_input("Enter new name")
        if st.form_submit_button("ADD", type="primary"):
            outcome = run_async(session.dispatch(AddMember(name=name.upper())))
            if show_outcome(outcome, "Member added"):
                st.rerun()


def render_settings_page(session: LedgerSession):
    """Render profile branding and backup/restore."""
    st.header("PROFILE")
    state = session.state

    with st.form("profile_form"):
        main_title = st.text_input("Main title", value=state.main_title)
        sub_title = st.text_input("Sub title", value=state.sub_title)
        logo_upload = st.file_uploader("Logo", type=["jpg", "jpeg", "png", "webp"])
        clear_logo = st.checkbox("Remove logo")
        if st.form_submit_button("SAVE PROFILE", type="primary"):
            logo = "" if clear_logo else state.logo
            if logo_upload is not None:
                try:
                    logo = encode_voucher(logo_upload.getvalue(), logo_upload.type)
                except VoucherError as e:
                    st.error(f"Logo: {e}")
                    return
            outcome = run_async(session.dispatch(UpdateProfile(
                main_title=main_title.upper(),
                sub_title=sub_title.upper(),
                logo=logo,
            )))
            if show_outcome(outcome, "Profile Updated!"):
                st.rerun()

    st.header("BACKUP")
    st.download_button(
        "DOWNLOAD BACKUP",
        data=session.export_document(),
        file_name=suggested_export_filename(),
        mime="application/json",
    )
    st.caption(f"Last saved: {state.last_backup}")

    restore = st.file_uploader("Restore from backup", type=["json"])
    if restore is not None and st.button("RESTORE DATABASE"):
        outcome = run_async(session.import_document(restore.getvalue()))
        if outcome.applied:
            show_outcome(outcome, "Database Restored!")
        else:
            st.error(f"Invalid File! {outcome.result.message}")


if __name__ == "__main__":
    main()
