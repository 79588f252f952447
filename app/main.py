"""
Streamlit Frontend for the Class Fund

Screens:
1. Boxes: list of boxes, detail panel for the selected box, edit form
2. New Box: add a box to the fund
3. Register: registration form gated on accepting the terms
4. Settings: configuration status

The UI owns no data. Everything it shows comes from the BoxSelectionVM,
and every change goes through it. When a save fails the change stays on
screen and the user is warned that it may not survive a restart.
"""

import asyncio

import streamlit as st

from classfund.audit import create_correlation_id
from classfund.ledger import DuplicateBoxError, LedgerSyncError
from classfund.models.forms import BoxForm, RegistrationForm
from classfund.orchestrator import RegistrationFlow, create_app_components
from classfund.validation import BoxFormValidator, get_user_friendly_summary, parse_balance
from classfund.viewmodels import BoxSelectionVM, SelectionState


st.set_page_config(
    page_title="Class Fund",
    page_icon="🎓",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .box-details {
        padding: 20px;
        background-color: #f9f9f9;
        border-radius: 8px;
        border-left: 5px solid #a445bd;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


TERMS_TEXT = """
**1. Purpose.** This app helps a graduation class organize its fund into boxes.

**2. Data on your device.** Box names and balances are stored on this device only.
They are not synced to other devices or to a server.

**3. Accuracy.** Balances are entered by members. The app does not move money
and is not a bank or payment service.

**4. Your account.** Keep your password private. You are responsible for what is
done with your account.
"""


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    box_vm, registration_flow, _ = create_app_components(use_storage=True)
    with st.spinner("Loading boxes..."):
        run_async(box_vm.load(correlation_id=create_correlation_id()))
    return box_vm, registration_flow


def main():
    """Main application entry point."""
    box_vm, registration_flow = get_components()

    st.sidebar.title("🎓 Class Fund")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📦 Boxes", "➕ New Box", "📝 Register", "⚙️ Settings"],
        index=0,
    )

    if box_vm.sync_status.pending_sync:
        st.sidebar.warning(
            "Some changes could not be saved and may be lost when the app restarts."
        )

    if page == "📦 Boxes":
        render_boxes_page(box_vm)
    elif page == "➕ New Box":
        render_new_box_page(box_vm)
    elif page == "📝 Register":
        render_register_page(registration_flow)
    elif page == "⚙️ Settings":
        render_settings_page(box_vm)


def render_boxes_page(box_vm: BoxSelectionVM):
    """Render the box list and the selected box's details."""
    st.title("📦 Boxes")

    boxes = box_vm.boxes()
    if not boxes:
        st.info("No boxes found. Use 'New Box' to create the first one.")
        return

    for box in boxes:
        if st.button(box.name, key=f"box-{box.id}"):
            box_vm.select(box)

    if box_vm.state == SelectionState.HAS_SELECTION:
        render_box_details(box_vm)


def render_box_details(box_vm: BoxSelectionVM):
    """Render the detail panel and edit form for the selected box."""
    request = box_vm.request_edit()
    box = request.box

    st.markdown(f"""
    <div class="box-details">
        <h4>{box.name}</h4>
        <p><strong>Box balance:</strong> {box_vm.balance_label(box)}</p>
    </div>
    """, unsafe_allow_html=True)

    with st.form(key=f"edit-{box.id}"):
        st.markdown("### Modify Box")
        name = st.text_input("Name", value=box.name)
        balance_text = st.text_input(
            "Balance",
            value="" if box.balance is None else str(box.balance),
            help="Leave empty to keep the current balance",
        )
        submitted = st.form_submit_button("💾 Save Changes", type="primary")

    if submitted:
        form = BoxForm(name=name, balance=balance_text)
        result = BoxFormValidator().validate(form)
        if not result.is_valid:
            st.error(get_user_friendly_summary(result))
            return
        try:
            run_async(request.submit(
                name=form.name,
                balance=parse_balance(form.balance),
            ))
            st.success("Box updated.")
        except LedgerSyncError as e:
            st.warning(str(e))


def render_new_box_page(box_vm: BoxSelectionVM):
    """Render the add-box form."""
    st.title("➕ New Box")

    with st.form(key="new-box", clear_on_submit=True):
        name = st.text_input("Name *", placeholder="e.g. Graduation Trip")
        balance_text = st.text_input("Starting balance", placeholder="0.00")
        submitted = st.form_submit_button("Create Box", type="primary")

    if not submitted:
        return

    form = BoxForm(name=name, balance=balance_text)
    result = BoxFormValidator().validate(form)
    if not result.is_valid:
        st.error(get_user_friendly_summary(result))
        return
    if result.issues:
        st.warning(get_user_friendly_summary(result))

    try:
        box = run_async(box_vm.add_box(
            name=form.name,
            balance=parse_balance(form.balance),
            correlation_id=create_correlation_id(),
        ))
        st.success(f"Box '{box.name}' created.")
    except LedgerSyncError as e:
        st.warning(str(e))
    except DuplicateBoxError as e:
        st.error(str(e))


def render_register_page(registration_flow: RegistrationFlow):
    """Render the registration form."""
    st.title("📝 Register")

    with st.expander("📄 Terms & Services"):
        st.markdown(TERMS_TEXT)

    with st.form(key="register"):
        name = st.text_input("Name")
        email = st.text_input("Email")
        school = st.text_input("School")
        password = st.text_input("Password", type="password")
        password_repeat = st.text_input("Repeat password", type="password")
        terms_accepted = st.checkbox("I accept the Terms & Services")
        submitted = st.form_submit_button("Register", type="primary")

    if not submitted:
        return

    form = RegistrationForm(
        name=name,
        email=email,
        password=password,
        password_repeat=password_repeat,
        school=school,
        terms_accepted=terms_accepted,
    )
    result, message = run_async(registration_flow.validate(form))
    if result.is_valid:
        st.success("Registration details look good. Continue with your sign-in provider.")
    else:
        st.error(message)


def render_settings_page(box_vm: BoxSelectionVM):
    """Render the settings page."""
    st.title("⚙️ Settings")

    from classfund.config import get_settings, validate_all_settings

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    for name, key in [("Storage", "storage"), ("Audit", "audit"), ("App", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name}")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    storage = get_settings().storage
    st.markdown("### Storage")
    st.markdown(f"**Backend:** {storage.backend}")
    st.markdown(f"**Data directory:** `{storage.data_dir}`")

    sync = box_vm.sync_status
    if sync.pending_sync:
        st.warning(f"Last save failed: {sync.last_error}")
    elif sync.last_synced_at:
        st.success(f"Saved at {sync.last_synced_at:%Y-%m-%d %H:%M:%S} UTC")

    if st.button("🔄 Reload from storage"):
        run_async(box_vm.load(correlation_id=create_correlation_id()))
        st.rerun()


if __name__ == "__main__":
    main()
