# app.py
"""
Sample & Order Performance Dashboard - Main Entry Point

Version: 1.0.0
"""

import streamlit as st
from utils.auth import AuthManager
from utils.db import check_db_connection
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Sample & Order Performance"
APP_ICON = "📊"
APP_VERSION = "1.0.0"

LOGIN_EMAIL_KEY = 'login_email'

st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #1f77b4;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .welcome-box {
        background: linear-gradient(135deg, #1f77b4 0%, #2196f3 100%);
        color: white;
        padding: 2rem;
        border-radius: 0.75rem;
        margin-bottom: 2rem;
    }

    .welcome-title {
        font-size: 1.75rem;
        font-weight: 600;
        margin-bottom: 0.5rem;
    }

    .info-card {
        background: #f8f9fa;
        padding: 1.5rem;
        border-radius: 0.5rem;
        border-left: 4px solid #1f77b4;
        margin-bottom: 1rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== INITIALIZATION ====================

auth = AuthManager()

# ==================== HELPER FUNCTIONS ====================

def show_email_step():
    with st.form("login_email_form", clear_on_submit=False):
        st.markdown("#### 🔐 Login")
        email = st.text_input("Email", placeholder="you@company.com", key="login_email_input")
        submit = st.form_submit_button("📧 Send Code", type="primary", use_container_width=True)

        if submit:
            with st.spinner("Sending code..."):
                success, result = auth.request_otp(email)
            if success:
                st.session_state[LOGIN_EMAIL_KEY] = email.strip()
                st.rerun()
            else:
                st.error(result.get("error", "Failed to send OTP"))


def show_code_step(email: str):
    st.info(f"📧 A 6-digit code was sent to **{email}**")
    with st.form("login_code_form", clear_on_submit=True):
        code = st.text_input("Code", max_chars=6, placeholder="123456", key="login_code_input")

        col_btn1, col_btn2 = st.columns(2)
        with col_btn1:
            submit = st.form_submit_button("🔑 Verify", type="primary", use_container_width=True)
        with col_btn2:
            back = st.form_submit_button("↩️ Change Email", use_container_width=True)

        if back:
            st.session_state.pop(LOGIN_EMAIL_KEY, None)
            st.rerun()

        if submit:
            with st.spinner("Verifying..."):
                success, result = auth.verify_otp(email, code)
            if success:
                st.session_state.pop(LOGIN_EMAIL_KEY, None)
                st.success("✅ Login successful!")
                st.rerun()
            else:
                st.error(result.get("error", "Verification failed"))


def show_login_page():
    """Display the login page"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Sample requests and orders across your team</p>', unsafe_allow_html=True)

    # Check database connection
    db_ok, db_error = check_db_connection()
    if not db_ok:
        st.error(f"⚠️ {db_error}")
        st.info("Please check your network connection or contact IT support.")
        return

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        pending_email = st.session_state.get(LOGIN_EMAIL_KEY)
        if pending_email:
            show_code_step(pending_email)
        else:
            show_email_step()

        with st.expander("ℹ️ Need Help?"):
            st.info("""
            - Login with your registered work email
            - The code expires after a few minutes; request a new one if needed
            - Session expires after 8 hours
            """)


def show_main_app(session):
    """Display the main application after login"""

    # Sidebar
    with st.sidebar:
        st.markdown(f"### 👤 {session.name}")
        st.caption(f"Role: {session.role.display_name}")
        st.markdown("---")

        if st.button("🚪 Logout", use_container_width=True):
            auth.logout()
            st.rerun()

    st.markdown(f"""
    <div class="welcome-box">
        <div class="welcome-title">Welcome, {session.name}! 👋</div>
        <div>Select a page from the sidebar menu to get started.</div>
    </div>
    """, unsafe_allow_html=True)

    st.markdown("### 📊 Available Pages")

    st.markdown("""
    <div class="info-card">
        <strong>📊 Dashboard</strong><br>
        <span style="color: #666;">Sample KPIs, quota usage and order KPIs at a glance.</span>
    </div>
    <div class="info-card">
        <strong>📦 Sample Requests</strong><br>
        <span style="color: #666;">Sample request list, quota utilisation per employee and book rankings.</span>
    </div>
    <div class="info-card">
        <strong>🧾 Orders</strong><br>
        <span style="color: #666;">Order overview, customer analysis and book rankings.</span>
    </div>
    """, unsafe_allow_html=True)

    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION}
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    session = auth.get_session()
    if session is None:
        show_login_page()
    else:
        show_main_app(session)


if __name__ == "__main__":
    main()
