# frontend/streamlit_app.py
import os
import uuid
from datetime import datetime, date, time

import requests
import streamlit as st

# -----------------------------------------------------------------------------
# Initial state
# Here I make sure every session variable exists before it is used.
# -----------------------------------------------------------------------------

# logged in user as returned by /api/login or /api/register ({id, username, email, type})
if "user" not in st.session_state:
    st.session_state.user = None

# last interview scheduled in this browser session (used by the status tab)
if "last_interview" not in st.session_state:
    st.session_state.last_interview = None


# -----------------------------------------------------------------------------
# Page config
# -----------------------------------------------------------------------------
st.set_page_config(
    page_title="CareerCatalyst - Mock Interviews",
    layout="wide",
)

st.markdown(
    """
    <style>
        .stApp {
            background: linear-gradient(135deg, #667eea, #764ba2);
        }

        [data-testid="stSidebar"] {
            background: linear-gradient(180deg, #2d2a5a, #3b2f6b);
        }

        [data-testid="stSidebar"] p,
        [data-testid="stSidebar"] span,
        [data-testid="stSidebar"] label,
        [data-testid="stSidebar"] h1,
        [data-testid="stSidebar"] h2,
        [data-testid="stSidebar"] h3 {
            color: #f5f5f5;
        }

        [data-testid="stSidebar"] pre,
        [data-testid="stSidebar"] code {
            background-color: #1f1c40 !important;
            color: #f5f5f5 !important;
        }

        [data-testid="stHeader"] {
            background: transparent;
        }

        .block-container {
            background-color: #f8f9fa;
            padding: 2rem 2.5rem 2.5rem 2.5rem;
            margin: 2.5rem 2rem 2.5rem 0.5rem;
            border-radius: 10px;
            max-width: 1100px;
            box-shadow: 0 0 10px rgba(0, 0, 0, 0.08);
        }

        .block-container h1 {
            text-align: center;
            color: #667eea;
        }
    </style>
    """,
    unsafe_allow_html=True,
)

st.title("CareerCatalyst")
st.write("Create an account, schedule a mock interview and check when your interview link opens. "
         "Links are only active 15 minutes before and after the scheduled time.")
st.divider()


# -----------------------------------------------------------------------------
# Backend config (ENV > autodetect)
# -----------------------------------------------------------------------------
DEFAULT_BACKEND = os.getenv("BACKEND_URL")
CANDIDATES = [DEFAULT_BACKEND, "http://127.0.0.1:5000", "http://127.0.0.1:8000"]
MEETING_BASE_URL = os.getenv("MEETING_BASE_URL", "https://meet.jit.si/careercatalyst")


def detect_backend() -> str:
    """
    Here I call /health on each candidate URL and keep the first one that answers.
    If nobody answers I fall back to the default port of the API.
    """
    for url in [c for c in CANDIDATES if c]:
        try:
            r = requests.get(f"{url}/health", timeout=1.5)
            if r.ok:
                return url
        except requests.RequestException:
            continue
    return "http://127.0.0.1:5000"


if "backend_url" not in st.session_state:
    st.session_state.backend_url = detect_backend()

backend_url = st.session_state.backend_url


def api_error(r: requests.Response) -> str:
    """The API answers errors with {"error", "message"}; FastAPI validation uses "detail"."""
    try:
        body = r.json()
    except ValueError:
        return r.text
    return body.get("message") or body.get("error") or str(body.get("detail", body))


def to_epoch_ms(day: date, at: time) -> int:
    # date and time are read in the local timezone of the streamlit server
    return int(datetime.combine(day, at).astimezone().timestamp() * 1000)


# -----------------------------------------------------------------------------
# Sidebar
# Backend diagnostics and the current user.
# -----------------------------------------------------------------------------
st.sidebar.title("Settings")

st.sidebar.markdown("**Backend URL (detected)**")
st.sidebar.code(backend_url)

if st.sidebar.button("Detect again"):
    st.session_state.backend_url = detect_backend()
    backend_url = st.session_state.backend_url
    st.sidebar.success(f"Detected: {backend_url}")

if st.sidebar.button("Test /health"):
    try:
        r = requests.get(f"{backend_url}/health", timeout=5)
        r.raise_for_status()
        st.sidebar.success(f"OK: {r.json()}")
    except requests.RequestException as e:
        st.sidebar.error(f"Error: {e}")

st.sidebar.markdown("---")
if st.session_state.user:
    st.sidebar.markdown(f"Logged in as **{st.session_state.user['username']}**")
    st.sidebar.code(st.session_state.user["id"])
    if st.sidebar.button("Log out"):
        st.session_state.user = None
        st.session_state.last_interview = None
        st.rerun()
else:
    st.sidebar.info("Not logged in")


# -----------------------------------------------------------------------------
# Main UI
# -----------------------------------------------------------------------------
tab_account, tab_schedule, tab_status = st.tabs(["👤 Account", "📅 Schedule", "⏱️ Link status"])

with tab_account:
    if st.session_state.user:
        user = st.session_state.user
        try:
            r = requests.get(f"{backend_url}/api/user/{user['id']}", timeout=5)
            if r.ok:
                profile = r.json()
                st.markdown(f"**Username:** {profile['username']}")
                st.markdown(f"**Email:** {profile['email']}")
                st.markdown(f"**Type:** {profile.get('type') or '-'}")
                st.markdown(f"**Member since:** {profile['createdAt']}")
            else:
                st.warning(api_error(r))
        except requests.RequestException as e:
            st.error(f"Error calling backend: {e}")
    else:
        col_login, col_register = st.columns(2)

        with col_login:
            st.subheader("Login")
            with st.form("login"):
                username = st.text_input("Username")
                password = st.text_input("Password", type="password")
                submitted = st.form_submit_button("Login")
            if submitted:
                try:
                    r = requests.post(
                        f"{backend_url}/api/login",
                        json={"username": username, "password": password},
                        timeout=10,
                    )
                    if r.ok:
                        st.session_state.user = r.json()["user"]
                        st.rerun()
                    else:
                        st.error(api_error(r))
                except requests.RequestException as e:
                    st.error(f"Error calling backend: {e}")

        with col_register:
            st.subheader("Register")
            with st.form("register"):
                new_username = st.text_input("Username", key="reg_username")
                new_email = st.text_input("Email", key="reg_email")
                new_password = st.text_input("Password", type="password", key="reg_password")
                user_type = st.selectbox("I am a", ["candidate", "interviewer"])
                created = st.form_submit_button("Create account")
            if created:
                try:
                    r = requests.post(
                        f"{backend_url}/api/register",
                        json={
                            "username": new_username,
                            "email": new_email,
                            "password": new_password,
                            "userType": user_type,
                        },
                        timeout=10,
                    )
                    if r.ok:
                        st.session_state.user = r.json()["user"]
                        st.rerun()
                    else:
                        st.error(api_error(r))
                except requests.RequestException as e:
                    st.error(f"Error calling backend: {e}")


with tab_schedule:
    if not st.session_state.user:
        st.info("Log in on the **Account** tab to schedule an interview.")
    else:
        user = st.session_state.user
        with st.form("schedule"):
            interview_day = st.date_input("Interview date", min_value=date.today())
            interview_at = st.time_input("Interview time", value=time(10, 0))
            send_to = st.text_input("Send confirmation to", value=user["email"])
            scheduled = st.form_submit_button("Schedule and send confirmation")

        if scheduled:
            # here I generate the unique link of the interview room
            link = f"{MEETING_BASE_URL}-{uuid.uuid4().hex[:12]}"
            payload = {
                "to": send_to,
                "username": user["username"],
                "interviewDate": interview_day.isoformat(),
                "interviewTime": interview_at.strftime("%H:%M"),
                "interviewLink": link,
            }
            try:
                r = requests.post(f"{backend_url}/api/send-interview-confirmation", json=payload, timeout=30)
                if r.ok:
                    st.session_state.last_interview = {
                        **payload,
                        "interviewTimestamp": to_epoch_ms(interview_day, interview_at),
                    }
                    st.success(f"Confirmation sent to {send_to}.")
                    st.markdown(f"Your interview link: {link}")
                else:
                    st.error(api_error(r))
            except requests.RequestException as e:
                st.error(f"Error calling backend: {e}")

        st.markdown("---")
        st.markdown("### My interviews")
        try:
            r = requests.get(
                f"{backend_url}/api/interviews",
                params={"username": user["username"]},
                timeout=10,
            )
            r.raise_for_status()
            items = r.json()
            if items:
                st.dataframe(
                    [
                        {
                            "Date": i["interviewDate"],
                            "Time": i["interviewTime"],
                            "Link": i["interviewLink"],
                            "Sent to": i["email"],
                        }
                        for i in items
                    ],
                    use_container_width=True,
                )
            else:
                st.info("No interview scheduled yet.")
        except requests.RequestException as e:
            st.error(f"Error calling backend: {e}")


with tab_status:
    last = st.session_state.last_interview
    default_day = date.fromisoformat(last["interviewDate"]) if last else date.today()
    default_at = time.fromisoformat(last["interviewTime"]) if last else time(10, 0)

    status_day = st.date_input("Interview date", value=default_day, key="status_day")
    status_at = st.time_input("Interview time", value=default_at, key="status_at")

    if st.button("Check link status"):
        try:
            r = requests.post(
                f"{backend_url}/api/check-interview-status",
                json={"interviewTimestamp": to_epoch_ms(status_day, status_at)},
                timeout=5,
            )
            if r.ok:
                data = r.json()
                show = {"active": st.success, "inactive": st.info, "expired": st.warning}[data["status"]]
                show(data["message"])
                opens = datetime.fromtimestamp(data["windowOpensAt"] / 1000).strftime("%Y-%m-%d %H:%M")
                closes = datetime.fromtimestamp(data["windowClosesAt"] / 1000).strftime("%Y-%m-%d %H:%M")
                st.caption(f"The link is reachable from {opens} to {closes}.")
                if data["status"] == "active" and last:
                    st.markdown(f"[Join the interview]({last['interviewLink']})")
            else:
                st.error(api_error(r))
        except requests.RequestException as e:
            st.error(f"Error calling backend: {e}")
