"""Session state helpers for Streamlit."""
from __future__ import annotations

import streamlit as st

from streamlit_app.api_client import get_client
from streamlit_app.fhe_keys import KeyManager
from streamlit_app.session import AssessmentSession


def init_session_state() -> None:
    if "assessment" not in st.session_state:
        st.session_state.assessment = AssessmentSession(KeyManager(), get_client())


def get_session() -> AssessmentSession:
    init_session_state()
    return st.session_state.assessment
