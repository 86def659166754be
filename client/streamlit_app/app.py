"""Streamlit client for the encrypted questionnaire assessment."""
from __future__ import annotations

import streamlit as st

from fhe_core.errors import AssessmentError
from streamlit_app.questions import QUESTIONS, RESPONSE_OPTIONS
from streamlit_app.session import AssessmentSession, SessionState
from streamlit_app.state import get_session


def render_intro(session: AssessmentSession) -> None:
    st.header("Confidential assessment")
    st.write(
        f"This assessment consists of {session.question_count} questions. "
        "Your answers are encrypted on this device; the server only ever sees ciphertexts."
    )
    key_id = session.key_manager.key_id
    if key_id:
        st.caption(f"Active key_id: {key_id}")
    if st.button("Start assessment"):
        session.start()
        st.rerun()


def render_question(session: AssessmentSession) -> None:
    question = QUESTIONS[session.step - 1]
    st.progress(session.step / session.question_count, text=f"Question {session.step} of {session.question_count}")
    st.subheader(question.text)
    if question.description:
        st.caption(question.description)

    options = list(RESPONSE_OPTIONS)
    current = session.current_answer
    choice = st.radio(
        "Response",
        options,
        index=options.index(current) if current in options else None,
        format_func=RESPONSE_OPTIONS.get,
        key=f"question-{question.id}",
    )
    if choice is not None and choice != current:
        session.answer(choice)

    col_back, col_next = st.columns(2)
    if col_back.button("Back"):
        session.back()
        st.rerun()
    is_last = session.step == session.question_count
    if col_next.button("Submit" if is_last else "Next", disabled=session.current_answer is None):
        if is_last:
            with st.spinner("Encrypting and analysing..."):
                try:
                    session.submit()
                except AssessmentError:
                    pass  # the session keeps the error message for render_error
        else:
            session.advance()
        st.rerun()


def render_result(session: AssessmentSession) -> None:
    result = session.result
    st.header("Assessment result")
    st.metric("Depression level", result.label)
    st.metric("Confidence", f"{result.confidence}%")
    st.info("This screening is not a diagnosis. Please consult a professional if you are concerned.")
    if st.button("Take again"):
        session.reset()
        st.rerun()


def render_error(session: AssessmentSession) -> None:
    st.error(f"Assessment failed: {session.error}")
    col_retry, col_edit, col_reset = st.columns(3)
    if col_retry.button("Retry"):
        try:
            session.retry()
        except AssessmentError:
            pass  # state and message are already updated
        st.rerun()
    if col_edit.button("Edit answers"):
        session.resume()
        st.rerun()
    if col_reset.button("Start over"):
        session.reset()
        st.rerun()


def main():
    st.set_page_config(page_title="Encrypted Assessment", layout="centered")
    session = get_session()

    if session.state is SessionState.INIT:
        try:
            session.prepare_keys()
        except AssessmentError as e:
            st.error(f"❌ Key setup failed: {e}")
            return

    if st.sidebar.button("Forget my keys"):
        session.forget_keys()
        st.sidebar.success("Keys cleared")
        st.rerun()

    if session.state is SessionState.KEYS_READY:
        render_intro(session)
    elif session.state is SessionState.ANSWERING:
        render_question(session)
    elif session.state is SessionState.RESULT:
        render_result(session)
    elif session.state is SessionState.ERROR:
        render_error(session)


if __name__ == "__main__":
    main()
