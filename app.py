# app.py

import asyncio
import contextlib
import io

import pandas as pd
import streamlit as st

from data_loader import ExtractionInputError
from nlp.parser import set_debug
from services.candidate_store import CandidateStore
from services.resume_processor import ResumeProcessor

st.set_page_config(page_title="Resume Candidate Extractor", page_icon="🧾", layout="wide")
st.title("Resume Candidate Extractor")

if "candidate_store" not in st.session_state:
    st.session_state["candidate_store"] = CandidateStore()
store: CandidateStore = st.session_state["candidate_store"]

with st.sidebar:
    st.header("Options")
    extract_additional = st.checkbox("Extract additional fields", value=False)
    use_model = st.checkbox("Use model-assisted extraction", value=False)
    debug_enabled = st.checkbox("Enable parser debug logs", value=False)
    st.markdown("---")
    if st.button("Clear all candidates"):
        removed = store.delete_all()
        st.success(f"Removed {removed} candidates.")

uploads = st.file_uploader(
    "Upload resumes (PDF/DOCX/TXT) or emails with resume attachments (EML)",
    type=["pdf", "docx", "txt", "eml"],
    accept_multiple_files=True,
)

if uploads and st.button("Process uploads"):
    processor = ResumeProcessor(
        store,
        use_model=use_model,
        extract_additional_fields=extract_additional,
    )
    documents = []
    emails = []
    for uploaded in uploads:
        data = uploaded.read()
        if uploaded.name.lower().endswith(".eml"):
            emails.append((uploaded.name, data))
        else:
            documents.append((uploaded.name, data))

    eml_results = []
    log_buffer = io.StringIO()
    with contextlib.redirect_stdout(log_buffer):
        set_debug(debug_enabled)
        try:
            results = asyncio.run(processor.process_batch(documents))
            for name, data in emails:
                try:
                    eml_results.append((name, asyncio.run(processor.process_eml(data))))
                except ExtractionInputError as err:
                    st.error(f"{name}: {err}")
        finally:
            set_debug(False)
    st.session_state["last_parse_log"] = log_buffer.getvalue()

    succeeded = [r for r in results if r["status"] == "success"]
    failed = [r for r in results if r["status"] == "failed"]
    if succeeded:
        st.success(f"Extracted {len(succeeded)} candidates.")
    for result in failed:
        st.error(f"{result['file']}: {result['error']}")
    for name, outcome in eml_results:
        info = outcome["email_info"]
        st.info(
            f"{name}: \"{info.get('subject') or '(no subject)'}\" from {info.get('from') or 'unknown'} - "
            f"{len(outcome['candidates'])} candidates from {len(outcome['attachments'])} attachments"
        )
        if outcome["skipped"]:
            st.caption("Skipped attachments: " + ", ".join(outcome["skipped"]))
        for error in outcome["errors"]:
            st.error(f"{name} / {error['filename']}: {error['error']}")

col_main, col_logs = st.columns([2, 1], gap="large")

with col_main:
    candidates = store.list()
    st.subheader(f"Candidates ({len(candidates)})")
    if candidates:
        rows = [
            {
                "Name": c.get("name"),
                "Email": c.get("email"),
                "Phone": c.get("phone"),
                "Experience": c.get("experience"),
                "LinkedIn": c.get("linkedin_url"),
                "Primary Skills": ", ".join(c.get("primary_skills") or []),
                "Secondary Skills": ", ".join(c.get("secondary_skills") or []),
                "Method": c.get("extraction_method"),
                "File": c.get("original_file_name"),
            }
            for c in candidates
        ]
        st.dataframe(pd.DataFrame(rows), use_container_width=True)

        selected = st.selectbox(
            "Inspect candidate",
            options=[c["id"] for c in candidates],
            format_func=lambda cid: f"{store.get(cid)['name']} ({store.get(cid).get('original_file_name')})",
        )
        record = store.get(selected)
        if record:
            st.json({k: v for k, v in record.items() if k != "raw_text"})
            with st.expander("Extracted text"):
                st.text_area("Raw text", value=record.get("raw_text", ""), height=300)
    else:
        st.info("No candidates yet. Upload resumes to get started.")

    stats = store.statistics()
    if stats["total_candidates"]:
        st.subheader("Statistics")
        metric_cols = st.columns(3)
        metric_cols[0].metric("Candidates", stats["total_candidates"])
        metric_cols[1].metric("Avg. experience (years)", stats["avg_experience"])
        metric_cols[2].metric("LinkedIn profiles", stats["linkedin_profiles"])
        if stats["top_skills"]:
            st.bar_chart(pd.Series(stats["top_skills"], name="Candidates"))
        st.bar_chart(pd.Series(stats["experience_distribution"], name="Candidates"))

with col_logs:
    log_tab, = st.tabs(["Logs"])
    with log_tab:
        log_output = st.session_state.get("last_parse_log", "")
        if log_output.strip():
            st.code(log_output.rstrip())
        elif debug_enabled:
            st.info("No debug output was produced.")
        else:
            st.info("Enable parser debug logs to see step-by-step output here.")
