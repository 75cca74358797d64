"""
BatchScribe Streamlit UI: main entry point.

Run with: ``streamlit run batchscribe/ui/app.py``

Queues audio files on the backend, starts a sequential batch run, shows
per-file progress while it runs, and offers per-file and bulk downloads.
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from batchscribe.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (batchscribe/ui/),
# which removes the project root needed for absolute imports.
# ---------------------------------------------------------------------------
import sys  # noqa: E402
import time  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from batchscribe.core.config import get_settings  # noqa: E402
from batchscribe.core.utils import format_file_size  # noqa: E402
from batchscribe.services.intake import ACCEPTED_FORMATS  # noqa: E402
from batchscribe.ui.api_client import APIError, get_api_client  # noqa: E402

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="BatchScribe",
    page_icon="\U0001f3a7",
    layout="wide",
)

_settings = get_settings()

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "api_base_url": _settings.ui_api_base_url,
    "api_key": _settings.api_key,
    "transcription_base_url": _settings.base_url,
    "selected_model": _settings.default_model,
    "upload_key": 0,
}

for key, value in _DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value

_STATUS_ICONS = {
    "pending": "⏳",
    "processing": "\U0001f504",
    "completed": "✅",
    "error": "❌",
}

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("\U0001f3a7 BatchScribe")
    st.caption("Batch audio transcription")
    st.divider()
    st.session_state.api_base_url = st.text_input(
        "Backend API URL",
        value=st.session_state.api_base_url,
        help="URL of the BatchScribe FastAPI backend server",
    )

    client = get_api_client(st.session_state.api_base_url)
    _conn_ok, _conn_msg = client.check_connection()
    if _conn_ok:
        st.success(f"Backend: {_conn_msg}")
    else:
        st.error(f"Backend: {_conn_msg}")

    st.divider()
    st.subheader("Transcription API")
    st.session_state.api_key = st.text_input(
        "API key",
        value=st.session_state.api_key,
        type="password",
    )
    st.session_state.transcription_base_url = st.text_input(
        "Base URL",
        value=st.session_state.transcription_base_url,
    )

    try:
        models = client.list_models()
    except APIError:
        models = []
    labels = {m["identifier"]: m["display_name"] for m in models}
    if models:
        options = list(labels)
        current = st.session_state.selected_model
        st.session_state.selected_model = st.selectbox(
            "Model",
            options=options,
            index=options.index(current) if current in options else 0,
            format_func=lambda ident: labels.get(ident, ident),
        )
        chosen = next(m for m in models if m["identifier"] == st.session_state.selected_model)
        if chosen.get("description"):
            st.caption(chosen["description"])
        if chosen.get("speed") or chosen.get("accuracy"):
            st.caption(f"Speed: {chosen.get('speed') or '-'} · Accuracy: {chosen.get('accuracy') or '-'}")

    if st.button("Fetch models from API", use_container_width=True):
        try:
            client.refresh_models(
                api_key=st.session_state.api_key,
                base_url=st.session_state.transcription_base_url,
            )
            st.rerun()
        except APIError as exc:
            st.error(f"Could not fetch models: {exc.message}")

# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------
st.header("Audio Files")
st.caption("Accepted formats: " + ", ".join(ACCEPTED_FORMATS))

uploads = st.file_uploader(
    "Drop audio files here or browse",
    accept_multiple_files=True,
    key=f"uploader_{st.session_state.upload_key}",
)
skip_check = st.checkbox(
    "Queue every selected file (skip the format check)",
    help="Files are sent as picker uploads; the server may still filter them "
    "when strict format checking is enabled.",
)
col_add, col_folder = st.columns([1, 3])
with col_add:
    if st.button("Add files", disabled=not uploads):
        try:
            added = client.upload_files(
                [(u.name, u.getvalue()) for u in uploads],
                source="picker" if skip_check else "drop",
            )
            st.toast(f"Queued {len(added)} of {len(uploads)} file(s)")
            st.session_state.upload_key += 1
            st.rerun()
        except APIError as exc:
            st.error(exc.message)
with col_folder:
    folder = st.text_input("Import a local folder (searched recursively)", placeholder="/path/to/audio")
    if st.button("Import folder", disabled=not folder):
        try:
            added = client.import_folder(folder)
            st.toast(f"Queued {len(added)} file(s) from folder")
            st.rerun()
        except APIError as exc:
            st.error(exc.message)

# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------
try:
    files = client.list_files()
    status = client.batch_status()
except APIError as exc:
    st.error(exc.message)
    st.stop()

running = status.get("running", False)
pending = status.get("counts", {}).get("pending", 0)

col_title, col_run = st.columns([4, 1])
with col_title:
    st.subheader(f"Queue ({len(files)})")
with col_run:
    if st.button(
        "Processing..." if running else "Start transcription",
        type="primary",
        disabled=running or pending == 0 or not st.session_state.api_key.strip(),
    ):
        try:
            client.run_batch(
                model=st.session_state.selected_model,
                api_key=st.session_state.api_key,
                base_url=st.session_state.transcription_base_url,
            )
            st.rerun()
        except APIError as exc:
            st.error(exc.message)

for entry in files:
    col_name, col_state, col_remove = st.columns([4, 4, 1])
    with col_name:
        st.markdown(f"**{entry['file_name']}**")
        st.caption(format_file_size(entry["size"]))
    with col_state:
        icon = _STATUS_ICONS.get(entry["status"], "")
        if entry["status"] == "processing":
            st.progress(entry["progress"] / 100, text=f"{icon} {entry['progress']}%")
        elif entry["status"] == "error":
            st.error(f"{icon} {entry['error']}")
        else:
            st.write(f"{icon} {entry['status']}")
    with col_remove:
        if st.button("\U0001f5d1", key=f"remove_{entry['id']}"):
            try:
                client.remove_file(entry["id"])
                st.rerun()
            except APIError as exc:
                st.error(exc.message)

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
try:
    results = client.list_results()
except APIError as exc:
    st.error(f"Could not load transcriptions: {exc.message}")
    results = []

if results:
    st.divider()
    col_title, col_all = st.columns([4, 1])
    with col_title:
        st.subheader(f"Transcriptions ({len(results)})")
    with col_all:
        try:
            all_name, all_data = client.download_all_results()
            st.download_button(
                "Download all",
                data=all_data,
                file_name=all_name,
                mime="text/plain",
            )
        except APIError as exc:
            st.error(exc.message)

    for result in results:
        with st.expander(f"{result['file_name']} · {result['timestamp']}"):
            # st.code renders a copy-to-clipboard button
            st.code(result["transcription"], language=None, wrap_lines=True)
            try:
                name, data = client.download_result(result["id"])
            except APIError as exc:
                st.warning(f"Download unavailable: {exc.message}")
                continue
            st.download_button(
                "Download",
                data=data,
                file_name=name,
                mime="text/plain",
                key=f"download_{result['id']}",
            )

# Poll while the backend works through the batch
if running:
    time.sleep(1.0)
    st.rerun()
