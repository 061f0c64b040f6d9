"""Streamlit viewer for the update log collection."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import streamlit as st

from update_log_sync.config import load_config
from update_log_sync.logging_config import configure_logging
from update_log_sync.storage import UpdateLogStorage, build_storage
from update_log_sync.viewer_logic import filter_logs, logs_to_frame, summarize_logs

CONFIG_PATH = Path("config.yaml")


class StreamlitNotifier:
    def warn(self, message: str) -> None:
        st.warning(message, icon="⚠️")


def build_viewer_storage() -> UpdateLogStorage:
    config = load_config(CONFIG_PATH)
    configure_logging(config.logging_level)
    return build_storage(config, notifier=StreamlitNotifier())


def _format_latest(value: pd.Timestamp | None) -> str:
    if value is None:
        return "n/a"
    return value.strftime("%Y-%m-%d %H:%M")


def _render_connection(storage: UpdateLogStorage) -> None:
    info = storage.get_config_info()
    st.sidebar.header("GitHub")
    if info is None:
        st.sidebar.info(
            "GitHub is not configured; logs are read from the local cache only. "
            "Run `update-log-sync configure` to connect a repository."
        )
        return

    st.sidebar.markdown(f"[{info.username}/{info.repo}]({info.repo_url}) on `{info.branch}`")
    if st.sidebar.button("Pull from GitHub"):
        logs = storage.sync_from_github()
        st.sidebar.success(f"Pulled {len(logs)} records")
    if st.sidebar.button("Push local cache to GitHub"):
        if storage.sync_to_github():
            st.sidebar.success("Pushed local cache to GitHub")


def main() -> None:
    st.set_page_config(page_title="Update Log Viewer", layout="wide")
    st.title("Update Logs")

    storage = build_viewer_storage()
    _render_connection(storage)

    logs_df = logs_to_frame(storage.load())
    if logs_df.empty:
        st.info("No update logs yet. Add one with `update-log-sync add --record '{...}'`.")
        return

    summary = summarize_logs(logs_df)
    col1, col2 = st.columns(2)
    col1.metric("Records", f"{summary['records']:,}")
    col2.metric("Latest entry", _format_latest(summary["latest"]))

    query = st.text_input("Search", value="")
    filtered = filter_logs(logs_df, query)
    if filtered.empty:
        st.info("No records match the current search.")
        return

    st.dataframe(filtered, hide_index=True, use_container_width=True)


if __name__ == "__main__":
    main()
