from __future__ import annotations

import logging
import os

import streamlit as st

from src.dashboard.app import run_topics_app

LOGGER = logging.getLogger(__name__)


def main() -> None:
    dsn = os.getenv("SUPABASE_DB_URL") or os.getenv("DATABASE_URL")
    if not dsn:
        raise ValueError("SUPABASE_DB_URL or DATABASE_URL is required")

    st.set_page_config(page_title="Channel topic clusters", layout="wide")
    LOGGER.info("rendering topic clusters app")
    run_topics_app(dsn, configure_page=False)


if __name__ == "__main__":
    main()
