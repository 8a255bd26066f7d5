"""Chart and Streamlit helpers for the dashboard."""
