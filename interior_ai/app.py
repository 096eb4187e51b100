"""
🏡 InteriorAI - room style analysis and AI redesign

This app enables users to:
1. Upload an interior photo (or pick one of three samples)
2. Get the room's design style and a curated shopping list
3. See an AI-generated redesign of the same room with those items added

Main components:
- image_ingestion.py: upload validation and sample downloads
- analysis_client.py: style analysis with a vision model
- visualization_client.py: redesign image generation
- state_machine.py / design_session.py: the upload -> analysis -> redesign flow
"""

import logging
import time
from datetime import datetime

import streamlit as st
import pandas as pd

from interior_ai.config import check_api_keys, SAMPLE_IMAGES, POLL_INTERVAL
from interior_ai.design_session import DesignSession
from interior_ai.errors import ImageIngestionError
from interior_ai.image_ingestion import ingest_upload, decode_data_url, SampleLoader
from interior_ai.models import UploadStatus, VisualizationStatus
from interior_ai.session_tracker import SessionTracker
from interior_ai.state_machine import can_reset, can_toggle_to_generated

logger = logging.getLogger(__name__)

PRICE_DISCLAIMER = (
    "Prices are estimates based on current market averages for this style. "
    "Actual availability and pricing may vary by retailer."
)


def init_session_state():
    """Create the per-session objects once."""
    if 'tracker' not in st.session_state:
        st.session_state.tracker = SessionTracker()
    if 'design_session' not in st.session_state:
        st.session_state.design_session = DesignSession(tracker=st.session_state.tracker)
    if 'sample_loader' not in st.session_state:
        st.session_state.sample_loader = SampleLoader()
    if 'ingestion_error' not in st.session_state:
        st.session_state.ingestion_error = None
    if 'uploader_key' not in st.session_state:
        st.session_state.uploader_key = 0


def _report_ingestion_error(error: ImageIngestionError):
    st.session_state.ingestion_error = str(error)
    st.session_state.tracker.track_event('ingestion_errors', message=str(error))


def on_file_uploaded():
    """file_uploader callback: one "image selected" event per new file."""
    uploaded_file = st.session_state.get(f"uploader_{st.session_state.uploader_key}")
    if uploaded_file is None:
        return
    try:
        image = ingest_upload(uploaded_file.name, uploaded_file.type, uploaded_file.getvalue())
    except ImageIngestionError as e:
        _report_ingestion_error(e)
        return
    st.session_state.ingestion_error = None
    st.session_state.design_session.select_image(image)


def on_sample_clicked(index: int):
    """Sample button callback: start the download, the slot stays held until collected."""
    loader: SampleLoader = st.session_state.sample_loader
    if loader.start(index, st.session_state.design_session.executor):
        st.session_state.ingestion_error = None


def collect_sample():
    """Hand a finished sample download to the session (one "image selected" event)."""
    loader: SampleLoader = st.session_state.sample_loader
    try:
        image = loader.collect()
    except ImageIngestionError as e:
        _report_ingestion_error(e)
        return
    if image is not None:
        st.session_state.design_session.select_image(image)


def on_reset():
    st.session_state.design_session.reset()
    # New widget key so the old file is not picked up again
    st.session_state.uploader_key += 1


def render_uploader():
    st.markdown("## Transform your space.")
    st.write(
        "Upload a photo or choose an example below to instantly analyze the style "
        "and get curated shopping recommendations tailored to your taste."
    )

    loader: SampleLoader = st.session_state.sample_loader
    st.file_uploader(
        "Upload an interior photo",
        type=["jpg", "jpeg", "png", "webp"],
        help="Drag and drop or click to browse (JPG, PNG, WEBP)",
        key=f"uploader_{st.session_state.uploader_key}",
        on_change=on_file_uploaded,
        disabled=loader.is_loading,
    )

    st.caption("✨ Or try an example")
    columns = st.columns(len(SAMPLE_IMAGES))
    for index, (col, sample) in enumerate(zip(columns, SAMPLE_IMAGES)):
        with col:
            st.image(sample["url"], use_container_width=True)
            if loader.loading_index == index:
                st.caption("⏳ Loading...")
            st.button(
                sample["label"],
                key=f"sample_{index}",
                on_click=on_sample_clicked,
                args=(index,),
                disabled=loader.is_loading,
                use_container_width=True,
            )


def render_shopping_list(items):
    st.subheader("🛍️ Curated Shopping List")
    if not items:
        st.info("No recommendations generated.")
    else:
        df = pd.DataFrame([
            {
                "Item Name": item.item_name,
                "Category": item.category,
                "Material / Color": item.recommendation,
                "Est. Price": item.estimated_price,
            }
            for item in items
        ])
        st.dataframe(df, hide_index=True, use_container_width=True)
    st.caption(f"🏷️ {PRICE_DISCLAIMER}")


def render_view_toggle(session: DesignSession):
    state = session.state
    col1, col2 = st.columns(2)
    with col1:
        st.button(
            "Original",
            key="view_original",
            type="secondary" if state.show_generated else "primary",
            on_click=session.toggle_view,
            args=(False,),
            use_container_width=True,
        )
    with col2:
        st.button(
            "✨ AI Redesign",
            key="view_generated",
            type="primary" if state.show_generated else "secondary",
            on_click=session.toggle_view,
            args=(True,),
            disabled=not can_toggle_to_generated(state),
            use_container_width=True,
        )
    if state.visualization == VisualizationStatus.IN_PROGRESS:
        st.caption("⏳ Generating redesign...")


def render_preview(session: DesignSession):
    state = session.state
    if state.status == UploadStatus.SUCCESS:
        render_view_toggle(session)

    if state.show_generated and state.generated_image:
        st.image(decode_data_url(state.generated_image), caption="AI Redesign", use_container_width=True)
    elif state.preview is not None:
        st.image(state.preview, caption="Uploaded interior", use_container_width=True)

    if can_reset(state):
        st.button("🔄 Upload new photo", key="reset_btn", on_click=on_reset)


def render_results(session: DesignSession):
    state = session.state
    if state.status == UploadStatus.ERROR and state.error_message:
        st.error(f"⚠️ {state.error_message}")
        st.button("Try Again", key="try_again_btn", on_click=on_reset)

    if state.status == UploadStatus.SUCCESS and state.result is not None:
        st.caption("✨ ANALYSIS RESULT")
        st.markdown(f"### {state.result.design_style}")
        st.write(state.result.description)
        render_shopping_list(state.result.shopping_list)


def render_sidebar():
    tracker: SessionTracker = st.session_state.tracker
    if not tracker.events:
        return
    with st.sidebar.expander("📊 Session Insights", expanded=False):
        insights = tracker.get_session_insights()
        st.metric("Rooms Analyzed", insights['rooms_analyzed'])
        st.metric("Redesigns Generated", insights['redesigns_generated'])
        if insights['analysis_failures']:
            st.metric("Analysis Failures", insights['analysis_failures'])
        if insights['redesign_failures']:
            st.metric("Redesign Failures", insights['redesign_failures'])
        st.metric("Session Time", f"{insights['session_duration']}s")


def main_app():
    """Main function to run the Streamlit application."""
    init_session_state()
    session: DesignSession = st.session_state.design_session
    session.poll()
    collect_sample()

    st.title("🏠 InteriorAI")

    if st.session_state.ingestion_error:
        st.error(st.session_state.ingestion_error)
        st.session_state.ingestion_error = None

    if session.status == UploadStatus.IDLE:
        render_uploader()
    else:
        render_preview(session)
        if session.status == UploadStatus.ANALYZING:
            with st.spinner("Analyzing Design Style..."):
                while session.status == UploadStatus.ANALYZING and session.is_busy:
                    time.sleep(POLL_INTERVAL)
                    session.poll()
            st.rerun()
        render_results(session)

    render_sidebar()
    st.divider()
    st.caption(f"© {datetime.now().year} InteriorAI. Powered by OpenAI.")

    # Keep polling while a sample downloads or a redesign is being generated
    if session.is_busy or st.session_state.sample_loader.is_loading:
        time.sleep(POLL_INTERVAL)
        st.rerun()


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    st.set_page_config(page_title="InteriorAI", page_icon="🏠", layout="centered")
    if not check_api_keys():
        st.warning("⚠️ OPENAI_API_KEY is not set - add it to your .env file to analyze rooms.")
    main_app()


if __name__ == "__main__":
    main()
