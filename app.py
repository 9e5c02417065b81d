import streamlit as st

from core.config import configure_logging
from core.engine import underwrite
from core.integrations import narrative_generator
from core.presets import BENCHMARK_RATE_PCT, DISCLAIMER
from domus import __version__
from domus.models import InvalidScenarioError
from ui.deal_form import render_deal_form
from ui.result_view import render_result

configure_logging()


def reset_tool():
    for key in ("deal_values", "quote"):
        st.session_state.pop(key, None)


def main():
    st.set_page_config(page_title="Domus Lending DSCR Quote", layout="centered")
    st.title("DSCR Soft Quote")
    st.caption(
        f"Instant analysis of cash-flow, leverage and direct matrix pricing. "
        f"Qualification assumes a {BENCHMARK_RATE_PCT:.2f}% benchmark rate. v{__version__}"
    )

    if "quote" not in st.session_state:
        scenario = render_deal_form()
        if scenario is not None:
            try:
                st.session_state["quote"] = (scenario, underwrite(scenario))
            except InvalidScenarioError as exc:
                st.error(f"Invalid scenario: {exc}")
            else:
                st.rerun()
        st.caption(DISCLAIMER)
        return

    scenario, result = st.session_state["quote"]
    render_result(scenario, result, narrative_generator())
    st.button("Try another scenario", on_click=reset_tool)


main()
