import streamlit as st
import pandas as pd

from domain.errors import ValidationError
from services.line_splitter import (
    last_carton_override_from_input,
    split_last_carton,
    suggest_last_carton_override,
)
from utils.formatting import format_carton_range


@st.dialog("Split Last Carton (LAST CTN)")
def split_last_carton_dialog(line_id: str, state_name: str):
    lines = st.session_state[state_name]
    line = next((ln for ln in lines if ln.id == line_id and not ln.is_deleted), None)
    if line is None:
        st.error("Line tidak ditemukan.")
        return

    df = pd.DataFrame(
        [
            ("PO #", line.po_no),
            ("Style #", line.style_no),
            ("C/T No", format_carton_range(line.carton_no_from, line.carton_no_to)),
            ("Cartons", line.cartons),
            ("Qty", line.qty),
        ],
        columns=["Key", "Value"],
    )
    st.dataframe(df.astype(str), hide_index=True)

    prefill = suggest_last_carton_override(line)
    qty = st.number_input("LAST CTN Qty", min_value=0.0, value=float(prefill.qty), step=1.0)
    nw = st.number_input("LAST CTN NW", min_value=0.0, value=float(prefill.nw_per_carton), step=0.1)
    gw = st.number_input("LAST CTN GW", min_value=0.0, value=float(prefill.gw_per_carton), step=0.1)
    cbm_text = st.text_input("LAST CTN CBM", value=str(prefill.cbm_per_carton))

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Split", type="primary", key="split_yes"):
            try:
                override = last_carton_override_from_input(qty, nw, gw, cbm_text, line_id=line_id)
                st.session_state[state_name] = split_last_carton(lines, line_id, override)
            except ValidationError as e:
                st.error(str(e))
            else:
                st.rerun()
    with col_no:
        if st.button("Batal", key="split_no"):
            st.rerun()
