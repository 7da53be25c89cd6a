import streamlit as st
import pandas as pd

from data_integrator import fetch_packing_list_lines, sync_packing_list_lines
from element_component import split_last_carton_dialog
from services.carton_sequencer import clear_carton_numbers, sequence_cartons
from services.packing_list_service import (
    PACKING_LIST_COLUMNS,
    build_packing_list,
    packing_list_csv,
    packing_list_table_rows,
)
from utils.formatting import format_carton_range, format_cbm, format_qty, format_weight
from utils.normalize import normalize_packing_line

st.set_page_config(page_title="Packing List", page_icon="📦")
st.sidebar.header("📦 Packing List")

STATE_LINES = "pl_lines"
EDITABLE_COLUMNS = [
    "cartons",
    "carton_no_from",
    "carton_no_to",
    "qty",
    "nw_per_carton",
    "gw_per_carton",
    "cbm_per_carton",
]

if STATE_LINES not in st.session_state:
    st.session_state[STATE_LINES] = []

# -----------------------------------------------------------------------------
# 1) Load
# -----------------------------------------------------------------------------
packing_list_id = st.text_input("Packing List ID")

if st.button("Load", disabled=not packing_list_id):
    ok, msg, lines = fetch_packing_list_lines(packing_list_id)
    if not ok:
        st.error(msg)
    else:
        st.session_state[STATE_LINES] = lines
        if not lines:
            st.warning(msg)

lines = st.session_state[STATE_LINES]
if not lines:
    st.stop()

# -----------------------------------------------------------------------------
# 2) Edit lines
# -----------------------------------------------------------------------------
col_auto, col_reset = st.columns(2)
with col_auto:
    if st.button("Auto C/T No"):
        st.session_state[STATE_LINES] = sequence_cartons(lines)
        st.rerun()
with col_reset:
    if st.button("Reset C/T No"):
        st.session_state[STATE_LINES] = clear_carton_numbers(lines)
        st.rerun()

alive = [ln for ln in lines if not ln.is_deleted]
df_edit = pd.DataFrame(
    [
        {
            "id": ln.id,
            "po_no": ln.po_no,
            "style_no": ln.style_no,
            "description": ln.description,
            **{col: getattr(ln, col) for col in EDITABLE_COLUMNS},
        }
        for ln in alive
    ]
)

edited = st.data_editor(
    df_edit,
    hide_index=True,
    disabled=["id", "po_no", "style_no", "description"],
    column_config={"cbm_per_carton": st.column_config.NumberColumn(format="%.4f")},
    key="pl_editor",
)

# NaN cells from the editor become blanks so normalization reads them as empty
edited_rows = edited.astype(object).where(pd.notnull(edited), None).to_dict("records")
# editor rows follow `alive` one to one, so match them by position
edited_alive = iter(
    normalize_packing_line({**row, "line_no": ln.line_no}) for row, ln in zip(edited_rows, alive)
)
lines = [ln if ln.is_deleted else next(edited_alive, ln) for ln in lines]
st.session_state[STATE_LINES] = lines

st.subheader("Split LAST CTN")
split_options = {
    ln.id: f"{ln.po_no} / {ln.style_no} ({format_carton_range(ln.carton_no_from, ln.carton_no_to)})"
    for ln in lines
    if not ln.is_deleted and ln.cartons >= 2
}
if split_options:
    split_id = st.selectbox("Line", options=list(split_options), format_func=split_options.get)
    if st.button("Split LAST CTN"):
        split_last_carton_dialog(split_id, STATE_LINES)
else:
    st.caption("Tidak ada line dengan 2 karton atau lebih.")

st.divider()

# -----------------------------------------------------------------------------
# 3) Grouped table + totals
# -----------------------------------------------------------------------------
document = build_packing_list(lines, auto_carton_no=False)

table = []
for row in packing_list_table_rows(document):
    if row["kind"] == "po":
        table.append({col: "" for col in PACKING_LIST_COLUMNS} | {"C/T No": row["label"]})
    else:
        table.append({col: row.get(col, "") for col in PACKING_LIST_COLUMNS})

st.subheader("Packing List")
st.dataframe(pd.DataFrame(table, columns=PACKING_LIST_COLUMNS), width='stretch', hide_index=True)

totals = document.totals
col_ctn, col_qty, col_nw, col_gw, col_cbm = st.columns(5)
col_ctn.metric("Cartons", format_qty(totals.total_cartons))
col_qty.metric("Qty", format_qty(totals.total_qty))
col_nw.metric("NW", format_weight(totals.total_nw))
col_gw.metric("GW", format_weight(totals.total_gw))
col_cbm.metric("CBM", format_cbm(totals.total_cbm))

st.download_button(
    "Download as CSV",
    data=packing_list_csv(document),
    file_name="packing_list.csv",
    mime="text/csv",
)

if st.button("Save", type="primary"):
    ok, msg, saved = sync_packing_list_lines(packing_list_id, sequence_cartons(lines))
    if ok:
        # stored rows replace the client-made split lines
        st.session_state[STATE_LINES] = saved
        st.success(msg)
    else:
        st.error(msg)
