import streamlit as st
import pandas as pd

from data_integrator import fetch_invoice
from services.invoice_service import build_invoice, invoice_csv, invoice_table_rows
from utils.formatting import format_money, format_qty, origin_to_coo_text

st.set_page_config(page_title="Commercial Invoice", page_icon="🧾")
st.sidebar.header("🧾 Commercial Invoice")

invoice_id = st.text_input("Invoice ID")
if not invoice_id:
    st.stop()

ok, msg, data = fetch_invoice(invoice_id)
if not ok:
    st.error(msg)
    st.stop()

header, lines = data
document = build_invoice(header, lines)

st.subheader(f"Invoice {header.invoice_no or '-'}")
st.write(f"Buyer: **{header.buyer_name or '-'}** | Origin: **{origin_to_coo_text(header.shipping_origin_code) or '-'}**")

table = []
for row in invoice_table_rows(document):
    if row["kind"] == "po":
        table.append({col: "" for col in document.columns} | {"PO No": row["label"]})
    else:
        table.append({col: row.get(col, "") for col in document.columns})

st.dataframe(pd.DataFrame(table, columns=document.columns), width='stretch', hide_index=True)

col_qty, col_amt = st.columns(2)
col_qty.metric("Total Qty", format_qty(document.totals.total_qty))
col_amt.metric("Grand Total", f"{header.currency} {format_money(document.grand_total)}")

st.caption(
    "Material / HS Code selalu tampil untuk buyer LDC; buyer lain hanya jika ada "
    "minimal satu line yang terisi."
)

st.download_button(
    "Download as CSV",
    data=invoice_csv(document),
    file_name=f"invoice_{header.invoice_no or invoice_id}.csv",
    mime="text/csv",
)
