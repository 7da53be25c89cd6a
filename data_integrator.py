import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dotenv import load_dotenv
from supabase import create_client, Client

from domain.models import InvoiceHeader, InvoiceLine, PackingListLine
from services.totals import packing_list_totals
from utils.normalize import (
    normalize_invoice_header,
    normalize_invoice_lines,
    normalize_packing_lines,
)

load_dotenv()

logger = logging.getLogger(__name__)

PACKING_LIST_HEADERS = "packing_list_headers"
PACKING_LIST_LINES = "packing_list_lines"
INVOICE_HEADERS = "invoice_headers"
INVOICE_LINES = "invoice_lines"

_client: Optional[Client] = None


def get_client() -> Client:
    global _client
    if _client is None:
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_KEY")
        if not url or not key:
            raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
        _client = create_client(url, key)
    return _client


def get_schema() -> str:
    return os.getenv("SCHEMA") or "public"


def _table(client: Optional[Client], table_name: str):
    return (client or get_client()).schema(get_schema()).table(table_name)


def is_stored_id(line_id: str) -> bool:
    # ids made up on the client (e.g. "<id>__LAST5") are not rows yet
    return bool(line_id) and "__" not in line_id


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

def packing_line_payload(line: PackingListLine, packing_list_id: str) -> Dict[str, Any]:
    """
    Row written to packing_list_lines.

    Per-carton values go out under both the *_per_carton and *_per_ctn
    names; totals are the recomputed ones.
    """
    payload = {
        "packing_list_id": packing_list_id,
        "line_no": line.line_no,
        "po_no": line.po_no or None,
        "style_no": line.style_no or None,
        "description": line.description or None,
        "cartons": line.cartons,
        "carton_no_from": line.carton_no_from,
        "carton_no_to": line.carton_no_to,
        "qty": line.qty,
        "nw_per_carton": line.nw_per_carton,
        "gw_per_carton": line.gw_per_carton,
        "cbm_per_carton": line.cbm_per_carton,
        "nw_per_ctn": line.nw_per_carton,
        "gw_per_ctn": line.gw_per_carton,
        "cbm_per_ctn": line.cbm_per_carton,
        "total_nw": line.total_nw,
        "total_gw": line.total_gw,
        "total_cbm": line.total_cbm,
        "is_deleted": line.is_deleted,
    }
    if is_stored_id(line.id):
        payload["id"] = line.id
    return payload


def invoice_line_payload(line: InvoiceLine, invoice_id: str) -> Dict[str, Any]:
    payload = {
        "invoice_id": invoice_id,
        "po_no": line.po_no or None,
        "line_no": line.line_no,
        "style_no": line.style_no or None,
        "description": line.description or None,
        "material_content": line.material_content or None,
        "hs_code": line.hs_code or None,
        "qty": line.qty,
        "unit_price": line.unit_price,
        "amount": line.amount,
        "is_deleted": line.is_deleted,
    }
    if is_stored_id(line.id):
        payload["id"] = line.id
    return payload


# ---------------------------------------------------------------------------
# Packing list
# ---------------------------------------------------------------------------

def fetch_packing_list_lines(
        packing_list_id: str,
        client: Optional[Client] = None,
) -> Tuple[bool, str, List[PackingListLine]]:
    """
    Returns (ok, message, lines), deleted lines included.
    """
    try:
        resp = (
            _table(client, PACKING_LIST_LINES)
            .select("*")
            .eq("packing_list_id", packing_list_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", []

        if not resp.data:
            return True, "No rows found", []

        return True, "Fetched", normalize_packing_lines(resp.data)

    except Exception as e:
        logger.warning("Fetching packing list %s failed: %s", packing_list_id, e)
        return False, f"Unexpected error: {e}", []


def save_packing_list_lines(
        packing_list_id: str,
        lines: Sequence[PackingListLine],
        client: Optional[Client] = None,
) -> Tuple[bool, str, int]:
    """
    Write the recomputed lines and the header totals.
    Stored lines are upserted by id; lines created on the client are
    inserted. Returns (ok, message, number_of_rows_written).
    """
    stored = [packing_line_payload(ln, packing_list_id) for ln in lines if is_stored_id(ln.id)]
    new = [packing_line_payload(ln, packing_list_id) for ln in lines if not is_stored_id(ln.id)]

    try:
        written = 0
        if stored:
            resp = _table(client, PACKING_LIST_LINES).upsert(stored, on_conflict="id").execute()
            if getattr(resp, "error", None):
                return False, f"Upsert lines failed: {resp.error}", written
            written += len(stored)

        if new:
            resp = _table(client, PACKING_LIST_LINES).insert(new).execute()
            if getattr(resp, "error", None):
                return False, f"Insert lines failed: {resp.error}", written
            written += len(new)

        totals = packing_list_totals(lines)
        resp = (
            _table(client, PACKING_LIST_HEADERS)
            .update(
                {
                    "total_cartons": totals.total_cartons,
                    "total_qty": totals.total_qty,
                    "total_nw": totals.total_nw,
                    "total_gw": totals.total_gw,
                    "total_cbm": totals.total_cbm,
                }
            )
            .eq("id", packing_list_id)
            .execute()
        )
        if getattr(resp, "error", None):
            return False, f"Update header totals failed: {resp.error}", written

        logger.info("Saved %d lines of packing list %s", written, packing_list_id)
        return True, "Saved", written

    except Exception as e:
        logger.warning("Saving packing list %s failed: %s", packing_list_id, e)
        return False, str(e), 0


def sync_packing_list_lines(
        packing_list_id: str,
        lines: Sequence[PackingListLine],
        client: Optional[Client] = None,
) -> Tuple[bool, str, List[PackingListLine]]:
    """
    Save, then read the lines back. Lines split on the client come back
    with their stored ids, so saving the result again updates them
    instead of inserting them a second time.
    Returns (ok, message, lines); on failure the given lines are returned.
    """
    ok, msg, written = save_packing_list_lines(packing_list_id, lines, client=client)
    if not ok:
        return False, msg, list(lines)

    ok, fetch_msg, fresh = fetch_packing_list_lines(packing_list_id, client=client)
    if not ok:
        return False, f"Saved, but reload failed: {fetch_msg}", list(lines)

    return True, f"{msg}: {written} lines", fresh


# ---------------------------------------------------------------------------
# Invoice
# ---------------------------------------------------------------------------

def fetch_invoice(
        invoice_id: str,
        client: Optional[Client] = None,
) -> Tuple[bool, str, Optional[Tuple[InvoiceHeader, List[InvoiceLine]]]]:
    """
    Returns (ok, message, (header, lines)).
    """
    try:
        header_resp = (
            _table(client, INVOICE_HEADERS)
            .select("*")
            .eq("id", invoice_id)
            .limit(1)
            .execute()
        )

        if getattr(header_resp, "error", None):
            return False, f"Fetch header failed: {header_resp.error}", None

        if not header_resp.data:
            return False, "Invoice not found", None

        lines_resp = (
            _table(client, INVOICE_LINES)
            .select("*")
            .eq("invoice_id", invoice_id)
            .execute()
        )

        if getattr(lines_resp, "error", None):
            return False, f"Fetch lines failed: {lines_resp.error}", None

        header = normalize_invoice_header(header_resp.data[0])
        lines = normalize_invoice_lines(lines_resp.data or [])
        return True, "Fetched", (header, lines)

    except Exception as e:
        logger.warning("Fetching invoice %s failed: %s", invoice_id, e)
        return False, f"Unexpected error: {e}", None


def soft_delete_line(
        table_name: str,
        line_id: str,
        client: Optional[Client] = None,
) -> Tuple[bool, str]:
    """
    Lines are never removed, only flagged.
    """
    try:
        resp = (
            _table(client, table_name)
            .update({"is_deleted": True})
            .eq("id", line_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Delete failed: {resp.error}"

        return True, "Deleted"

    except Exception as e:
        return False, str(e)
