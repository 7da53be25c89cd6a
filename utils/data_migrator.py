import csv
import os
from typing import Dict, List, Iterable

from dotenv import load_dotenv
from supabase import create_client, Client

from data_integrator import PACKING_LIST_LINES, packing_line_payload
from services.carton_sequencer import sequence_cartons
from utils.normalize import normalize_packing_lines


BATCH_SIZE = 500


def chunked(items: List[Dict], size: int) -> Iterable[List[Dict]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def read_csv(file_name: str) -> tuple[List[Dict], List[str]]:
    """
    Reads a headered CSV and returns (rows, columns_from_header).
    Strips whitespace from headers and values.
    """
    with open(file_name, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames:
            raise ValueError("CSV has no header row. Add headers that match packing list columns.")

        columns = [c.strip() for c in reader.fieldnames if c and c.strip()]
        rows: List[Dict] = []

        for r in reader:
            obj = {}
            for k, v in r.items():
                if not k:
                    continue
                val = v.strip() if isinstance(v, str) else v
                # empty cell -> None so blanks normalize like NULLs
                obj[k.strip()] = None if val == "" else val
            rows.append({c: obj.get(c) for c in columns})

    return rows, columns


def prepare_packing_list_rows(rows: List[Dict], packing_list_id: str) -> List[Dict]:
    """
    Normalize CSV rows (any of the accepted column aliases), fill in C/T No
    ranges and turn them into packing_list_lines payloads.
    """
    lines = sequence_cartons(normalize_packing_lines(rows))
    return [packing_line_payload(line, packing_list_id) for line in lines]


def load_packing_list_csv(
    supabase: Client,
    schema_name: str,
    packing_list_id: str,
    file_name: str,
    batch_size: int = BATCH_SIZE,
) -> int:
    rows, header_cols = read_csv(file_name)

    if "cartons" not in header_cols:
        raise ValueError(f"CSV missing 'cartons' column. Found: {header_cols}")

    payloads = prepare_packing_list_rows(rows, packing_list_id)

    if not payloads:
        print("No rows to insert.")
        return 0

    total = 0
    for batch in chunked(payloads, batch_size):
        supabase.schema(schema_name).table(PACKING_LIST_LINES).insert(batch).execute()
        total += len(batch)
        print(f"Inserted {len(batch)} rows (running total: {total})")

    print(f"Done: {schema_name}.{PACKING_LIST_LINES} <- {file_name} ({total} rows)")
    return total


if __name__ == "__main__":
    load_dotenv()

    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_KEY = os.getenv("SUPABASE_KEY")  # use SERVICE_ROLE for scripts
    if not SUPABASE_URL or not SUPABASE_KEY:
        raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")

    supabase = create_client(SUPABASE_URL, SUPABASE_KEY)

    # ======= VARIABLES YOU CHANGE =======
    schema_name = os.getenv("SCHEMA") or "public"
    packing_list_id = os.getenv("PACKING_LIST_ID", "")
    file_name = "../raw_data/packing_list_lines.csv"
    # ====================================

    if not packing_list_id:
        raise RuntimeError("Set PACKING_LIST_ID to the packing list the rows belong to")

    load_packing_list_csv(
        supabase=supabase,
        schema_name=schema_name,
        packing_list_id=packing_list_id,
        file_name=file_name,
    )
