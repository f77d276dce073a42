"""Flat CSV encoding of record sets for export and bulk import.

The header comes from the first record's keys, so records with extra keys
lose them. Decoding turns the bare tokens ``null``, ``true`` and ``false``
into ``None``/``True``/``False``; every other value stays a string.
"""
import csv
from datetime import date
from io import StringIO

TOKENS = {"null": None, "true": True, "false": False}


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def encode(records):
    records = list(records)
    if not records:
        return ""
    headers = list(records[0].keys())
    buf = StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(headers)
    for rec in records:
        writer.writerow([_cell(rec.get(h)) for h in headers])
    return buf.getvalue().rstrip("\n")


def decode(text):
    reader = csv.reader(StringIO((text or "").strip()))
    headers = next(reader, None)
    if not headers:
        return []
    headers = [h.strip() for h in headers]
    out = []
    for row in reader:
        if not row:
            continue
        # rows that don't line up with the header are skipped
        if len(row) != len(headers):
            continue
        out.append({h: TOKENS.get(val, val) for h, val in zip(headers, row)})
    return out
