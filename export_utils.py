"""
Serialization of hash results for download: plain text, JSON, CSV and QR code PNG.
"""
import io
import json
from datetime import datetime, timezone

import segno

MIME_TYPES = {
    "txt": "text/plain",
    "json": "application/json",
    "csv": "text/csv",
    "png": "image/png",
}


def hash_to_text(hash_value):
    return hash_value


def hash_to_qr_png(hash_value, scale=8):
    """PNG QR code of the digest, high error correction."""
    buf = io.BytesIO()
    segno.make_qr(hash_value, error="h").save(buf, kind="png", scale=scale, border=4)
    return buf.getvalue()


def hash_to_json(text, algorithm, hash_value, salt=None, salt_position=None):
    """JSON document for a single digest; salt fields only when salting was used."""
    payload = {
        "text": text,
        "algorithm": algorithm,
        "hash": hash_value,
    }
    if salt is not None:
        payload["salt"] = salt
        payload["saltPosition"] = salt_position
    return json.dumps(payload, indent=2, ensure_ascii=False)


def batch_to_csv(results):
    """CSV with a line,input,hash header; the input column is always quoted."""
    header = "line,input,hash\n"
    rows = []
    for r in results:
        quoted = r["input"].replace('"', '""')
        rows.append(f'{r["line"]},"{quoted}",{r["hash"]}')
    return header + "\n".join(rows)


def batch_to_json(results):
    return json.dumps(results, indent=2, ensure_ascii=False)


def history_to_json(items):
    return json.dumps(items, indent=2, ensure_ascii=False)


def single_filename(algorithm, fmt):
    return f"{algorithm}_hash.{fmt}"


def batch_filename(algorithm, fmt):
    return f"batch_hashes_{algorithm}.{fmt}"


def history_filename(now=None):
    now = now or datetime.now(timezone.utc)
    return f"hash_history_{now.strftime('%Y-%m-%dT%H-%M-%SZ')}.json"
