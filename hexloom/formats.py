import json
from typing import Dict, Tuple

_FIELDS = ("position", "count", "substrate", "workers", "value")


def serialize_result(value: str, fmt: str, meta: Dict) -> Tuple[bytes, str]:
    fmt = (fmt or "txt").lower().strip()
    if fmt == "txt":
        return (value + "\n").encode("ascii"), "text/plain"
    payload = dict(meta)
    payload["value"] = value
    if fmt == "json":
        return (
            json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8"),
            "application/json",
        )
    if fmt == "ndjson":
        out = json.dumps(payload, ensure_ascii=False, separators=(",", ":")) + "\n"
        return out.encode("utf-8"), "application/x-ndjson"
    if fmt in {"csv", "tsv"}:
        sep = "," if fmt == "csv" else "\t"
        row = [str(payload.get(f, "")) for f in _FIELDS]
        out = sep.join(_FIELDS) + "\n" + sep.join(row) + "\n"
        mime = "text/csv" if fmt == "csv" else "text/tab-separated-values"
        return out.encode("utf-8"), mime
    raise ValueError(f"unsupported format: {fmt}")
