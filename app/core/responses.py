from typing import Any


def success_response(items: Any, **extra: Any) -> dict:
    return {
        "ok": True,
        **extra,
        "items": items,
    }


def error_response(
    code: str, message: str, trace_id: str, status: int = 400, details: dict | None = None
) -> tuple[dict, int]:
    return (
        {
            "ok": False,
            "error": message,
            "code": code,
            "trace_id": trace_id,
            **(details or {}),
        },
        status,
    )
