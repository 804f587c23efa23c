from typing import Any, Dict


def success(**data) -> Dict[str, Any]:
    return {"status": "success", "data": data}


def failure(message: str, detail: Any, production: bool) -> Dict[str, Any]:
    """Error envelope; the underlying detail is only exposed outside production."""
    return {
        "status": "error",
        "message": message,
        "error": {} if production else detail,
    }


def not_found(path: str) -> Dict[str, Any]:
    return {"status": "fail", "message": f"Can't find {path} on this server!"}
