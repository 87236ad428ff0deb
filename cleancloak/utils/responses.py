# cleancloak/utils/responses.py

def format_response(success: bool, data=None, message: str = ""):
    return {
        "success": success,
        "data": data,
        "message": message,
    }

def format_error_response(exc, status_code=500, detail=None, errors=None):
    body = {
        "success": False,
        "error": {
            "type": exc.__class__.__name__,
            "detail": str(exc) if detail is None else detail,
            "status_code": status_code
        }
    }
    if errors is not None:
        body["errors"] = errors
    return body
