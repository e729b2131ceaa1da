from src.shared.exceptions import InvalidIdentifier


def get_client_ip(request):
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return xff.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR") or "Unknown"


def get_user_agent(request):
    return request.META.get("HTTP_USER_AGENT") or "Unknown"


def query_flag(request, name: str) -> bool:
    """True when a query parameter is present with a non-empty, non-false value."""
    raw = request.query_params.get(name)
    if raw is None:
        return False
    return str(raw).strip().lower() not in {"", "0", "false", "no", "off"}


def parse_pk(raw, label="listing") -> int:
    value = str(raw or "").strip()
    if not value.isdigit() or int(value) <= 0:
        raise InvalidIdentifier(f"Invalid {label} ID format")
    return int(value)
