import secrets
from typing import Any, Dict, Optional

# Excludes I, O, 0 and 1, which read alike
ACCESS_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

SECRET_KEY_MARKERS = ("password", "secret", "api_key")


def generate_access_code(length: int = 16) -> str:
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(length))


def build_connection_values(
    resource_id: int, resource_type: Optional[str], metadata: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    """
    Derive per-booking connection details from a resource's metadata.

    Secret-looking keys get a fresh code for every booking, everything else is
    copied. Missing essentials are filled with defaults for the resource type.
    """
    values: Dict[str, Any] = {}
    for key, value in (metadata or {}).items():
        if any(marker in key.lower() for marker in SECRET_KEY_MARKERS):
            values[key] = generate_access_code(12)
        else:
            values[key] = value

    host = f"lab-{resource_id}.example.com"
    resource_type = resource_type or "SSH"

    if resource_type in ("SSH", "RDP"):
        if not values.get("host") and not values.get("ip"):
            values["host"] = host
        values.setdefault("port", 22 if resource_type == "SSH" else 3389)
        values.setdefault("username", "labuser")
        if not values.get("password"):
            values["password"] = generate_access_code(12)
    elif resource_type == "WEB_URL":
        if not values.get("url") and not values.get("base_url"):
            values["url"] = f"https://{host}"
    elif resource_type == "VPN":
        values.setdefault("server", f"vpn-{resource_id}.example.com")
    elif resource_type == "API_KEY":
        if not values.get("api_key"):
            values["api_key"] = generate_access_code(12)
        values.setdefault("endpoint", f"https://api-{resource_id}.example.com")

    return values
