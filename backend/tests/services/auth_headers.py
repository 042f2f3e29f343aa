"""HTTP Basic header helpers for admin and protected-site requests."""

import base64

ADMIN_PASSWORD = "Letmein1"


def basic_auth(username: str, password: str = ADMIN_PASSWORD) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}
