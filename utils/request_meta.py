# utils/request_meta.py
from typing import Optional

from fastapi import Request


def client_ip(request: Request) -> Optional[str]:
     """Best-effort client address, honouring proxy headers."""
     forwarded = request.headers.get("x-forwarded-for")
     if forwarded:
          return forwarded.split(",")[0].strip()
     real_ip = request.headers.get("x-real-ip")
     if real_ip:
          return real_ip.strip()
     if request.client:
          return request.client.host
     return None


def user_agent(request: Request) -> Optional[str]:
     agent = request.headers.get("user-agent")
     return agent[:500] if agent else None
