from fastapi import Request

from app.core.config import settings


def get_base_url(request: Request) -> str:
	"""Origin that share URLs are built on.

	Prefers the proxy-forwarded scheme and the request host; falls back to the
	configured public URL when no host header is present.
	"""
	host = request.headers.get("host")
	if not host:
		return settings.PUBLIC_BASE_URL.rstrip("/")
	scheme = request.headers.get("x-forwarded-proto") or request.url.scheme
	return f"{scheme.split(',')[0].strip()}://{host}"
