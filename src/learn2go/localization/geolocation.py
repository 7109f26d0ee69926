"""Best-effort IP geolocation."""

import httpx
import structlog

logger = structlog.get_logger()


async def lookup_country(
    url: str = "https://ipapi.co/json/",
    timeout: float = 3.0,
    client: httpx.AsyncClient | None = None,
) -> str | None:
    """Return the ISO country code of the caller's network origin.

    Any failure (network, HTTP status, malformed body, provider error)
    returns None so locale resolution can fall through to the browser
    locale heuristic.
    """
    own_client = client is None
    http = client or httpx.AsyncClient(timeout=timeout)
    try:
        response = await http.get(url)
        response.raise_for_status()
        data = response.json()
        if data.get("error"):
            raise ValueError(data.get("reason") or "provider error")
        code = data.get("country_code")
        if not code:
            return None
        return str(code).upper()
    except Exception as e:
        logger.warning("geolocation_failed", error=str(e))
        return None
    finally:
        if own_client:
            await http.aclose()
