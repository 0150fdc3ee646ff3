# portal/invportal/serve.py
"""
Run the portal under uvicorn.

    HOST / PORT / RELOAD / LOG_LEVEL / FORWARDED_ALLOW_IPS
    SSL_CERTFILE / SSL_KEYFILE / SSL_CA_CERTS / SSL_KEYFILE_PASSWORD

Serving over TLS without SESSION_COOKIE_SECURE, or with the default
SECRET_KEY, is allowed but logged.
"""

import logging
import os
from typing import Any, Dict

import uvicorn

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080

# env var -> uvicorn keyword
SSL_SETTINGS = (
    ("SSL_CERTFILE", "ssl_certfile"),
    ("SSL_KEYFILE", "ssl_keyfile"),
    ("SSL_CA_CERTS", "ssl_ca_certs"),
    ("SSL_KEYFILE_PASSWORD", "ssl_keyfile_password"),
)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def _port() -> int:
    try:
        return int(os.getenv("PORT", str(DEFAULT_PORT)))
    except ValueError:
        return DEFAULT_PORT


def ssl_options() -> Dict[str, str]:
    return {keyword: os.environ[name] for name, keyword in SSL_SETTINGS if os.getenv(name)}


def uvicorn_options() -> Dict[str, Any]:
    return {
        "host": os.getenv("HOST", "0.0.0.0"),
        "port": _port(),
        "reload": _env_flag("RELOAD"),
        "log_level": os.getenv("LOG_LEVEL", "info"),
        "proxy_headers": True,
        "forwarded_allow_ips": os.getenv("FORWARDED_ALLOW_IPS", "*"),
        **ssl_options(),
    }


def _warn_on_weak_settings(options: Dict[str, Any]) -> None:
    from .client.http import BACKEND_URL
    from .security import SECRET_KEY, SESSION_COOKIE_SECURE

    if SECRET_KEY == "CHANGE_ME_IN_PRODUCTION":
        logger.warning("SECRET_KEY is not set; session cookies use the development key")
    if "ssl_certfile" in options and not SESSION_COOKIE_SECURE:
        logger.warning("Serving over TLS but SESSION_COOKIE_SECURE is off")
    logger.info(
        "Starting inventory portal",
        extra={"port": options["port"], "backend_url": BACKEND_URL},
    )


def main() -> None:
    options = uvicorn_options()
    _warn_on_weak_settings(options)
    uvicorn.run("invportal.main:app", **options)


if __name__ == "__main__":
    main()
