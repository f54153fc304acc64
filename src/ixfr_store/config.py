"""Environment-driven configuration loader."""

from __future__ import annotations

import base64
import os
import re
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_TSIG_ALGORITHM = "hmac-sha256"


@dataclass(frozen=True)
class TsigKey:
    """Holds TSIG credentials used to sign SOA queries and transfers."""

    name: str
    algorithm: str
    secret: str


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration values."""

    work_dir: Path
    zones_file: Path
    keep: int
    primary_port: int
    query_timeout: float | None
    axfr_timeout: float
    tsig: TsigKey | None
    log_level: str


KEYFILE_PATTERN = re.compile(
    r'key\s+"(?P<name>[^"]+)"\s*\{'
    r"(?P<body>.*?)"
    r"\}",
    re.IGNORECASE | re.DOTALL,
)
ALGORITHM_PATTERN = re.compile(
    r"algorithm\s+(?P<algorithm>[\w.-]+)\s*;",
    re.IGNORECASE,
)
SECRET_PATTERN = re.compile(
    r'secret\s+"(?P<secret>[^"]+)"\s*;',
    re.IGNORECASE,
)


def _parse_keyfile(encoded: str, overrides: dict[str, str | None]) -> TsigKey:
    """Decode and parse a base64-encoded BIND keyfile."""
    try:
        decoded = base64.b64decode(encoded).decode("utf-8")
    except Exception as exc:  # noqa: BLE001
        raise ValueError("Failed to decode TSIG key file base64 payload.") from exc

    match = KEYFILE_PATTERN.search(decoded)
    if not match:
        raise ValueError("TSIG key file does not match expected format.")
    body = match.group("body")
    name = overrides.get("name") or match.group("name")
    algo_match = ALGORITHM_PATTERN.search(body)
    secret_match = SECRET_PATTERN.search(body)
    algorithm = overrides.get("algorithm") or (algo_match.group("algorithm") if algo_match else None)
    secret = overrides.get("secret") or (secret_match.group("secret") if secret_match else None)

    if not all([name, algorithm, secret]):
        raise ValueError("TSIG key file missing name, algorithm, or secret.")

    return TsigKey(name=name, algorithm=algorithm, secret=secret)


def _load_tsig() -> TsigKey | None:
    """Return TSIG credentials from the environment, if any are configured."""
    overrides = {
        "name": os.getenv("IXFR_TSIG_NAME"),
        "algorithm": os.getenv("IXFR_TSIG_ALGORITHM"),
        "secret": os.getenv("IXFR_TSIG_SECRET"),
    }
    serialized_key = os.getenv("IXFR_TSIG_KEYFILE_B64", "")
    if serialized_key:
        return _parse_keyfile(serialized_key, overrides)
    if overrides["name"] and overrides["secret"]:
        return TsigKey(
            name=overrides["name"],
            algorithm=overrides["algorithm"] or DEFAULT_TSIG_ALGORITHM,
            secret=overrides["secret"],
        )
    if overrides["name"] or overrides["secret"]:
        raise ValueError("IXFR_TSIG_NAME and IXFR_TSIG_SECRET must be set together.")
    return None


def _parse_optional_float(value: str | None) -> float | None:
    """Return a float, or None for an unset or empty value."""
    if value is None or not value.strip():
        return None
    return float(value)


def load_config() -> AppConfig:
    """Load configuration values from the environment (and .env)."""
    load_dotenv()
    work_dir = Path(os.getenv("IXFR_WORK_DIR", "snapshots")).resolve()
    work_dir.mkdir(parents=True, exist_ok=True)

    keep = int(os.getenv("IXFR_KEEP", "20"))
    if keep < 1:
        raise ValueError("IXFR_KEEP must be at least 1.")

    return AppConfig(
        work_dir=work_dir,
        zones_file=Path(os.getenv("IXFR_ZONES_FILE", "zones.yml")).resolve(),
        keep=keep,
        primary_port=int(os.getenv("IXFR_PRIMARY_PORT", "53")),
        query_timeout=_parse_optional_float(os.getenv("IXFR_QUERY_TIMEOUT")),
        axfr_timeout=float(os.getenv("AXFR_TIMEOUT", "10")),
        tsig=_load_tsig(),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
