"""Load and validate the YAML list of zones to snapshot."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import dns.exception
import dns.name
import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined
from pydantic import BaseModel, Field, field_validator

from .config import DEFAULT_TSIG_ALGORITHM, AppConfig, TsigKey
from .models import ValidationError, as_zone_name


class TsigSpec(BaseModel):
    """Schema for per-zone TSIG credentials."""

    name: str
    algorithm: str = DEFAULT_TSIG_ALGORITHM
    secret: str


class ZoneSpec(BaseModel):
    """Schema for one zone entry."""

    domain: str
    primary: str
    port: int | None = Field(default=None, ge=1, le=65535)
    tsig: TsigSpec | None = None

    @field_validator("domain")
    @classmethod
    def _absolute_domain(cls, value: str) -> str:
        """Normalise the zone name to its absolute form."""
        try:
            return as_zone_name(value).to_text()
        except dns.exception.DNSException as exc:
            raise ValueError(f"invalid zone name {value!r}: {exc}") from exc


class ZonesFileSpec(BaseModel):
    """Schema for the YAML document."""

    work_dir: str | None = None
    keep: int | None = Field(default=None, ge=1)
    zones: list[ZoneSpec] = Field(default_factory=list)


@dataclass(frozen=True)
class ZoneTarget:
    """A zone and the primary it is fetched from."""

    zone: dns.name.Name
    primary: str
    port: int
    tsig: TsigKey | None


@dataclass
class ZonesFile:
    """Zone targets plus file-level overrides."""

    targets: list[ZoneTarget]
    work_dir: Path | None
    keep: int | None

    def find(self, zone: str | dns.name.Name) -> ZoneTarget | None:
        """Return the target for zone, if it is listed."""
        wanted = as_zone_name(zone)
        for target in self.targets:
            if target.zone == wanted:
                return target
        return None


def _render_yaml(path: Path, extra_context: dict[str, Any] | None = None) -> str:
    """Render a YAML file through Jinja2."""
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    template = env.get_template(path.name)
    context = {"env": os.environ}
    if extra_context:
        context.update(extra_context)
    return template.render(**context)


def load_zones(
    path: Path,
    config: AppConfig,
    template_vars: dict[str, Any] | None = None,
) -> ZonesFile:
    """Load the zones YAML and resolve defaults from config."""
    rendered = _render_yaml(path, template_vars)
    try:
        data = yaml.safe_load(rendered) or {}
    except yaml.YAMLError as exc:  # noqa: BLE001
        raise ValidationError(f"Failed to parse YAML: {exc}") from exc

    try:
        spec = ZonesFileSpec(**data)
    except Exception as exc:  # noqa: BLE001
        raise ValidationError(f"YAML validation error: {exc}") from exc

    seen: set[str] = set()
    targets: list[ZoneTarget] = []
    for zone in spec.zones:
        if zone.domain in seen:
            raise ValidationError(f"Zone {zone.domain} is listed more than once.")
        seen.add(zone.domain)
        if zone.tsig is not None:
            tsig = TsigKey(name=zone.tsig.name, algorithm=zone.tsig.algorithm, secret=zone.tsig.secret)
        else:
            tsig = config.tsig
        targets.append(
            ZoneTarget(
                zone=dns.name.from_text(zone.domain),
                primary=zone.primary,
                port=zone.port or config.primary_port,
                tsig=tsig,
            )
        )

    work_dir = Path(spec.work_dir).resolve() if spec.work_dir else None
    return ZonesFile(targets=targets, work_dir=work_dir, keep=spec.keep)
