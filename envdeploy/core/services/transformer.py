"""
Config transformer — point an environment config at its environment.

Two global text substitutions, in order:

    1. hostname placeholder (case-insensitive)  →  <environment>.<domain>
    2. any drive root ``X:\\``                    →  <target drive>:\\

Plain text rewriting; the input does not have to be valid XML.
Applying the transform to its own output changes nothing.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass

from envdeploy.core.errors import TransformError
from envdeploy.core.models.artifacts import EnvironmentConfig
from envdeploy.core.models.settings import DeploySettings

DRIVE_ROOT_RE = re.compile(r"[A-Za-z]:\\")


@dataclass(frozen=True)
class ConfigPreview:
    text: str
    truncated: bool
    total_chars: int

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "truncated": self.truncated,
            "total_chars": self.total_chars,
        }


def compute_hostname(environment: str, domain_suffix: str) -> str:
    return f"{environment}.{domain_suffix.lstrip('.')}"


def transform_config(
    raw: str,
    environment: str,
    domain_suffix: str,
    target_drive: str = "D",
    placeholder: str = "localhost",
) -> str:
    """Rewrite hostname placeholders and drive roots in ``raw``.

    Raises:
        TransformError: If the computed hostname itself contains the
            placeholder (a second run would rewrite it again).
    """
    hostname = compute_hostname(environment, domain_suffix)
    if placeholder.casefold() in hostname.casefold():
        raise TransformError(
            f"Hostname '{hostname}' contains the placeholder '{placeholder}'; "
            f"environment '{environment}' cannot be deployed with it"
        )
    drive_root = f"{target_drive.rstrip(':')}:\\"

    text = re.sub(re.escape(placeholder), lambda _m: hostname, raw, flags=re.IGNORECASE)
    return DRIVE_ROOT_RE.sub(lambda _m: drive_root, text)


def apply_transform(config: EnvironmentConfig, settings: DeploySettings) -> EnvironmentConfig:
    """Return a copy of ``config`` with ``transformed_content`` filled in."""
    transformed = transform_config(
        config.raw_content,
        config.environment_name,
        settings.domain_suffix,
        target_drive=settings.target_drive,
        placeholder=settings.hostname_placeholder,
    )
    return config.model_copy(update={"transformed_content": transformed})


def decode_config(data: bytes, source: str = "<config>") -> tuple[str, bool]:
    """Decode config bytes as UTF-8.

    Returns:
        (text, has_bom) — the BOM is stripped from the text.

    Raises:
        TransformError: If the bytes are not valid UTF-8.
    """
    has_bom = data.startswith(codecs.BOM_UTF8)
    if has_bom:
        data = data[len(codecs.BOM_UTF8):]
    try:
        return data.decode("utf-8"), has_bom
    except UnicodeDecodeError as e:
        raise TransformError(f"{source} is not valid UTF-8: {e}", path=source) from e


def encode_config(text: str, has_bom: bool = False) -> bytes:
    data = text.encode("utf-8")
    return codecs.BOM_UTF8 + data if has_bom else data


def preview(text: str, limit: int = 400) -> ConfigPreview:
    """Bounded-length prefix of ``text`` for dry-run output."""
    truncated = len(text) > limit
    return ConfigPreview(
        text=text[:limit] if truncated else text,
        truncated=truncated,
        total_chars=len(text),
    )
