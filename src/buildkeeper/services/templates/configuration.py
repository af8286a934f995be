"""Build configuration merging and summaries."""

from collections.abc import Mapping
from typing import Any

from buildkeeper.exceptions import ValidationError

INSTALL_DIR_KEY = "InstallDir"
EXTRA_FLAGS_KEY = "ExtraFlags"


def merge_configuration(
    defaults: Mapping[str, Any],
    overrides: Mapping[str, Any] | None = None,
    use_defaults: bool = True,
) -> dict[str, Any]:
    """
    Merge template defaults with explicitly supplied values.

    Args:
        defaults: Template default configuration
        overrides: Explicit key/value pairs; they win per key
        use_defaults: Start from the defaults; when False only overrides are used

    Returns:
        New merged configuration
    """
    merged: dict[str, Any] = dict(defaults) if use_defaults else {}
    if overrides:
        merged.update(overrides)
    return merged


def _format_value(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list | tuple):
        return ",".join(_format_value(v) for v in value)
    return str(value)


def summarize_configuration(configuration: Mapping[str, Any]) -> str:
    """
    Flatten a configuration into the sorted 'Key=Value;Key=Value' summary
    stored with each build.

    The injected install directory is derived from the commit hash and is left out.
    """
    return ";".join(
        f"{key}={_format_value(configuration[key])}" for key in sorted(configuration) if key != INSTALL_DIR_KEY
    )


def parse_overrides(items: list[str]) -> dict[str, Any]:
    """
    Parse KEY=VALUE strings from the command line.

    'true'/'false' become booleans and comma separated values become lists.
    ExtraFlags and values containing '=' (such as '-DFOO=a,b') stay strings.
    """
    overrides: dict[str, Any] = {}
    for item in items:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValidationError("config.invalid_override", item=item)

        value: Any = raw
        if raw.lower() in ("true", "false"):
            value = raw.lower() == "true"
        elif "," in raw and key != EXTRA_FLAGS_KEY and "=" not in raw:
            value = [part.strip() for part in raw.split(",") if part.strip()]
        overrides[key] = value
    return overrides
