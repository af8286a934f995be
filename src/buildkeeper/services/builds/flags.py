"""Command-line flag templating from build configurations."""

import shlex
from collections.abc import Mapping
from typing import Any

from buildkeeper.services.templates.configuration import EXTRA_FLAGS_KEY

FlagTemplate = str | list[str]


def _format_value(value: Any, true_value: str, false_value: str, list_separator: str) -> str:  # noqa: ANN401
    if isinstance(value, bool):
        return true_value if value else false_value
    if isinstance(value, list | tuple):
        return list_separator.join(str(v) for v in value)
    return str(value)


def render_flags(
    flag_map: Mapping[str, FlagTemplate],
    configuration: Mapping[str, Any],
    true_value: str = "ON",
    false_value: str = "OFF",
    list_separator: str = ";",
) -> list[str]:
    """
    Render command-line flags for the configuration keys a tool understands.

    Args:
        flag_map: Configuration key -> flag template ('-DCMAKE_BUILD_TYPE={value}')
            or a list of token templates (['--framework', '{value}'])
        configuration: Merged build configuration
        true_value: Rendering of True
        false_value: Rendering of False
        list_separator: Separator used to join list values

    Returns:
        Flags in flag_map order, followed by ExtraFlags verbatim. Keys that are
        absent or None produce nothing.
    """
    flags: list[str] = []
    for key, template in flag_map.items():
        value = configuration.get(key)
        if value is None:
            continue
        rendered = _format_value(value, true_value, false_value, list_separator)
        tokens = [template] if isinstance(template, str) else template
        flags.extend(token.format(value=rendered) for token in tokens)

    extra = configuration.get(EXTRA_FLAGS_KEY)
    if isinstance(extra, str):
        flags.extend(shlex.split(extra))
    elif extra:
        flags.extend(str(flag) for flag in extra)

    return flags
