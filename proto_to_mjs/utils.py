"""
Common utilities that are shared across the type mapper, the generator and the
plugin entrypoint
"""

# Standard
from typing import List

# First Party
import alog

log = alog.use_channel("P2MUT")


def _split_snake(snake_str: str) -> List[str]:
    """Split a snake_case string into its non-empty segments"""
    return [part for part in snake_str.split("_") if part]


def _upper_first(part: str) -> str:
    return part[0].upper() + part[1:]


def snake_to_camel_case(snake_str: str) -> str:
    """Convert a snake_case string to camelCase

    The first segment is kept as is and every following segment gets its first
    character upper-cased. Empty segments (leading, trailing or doubled
    underscores) are skipped.
    """
    if not snake_str:
        return snake_str
    parts = snake_str.split("_")
    if not parts[0]:
        # NOTE: A leading underscore means the first real segment is not the
        #   "first word", so it is capitalized like the others
        return "".join(_upper_first(part) for part in _split_snake(snake_str))
    return parts[0] + "".join(_upper_first(part) for part in parts[1:] if part)


def snake_to_pascal_case(snake_str: str) -> str:
    """Convert a snake_case string to PascalCase"""
    if not snake_str:
        return snake_str
    return "".join(_upper_first(part) for part in _split_snake(snake_str))


def change_extension(path: str, new_ext: str) -> str:
    """Replace the trailing extension of path with new_ext. If the path has no
    extension, new_ext is appended. A dot that lives in a directory segment is
    not treated as an extension separator.

    Args:
        path:  str
            The file path to rewrite
        new_ext:  str
            The new extension, including the leading "."

    Returns:
        new_path:  str
            The rewritten path
    """
    dot_pos = path.rfind(".")
    if dot_pos < 0:
        return path + new_ext
    slash_pos = max(path.rfind("/"), path.rfind("\\"))
    if dot_pos < slash_pos:
        log.debug3("Dot in %s belongs to a directory, appending %s", path, new_ext)
        return path + new_ext
    return path[:dot_pos] + new_ext
