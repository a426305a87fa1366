import ast
import colorsys
import contextlib
import math
import re
from typing import List, Optional, Tuple, Union, cast

import webcolors  # type: ignore

from .const import (
    DEFAULT_KELVIN,
    MAC_LENGTH,
    MAX_HSB,
    MAX_KELVIN,
    MAX_POWER_LEVEL,
    MIN_HSB,
    MIN_KELVIN,
    POWER_OFF,
    POWER_ON,
    TARGET_LENGTH,
)

HSBK = Tuple[int, int, int, int]

_MAC_RE = re.compile(r"^[0-9a-f]{2}([:-])(?:[0-9a-f]{2}\1){4}[0-9a-f]{2}$")
_MAC_BARE_RE = re.compile(r"^[0-9a-f]{12}$")
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|\u00b5s|ms|s|m|h)")
_DURATION_UNITS_MS = {
    "ns": 1e-6,
    "us": 1e-3,
    "\u00b5s": 1e-3,
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
}


class utils:
    @staticmethod
    def color_object_to_tuple(
        color: Union[Tuple[int, ...], str]
    ) -> Optional[Tuple[int, int, int]]:

        # see if it's already a color tuple
        if isinstance(color, tuple) and len(color) == 3:
            return cast(Tuple[int, int, int], color)

        # can't convert non-string
        if not isinstance(color, str):
            return None
        color = color.strip()

        # try to convert from an english name
        with contextlib.suppress(Exception):
            return cast(Tuple[int, int, int], tuple(webcolors.name_to_rgb(color)))

        # try to convert an web hex code
        with contextlib.suppress(Exception):
            return cast(
                Tuple[int, int, int],
                tuple(webcolors.hex_to_rgb(webcolors.normalize_hex(color))),
            )

        # try to convert a string RGB tuple
        with contextlib.suppress(Exception):
            val = ast.literal_eval(color)
            if type(val) is not tuple or len(val) != 3:
                raise Exception
            if any(type(c) is not int or c < 0 or c > 255 for c in val):
                raise Exception
            return cast(Tuple[int, int, int], val)

        return None

    @staticmethod
    def color_object_to_hsbk(
        color: Union[Tuple[int, ...], str], kelvin: int = DEFAULT_KELVIN
    ) -> Optional[HSBK]:
        """Convert a color name, web hex code or RGB triple to HSBK."""
        rgb = utils.color_object_to_tuple(color)
        if rgb is None:
            return None
        h, s, v = colorsys.rgb_to_hsv(rgb[0] / 255, rgb[1] / 255, rgb[2] / 255)
        return (
            round(h * MAX_HSB),
            round(s * MAX_HSB),
            round(v * MAX_HSB),
            kelvin,
        )

    @staticmethod
    def get_color_names_list() -> List[str]:
        return sorted(set(webcolors.names(webcolors.CSS3)))


def validate_hsbk(hue: int, saturation: int, brightness: int, kelvin: int) -> HSBK:
    for name, value in (
        ("hue", hue),
        ("saturation", saturation),
        ("brightness", brightness),
    ):
        if not (MIN_HSB <= value <= MAX_HSB):
            raise ValueError(
                f"{name.title()} of {value} is not valid and must be between {MIN_HSB} and {MAX_HSB}"
            )
    if not (MIN_KELVIN <= kelvin <= MAX_KELVIN):
        raise ValueError(
            f"Kelvin of {kelvin} is not valid and must be between {MIN_KELVIN} and {MAX_KELVIN}"
        )
    return (hue, saturation, brightness, kelvin)


def hsbk_to_string(color: HSBK) -> str:
    hue, saturation, brightness, kelvin = color
    return f"{{Hue:{hue} Saturation:{saturation} Brightness:{brightness} Kelvin:{kelvin}}}"


def power_to_string(level: int) -> str:
    if level == MAX_POWER_LEVEL:
        return POWER_ON
    if level == 0:
        return POWER_OFF
    return str(level)


def split_list(values: Union[str, List[str], None]) -> List[str]:
    """Flatten comma-separated flag values, dropping blanks."""
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    items = []
    for value in values:
        for item in value.split(","):
            item = item.strip()
            if item:
                items.append(item)
    return items


def parse_light_id(value: str) -> str:
    """Normalize a light id to a lower-case, colon separated MAC address.

    Accepts either a MAC address (``d0:73:d5:01:02:03``,
    ``D0-73-D5-01-02-03`` or ``D073D5010203``) or the decimal device id,
    which is the MAC stored little-endian in the 8 byte target field of the
    LIFX header.  A string of digits only is always a device id.
    """
    value = value.strip().lower()
    if _MAC_RE.match(value):
        return value.replace("-", ":")
    if _MAC_BARE_RE.match(value) and not value.isdigit():
        return ":".join(value[i : i + 2] for i in range(0, len(value), 2))
    if not value.isdigit():
        raise ValueError(f"{value} is not a MAC address or a numeric light ID")
    number = int(value)
    if number >= 1 << (8 * TARGET_LENGTH):
        raise ValueError(f"Light ID {value} does not fit in {TARGET_LENGTH} bytes")
    target = number.to_bytes(TARGET_LENGTH, "little")
    if any(target[MAC_LENGTH:]):
        raise ValueError(f"Light ID {value} is not a valid device target")
    return ":".join(f"{b:02x}" for b in target[:MAC_LENGTH])


def light_id_to_int(mac: str) -> int:
    raw = bytes.fromhex(mac.replace(":", "").replace("-", ""))
    if len(raw) != MAC_LENGTH:
        raise ValueError(f"{mac} is not a MAC address")
    return int.from_bytes(raw, "little")


def parse_duration(value: Union[str, float, int]) -> int:
    """Parse a transition duration into milliseconds.

    Takes durations such as ``500ms``, ``1.5s`` or ``1m30s``, with the
    units ns, us (or µs), ms, s, m and h.  A bare number is a number of
    seconds.
    """
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        value = value.strip().lower()
        if not value:
            raise ValueError("Empty duration")
        try:
            seconds = float(value)
        except ValueError:
            pos = 0
            total = 0.0
            for match in _DURATION_PART_RE.finditer(value):
                if match.start() != pos:
                    break
                total += float(match.group(1)) * _DURATION_UNITS_MS[match.group(2)]
                pos = match.end()
            if pos != len(value):
                raise ValueError(f"Invalid duration: {value}")
            return round(total)
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Invalid duration: {value}")
    return round(seconds * 1000)
