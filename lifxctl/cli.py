#!/usr/bin/env python
"""
This is a utility for discovering and controlling LIFX lights on the LAN.

All of the LIFX LAN protocol work is done by the lifxlan library, the code
here only turns command line flags into library calls.

##### Available:
* Listing lights on the LAN with their label, power and color
* Turning lights on/off
* Setting an HSBK color, or a color by name, web hex or RGB triple
* Transition durations for power and color changes
* Restricting any command to lights picked by ID (MAC) or label

Every command acts on all lights unless some are picked with --id/--label.
"""

import logging
from optparse import OptionGroup, OptionParser, Values
import sys
from typing import Any, List, NoReturn, Optional, Tuple

from lifxlan import WorkflowException  # type: ignore

from .client import LightClient
from .const import (
    DEFAULT_KELVIN,
    DEFAULT_TIMEOUT,
    MAX_KELVIN,
    MIN_KELVIN,
    POWER_OFF,
    POWER_ON,
    POWER_STATES,
    TABLE_COLUMNS,
    TABLE_PADDING,
)
from .exceptions import LightNotFoundError
from .utils import (
    HSBK,
    hsbk_to_string,
    parse_duration,
    parse_light_id,
    power_to_string,
    split_list,
    utils,
    validate_hsbk,
)

_LOGGER = logging.getLogger(__name__)

LIGHT_COMMANDS = ("list", "power", "color")


def _fatal(msg: str, *args: Any) -> NoReturn:
    _LOGGER.error(msg, *args)
    sys.exit(1)


# =======================================================================
def showUsageExamples() -> None:
    example_text = """
Examples:

List lights:
    %prog% light list

List lights, waiting 10 seconds for them to answer:
    %prog% -t 10 light list

Turn on all lights:
    %prog% light power on

Turn off two lights by label:
    %prog% -l Kitchen,Hallway light power off

Turn off a light by ID, fading out over 2 seconds:
    %prog% -i d0:73:d5:01:02:03 light power off -d 2s

Set a deep blue on every light:
    %prog% light color -H 43690 -S 65535 -B 32768 -K 3500

Set a named color over half a second:
    %prog% -l Desk light color -c orange -d 500ms

Set a web hex color or an RGB triple with a warm white point:
    %prog% light color -c "#FF8800" -K 2700
    %prog% light color -c 255,136,0

Use --listcolors to see the color names
    """

    print(example_text.replace("%prog%", sys.argv[0]))


def processPowerArgs(parser: OptionParser, args: List[str]) -> bool:
    if len(args) < 1:
        parser.error("Missing state (on|off)")
    state = args[0].lower()
    if state not in POWER_STATES:
        parser.error(f"Invalid power state requested: {args[0]}")
    return POWER_STATES[state]


def processColorArgs(parser: OptionParser, options: Values) -> HSBK:
    components = (options.hue, options.saturation, options.brightness)

    if options.color is not None:
        if any(c is not None for c in components):
            parser.error(
                "option --color and options --hue, --saturation, --brightness are mutually exclusive"
            )
        kelvin = options.kelvin if options.kelvin is not None else DEFAULT_KELVIN
        if not (MIN_KELVIN <= kelvin <= MAX_KELVIN):
            parser.error(f"Kelvin must be between {MIN_KELVIN} and {MAX_KELVIN}")
        color = utils.color_object_to_hsbk(options.color, kelvin)
        if color is None:
            parser.error("bad color specification")
        return color

    components = (*components, options.kelvin)
    if all(c is None or c == 0 for c in components):
        parser.error("Missing color definition")
    if any(c is None for c in components):
        parser.error(
            "options --hue, --saturation, --brightness and --kelvin must all be set"
        )

    try:
        return validate_hsbk(*components)
    except ValueError as ex:
        parser.error(str(ex))


def parseArgs(  # noqa: C901
    argv: Optional[List[str]] = None,
) -> Tuple[Values, List[str]]:

    parser = OptionParser()

    parser.description = "A utility to discover and control LIFX lights. "
    parser.description += "Acts on all lights by default, however you may restrict "
    parser.description += "the lights that a command applies to by specifying IDs "
    parser.description += "or labels."
    info_group = OptionGroup(parser, "Program help and information option")
    filter_group = OptionGroup(parser, "Light selection options")
    color_group = OptionGroup(parser, "Color options (light color)")
    other_group = OptionGroup(parser, "Other options")

    parser.add_option_group(info_group)
    info_group.add_option(
        "-e",
        "--examples",
        action="store_true",
        dest="showexamples",
        default=False,
        help="Show usage examples",
    )
    info_group.add_option(
        "--listcolors",
        action="store_true",
        dest="listcolors",
        default=False,
        help="List color names",
    )

    filter_group.add_option(
        "-i",
        "--id",
        action="append",
        dest="ids",
        default=[],
        metavar="ID",
        help="ID of the light(s) to manage, comma-separated. "
        + "Either a MAC address or a numeric device ID. Defaults to all lights",
    )
    filter_group.add_option(
        "-l",
        "--label",
        action="append",
        dest="labels",
        default=[],
        metavar="LABEL",
        help="label of the light(s) to manage, comma-separated. "
        + "Defaults to all lights",
    )
    parser.add_option_group(filter_group)

    color_group.add_option(
        "-H",
        "--hue",
        dest="hue",
        default=None,
        type="int",
        help="hue component of the HSBK color (0-65535)",
    )
    color_group.add_option(
        "-S",
        "--saturation",
        dest="saturation",
        default=None,
        type="int",
        help="saturation component of the HSBK color (0-65535)",
    )
    color_group.add_option(
        "-B",
        "--brightness",
        dest="brightness",
        default=None,
        type="int",
        help="brightness component of the HSBK color (0-65535)",
    )
    color_group.add_option(
        "-K",
        "--kelvin",
        dest="kelvin",
        default=None,
        type="int",
        help="kelvin component of the HSBK color, the color temperature of whites "
        + f"({MIN_KELVIN}-{MAX_KELVIN})",
    )
    color_group.add_option(
        "-c",
        "--color",
        dest="color",
        default=None,
        metavar="COLOR",
        help="Can be either color name, web hex, or comma-separated RGB triple. "
        + f"--kelvin sets the white point (default {DEFAULT_KELVIN})",
    )
    parser.add_option_group(color_group)

    other_group.add_option(
        "-d",
        "--duration",
        dest="duration",
        default="0",
        metavar="DURATION",
        help="duration of the color or power transition, e.g. 500ms, 2s, 1m30s",
    )
    other_group.add_option(
        "-t",
        "--timeout",
        dest="timeout",
        default=DEFAULT_TIMEOUT,
        type="float",
        help=f"Seconds to wait for lights to answer (default {DEFAULT_TIMEOUT})",
    )
    other_group.add_option(
        "-n",
        "--num-lights",
        dest="num_lights",
        default=None,
        type="int",
        help="Number of lights expected, speeds up discovery",
    )
    other_group.add_option(
        "-v",
        "--verbose",
        action="store_true",
        dest="verbose",
        default=False,
        help="Show debug logging",
    )
    parser.add_option_group(other_group)

    parser.usage = "%prog [options] light {list | power on|off | color}"
    (options, args) = parser.parse_args(argv)

    if options.showexamples:
        showUsageExamples()
        sys.exit(0)

    if options.listcolors:
        for c in utils.get_color_names_list():
            print(f"{c}, ")
        print("")
        sys.exit(0)

    if len(args) == 0:
        parser.error("A command must be specified")
    if args[0] != "light":
        parser.error(f"Unknown command: {args[0]}")
    if len(args) == 1:
        parser.print_help()
        sys.exit(0)
    if args[1] not in LIGHT_COMMANDS:
        parser.error(f"Unknown light command: {args[1]}")

    if options.timeout < 0:
        parser.error("timeout can not be negative")

    try:
        options.ids = [parse_light_id(i) for i in split_list(options.ids)]
    except ValueError as ex:
        parser.error(str(ex))
    options.labels = split_list(options.labels)

    try:
        options.duration = parse_duration(options.duration)
    except ValueError as ex:
        parser.error(str(ex))

    options.power_state = None
    options.hsbk = None
    if args[1] == "power":
        options.power_state = processPowerArgs(parser, args[2:])
    elif args[1] == "color":
        options.hsbk = processColorArgs(parser, options)

    return (options, args)


def getLights(client: LightClient, options: Values) -> List[Any]:
    lights = []

    _LOGGER.debug("Requested IDs: %s", options.ids)
    _LOGGER.debug("Requested labels: %s", options.labels)

    for light_id in options.ids:
        try:
            lights.append(client.get_light_by_id(light_id, options.timeout))
        except LightNotFoundError as ex:
            _fatal("Could not find light with ID '%s': %s", light_id, ex)
    for label in options.labels:
        try:
            lights.append(client.get_light_by_label(label, options.timeout))
        except LightNotFoundError as ex:
            _fatal("Could not find light with label '%s': %s", label, ex)

    return lights


def printTable(rows: List[Tuple[str, ...]]) -> None:
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row in rows:
        line = "".join(
            cell.ljust(width + TABLE_PADDING) for cell, width in zip(row, widths)
        )
        print(line.rstrip())
    print("")


def lightList(client: LightClient, options: Values) -> None:
    lights = client.poll_lights(options.timeout)
    if not lights:
        _fatal("No lights found")

    filtered = bool(options.ids or options.labels)
    rows: List[Tuple[str, ...]] = [TABLE_COLUMNS]
    for light in lights:
        light_id = light.get_mac_addr().lower()
        try:
            label = light.get_label()
        except WorkflowException:
            _LOGGER.warning("Couldn't get label for light %s", light_id)
            continue
        if filtered and light_id not in options.ids and label not in options.labels:
            continue
        try:
            power = light.get_power()
        except WorkflowException:
            _LOGGER.warning("Couldn't get power for light %s", light_id)
            continue
        try:
            color = light.get_color()
        except WorkflowException:
            _LOGGER.warning("Couldn't get color for light %s", light_id)
            continue
        rows.append(
            (
                light_id,
                light.get_ip_addr(),
                label,
                power_to_string(power),
                hsbk_to_string(tuple(color)),
            )
        )

    if len(rows) == 1:
        _fatal("No matching lights found")
    printTable(rows)


def lightPower(client: LightClient, options: Values) -> None:
    state = options.power_state
    state_str = POWER_ON if state else POWER_OFF
    lights = getLights(client, options)

    if len(lights) > 0:
        for light in lights:
            print(f"Turning {state_str} light {light.get_mac_addr()}")
            light.set_power(state, options.duration)
    else:
        print(f"Turning {state_str} all lights")
        client.set_power(state, options.duration)


def lightColor(client: LightClient, options: Values) -> None:
    color = options.hsbk
    lights = getLights(client, options)

    if len(lights) > 0:
        for light in lights:
            print(
                f"Setting color {hsbk_to_string(color)} on light {light.get_mac_addr()}"
            )
            light.set_color(list(color), options.duration)
    else:
        print(f"Setting color {hsbk_to_string(color)} on all lights")
        client.set_color(color, options.duration)


# -------------------------------------------
def main(argv: Optional[List[str]] = None) -> None:

    (options, args) = parseArgs(argv)

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    client = LightClient(options.num_lights)
    command = args[1]

    try:
        if command == "list":
            lightList(client, options)
        elif command == "power":
            lightPower(client, options)
        elif command == "color":
            lightColor(client, options)
    except WorkflowException as ex:
        _fatal("Unable to %s lights: %s", command, ex)

    sys.exit(0)


if __name__ == "__main__":
    main()
