"""lifxctl constants."""

from typing import Final

# Discovery
DEFAULT_TIMEOUT: Final = 5.0
POLL_INTERVAL: Final = 0.1

# HSBK bounds
MIN_HSB: Final = 0
MAX_HSB: Final = 65535
MIN_KELVIN: Final = 2500
MAX_KELVIN: Final = 9000
DEFAULT_KELVIN: Final = 3500

# Power
POWER_ON: Final = "on"
POWER_OFF: Final = "off"
POWER_STATES = {POWER_ON: True, POWER_OFF: False}
MAX_POWER_LEVEL: Final = 65535

# Light ids
MAC_LENGTH: Final = 6
TARGET_LENGTH: Final = 8

# Table
ATTR_ID: Final = "ID"
ATTR_IPADDR: Final = "IP"
ATTR_LABEL: Final = "Label"
ATTR_POWER: Final = "Power"
ATTR_COLOR: Final = "Color"
TABLE_COLUMNS = (ATTR_ID, ATTR_IPADDR, ATTR_LABEL, ATTR_POWER, ATTR_COLOR)
TABLE_PADDING: Final = 4
