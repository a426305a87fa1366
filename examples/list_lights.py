import logging
import pprint

from lifxctl import LightClient

logging.basicConfig(level=logging.DEBUG)

lights = LightClient().poll_lights(timeout=5)
pprint.pprint(
    [(light.get_mac_addr(), light.get_label(), light.get_color()) for light in lights]
)
