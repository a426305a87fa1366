import logging
import sys
import time

from lifxctl import LightClient

logging.basicConfig(level=logging.DEBUG)

client = LightClient()
light = client.get_light_by_label(sys.argv[1], timeout=5)
for _ in range(3):
    light.set_power(False)
    time.sleep(0.5)
    light.set_power(True)
    time.sleep(0.5)
