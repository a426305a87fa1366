import logging
import time
from typing import Any, Callable, List, Optional, TypeVar

from lifxlan import LifxLAN, WorkflowException  # type: ignore

from .const import DEFAULT_TIMEOUT, POLL_INTERVAL
from .exceptions import LightNotFoundError
from .utils import HSBK

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class LightClient:
    """Find and command LIFX lights on the local network."""

    def __init__(self, num_lights: Optional[int] = None) -> None:
        self._lan = LifxLAN(num_lights)

    def get_lights(self) -> List[Any]:
        """Run a single discovery pass."""
        lights = list(self._lan.get_lights() or [])
        _LOGGER.debug("discover: %s light(s)", len(lights))
        return lights

    def _poll(
        self, lookup: Callable[[], Optional[_T]], timeout: float
    ) -> Optional[_T]:
        """Call lookup until it returns something or the timeout expires."""
        # set the time at which we will quit the search
        quit_time = time.monotonic() + timeout
        while True:
            try:
                result = lookup()
            except WorkflowException as ex:
                _LOGGER.debug("discover: no answer yet: %s", ex)
            else:
                if result:
                    return result
            if time.monotonic() >= quit_time:
                return None
            time.sleep(POLL_INTERVAL)

    def poll_lights(self, timeout: float = DEFAULT_TIMEOUT) -> List[Any]:
        """Poll for discovery results until the timeout expires.

        Keeps polling for the whole timeout so that slow lights get a
        chance to answer, and returns the most recent result.
        """
        lights: List[Any] = []

        def _discover() -> None:
            nonlocal lights
            lights = self.get_lights()

        self._poll(_discover, timeout)
        return lights

    def get_light_by_id(self, mac: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
        mac = mac.lower()

        def _lookup() -> Any:
            for light in self.get_lights():
                if light.get_mac_addr().lower() == mac:
                    return light
            return None

        light = self._poll(_lookup, timeout)
        if light is None:
            raise LightNotFoundError("ID", mac)
        return light

    def get_light_by_label(self, label: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
        def _lookup() -> Any:
            for light in self.get_lights():
                if light.get_label() == label:
                    return light
            return None

        light = self._poll(_lookup, timeout)
        if light is None:
            raise LightNotFoundError("label", label)
        return light

    def set_power(self, state: bool, duration: int = 0) -> None:
        _LOGGER.debug("all lights: power %s over %sms", state, duration)
        self._lan.set_power_all_lights(state, duration)

    def set_color(self, color: HSBK, duration: int = 0) -> None:
        _LOGGER.debug("all lights: color %s over %sms", color, duration)
        self._lan.set_color_all_lights(list(color), duration)
