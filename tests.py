import io
import unittest
from unittest.mock import MagicMock, call, patch

from lifxlan import WorkflowException
import pytest

from lifxctl import LightNotFoundError
from lifxctl.cli import main
from lifxctl.client import LightClient
from lifxctl.const import DEFAULT_TIMEOUT, POLL_INTERVAL
from lifxctl.utils import (
    hsbk_to_string,
    light_id_to_int,
    parse_duration,
    parse_light_id,
    power_to_string,
    split_list,
    utils,
    validate_hsbk,
)

KITCHEN_MAC = "d0:73:d5:01:02:03"
DESK_MAC = "d0:73:d5:0a:0b:0c"


def mock_light(mac, label, power=65535, color=(0, 0, 65535, 3500), ip="192.168.1.10"):
    light = MagicMock()
    light.get_mac_addr.return_value = mac
    light.get_ip_addr.return_value = ip
    light.get_label.return_value = label
    light.get_power.return_value = power
    light.get_color.return_value = color
    return light


class TestUtils(unittest.TestCase):
    def test_color_object_to_tuple(self):
        assert utils.color_object_to_tuple("red") == (255, 0, 0)
        assert utils.color_object_to_tuple("green") == (0, 128, 0)
        green = (0, 255, 0)
        assert utils.color_object_to_tuple(green) == green
        assert utils.color_object_to_tuple(set()) is None
        assert utils.color_object_to_tuple("#ff00ff") == (255, 0, 255)
        assert utils.color_object_to_tuple("(255,0,255)") == (255, 0, 255)
        assert utils.color_object_to_tuple("255,136,0") == (255, 136, 0)
        assert utils.color_object_to_tuple("300,0,0") is None
        assert utils.color_object_to_tuple("1,2,3,4") is None
        assert utils.color_object_to_tuple("notacolor") is None

    def test_color_object_to_hsbk(self):
        assert utils.color_object_to_hsbk("red") == (0, 65535, 65535, 3500)
        assert utils.color_object_to_hsbk("blue", 2700) == (43690, 65535, 65535, 2700)
        assert utils.color_object_to_hsbk("green") == (21845, 65535, 32896, 3500)
        assert utils.color_object_to_hsbk("white") == (0, 0, 65535, 3500)
        assert utils.color_object_to_hsbk("black") == (0, 0, 0, 3500)
        assert utils.color_object_to_hsbk("nope") is None

    def test_get_color_names_list(self):
        names = utils.get_color_names_list()
        assert len(names) > 120
        assert "springgreen" in names
        assert "yellow" in names
        assert names == sorted(names)

    def test_validate_hsbk(self):
        assert validate_hsbk(0, 0, 0, 2500) == (0, 0, 0, 2500)
        assert validate_hsbk(65535, 65535, 65535, 9000) == (65535, 65535, 65535, 9000)
        with pytest.raises(ValueError, match="Hue"):
            validate_hsbk(65536, 0, 0, 3500)
        with pytest.raises(ValueError, match="Saturation"):
            validate_hsbk(0, -1, 0, 3500)
        with pytest.raises(ValueError, match="Kelvin"):
            validate_hsbk(0, 0, 0, 2000)
        with pytest.raises(ValueError, match="Kelvin"):
            validate_hsbk(0, 0, 0, 9001)

    def test_hsbk_to_string(self):
        assert (
            hsbk_to_string((1, 2, 3, 3500))
            == "{Hue:1 Saturation:2 Brightness:3 Kelvin:3500}"
        )

    def test_power_to_string(self):
        assert power_to_string(65535) == "on"
        assert power_to_string(0) == "off"
        assert power_to_string(1234) == "1234"

    def test_split_list(self):
        assert split_list(None) == []
        assert split_list("a") == ["a"]
        assert split_list(["a,b", " c ", "", "d,,"]) == ["a", "b", "c", "d"]

    def test_parse_light_id(self):
        assert parse_light_id(KITCHEN_MAC) == KITCHEN_MAC
        assert parse_light_id("D0:73:D5:01:02:03") == KITCHEN_MAC
        assert parse_light_id("d0-73-d5-01-02-03") == KITCHEN_MAC
        assert parse_light_id("D073D5010203") == KITCHEN_MAC
        assert parse_light_id("d073d50a0b0c") == DESK_MAC
        assert parse_light_id(str(0x030201D573D0)) == KITCHEN_MAC
        assert parse_light_id("0") == "00:00:00:00:00:00"
        with pytest.raises(ValueError):
            parse_light_id("kitchen")
        with pytest.raises(ValueError):
            parse_light_id("d0:73-d5:01:02:03")
        with pytest.raises(ValueError):
            parse_light_id("d073d501020")
        with pytest.raises(ValueError):
            parse_light_id("d073d501020g")
        with pytest.raises(ValueError):
            parse_light_id(str(1 << 64))
        with pytest.raises(ValueError):
            # top two bytes of the target must be empty
            parse_light_id(str(1 << 50))

    def test_light_id_to_int(self):
        assert light_id_to_int(KITCHEN_MAC) == 0x030201D573D0
        assert parse_light_id(str(light_id_to_int(DESK_MAC))) == DESK_MAC
        with pytest.raises(ValueError):
            light_id_to_int("d0:73:d5")

    def test_parse_duration(self):
        assert parse_duration("0") == 0
        assert parse_duration("500ms") == 500
        assert parse_duration("1.5s") == 1500
        assert parse_duration("1m30s") == 90000
        assert parse_duration("1h") == 3600000
        assert parse_duration("2") == 2000
        assert parse_duration(" 2S ") == 2000
        assert parse_duration("250000us") == 250
        assert parse_duration("3000µs") == 3
        assert parse_duration("1000000ns") == 1
        assert parse_duration("1s500000us") == 1500
        assert parse_duration(0.25) == 250
        for bad in ("", "-1", "-1s", "abc", "1x", "s1", "1s2", "inf"):
            with pytest.raises(ValueError):
                parse_duration(bad)


class TestLightClient(unittest.TestCase):
    @patch("lifxctl.client.LifxLAN")
    def test_num_lights(self, mock_lan):
        LightClient(3)
        mock_lan.assert_called_once_with(3)

    @patch("lifxctl.client.LifxLAN")
    def test_get_lights(self, mock_lan):
        kitchen = mock_light(KITCHEN_MAC, "Kitchen")
        mock_lan.return_value.get_lights.return_value = [kitchen]
        assert LightClient().get_lights() == [kitchen]

        mock_lan.return_value.get_lights.return_value = None
        assert LightClient().get_lights() == []

    @patch("lifxctl.client.time")
    @patch("lifxctl.client.LifxLAN")
    def test_poll_lights_keeps_last_result(self, mock_lan, mock_time):
        kitchen = mock_light(KITCHEN_MAC, "Kitchen")
        desk = mock_light(DESK_MAC, "Desk")
        mock_lan.return_value.get_lights.side_effect = [
            [],
            [kitchen],
            [kitchen, desk],
        ]
        mock_time.monotonic.side_effect = [0.0, 0.1, 0.2, 0.5]

        lights = LightClient().poll_lights(timeout=0.3)

        assert lights == [kitchen, desk]
        assert mock_lan.return_value.get_lights.call_count == 3
        assert mock_time.sleep.call_args_list == [call(POLL_INTERVAL)] * 2

    @patch("lifxctl.client.time")
    @patch("lifxctl.client.LifxLAN")
    def test_poll_lights_ignores_workflow_errors(self, mock_lan, mock_time):
        kitchen = mock_light(KITCHEN_MAC, "Kitchen")
        mock_lan.return_value.get_lights.side_effect = [
            [kitchen],
            WorkflowException("no response"),
        ]
        mock_time.monotonic.side_effect = [0.0, 0.1, 0.5]

        assert LightClient().poll_lights(timeout=0.3) == [kitchen]

    @patch("lifxctl.client.LifxLAN")
    def test_poll_lights_nothing_found(self, mock_lan):
        mock_lan.return_value.get_lights.side_effect = WorkflowException("timeout")
        assert LightClient().poll_lights(timeout=0) == []

    @patch("lifxctl.client.LifxLAN")
    def test_poll_lights_other_errors_propagate(self, mock_lan):
        mock_lan.return_value.get_lights.side_effect = OSError("network down")
        with pytest.raises(OSError):
            LightClient().poll_lights(timeout=0)

    @patch("lifxctl.client.LifxLAN")
    def test_get_light_by_id(self, mock_lan):
        kitchen = mock_light(KITCHEN_MAC.upper(), "Kitchen")
        desk = mock_light(DESK_MAC, "Desk")
        mock_lan.return_value.get_lights.return_value = [kitchen, desk]
        client = LightClient()

        assert client.get_light_by_id(DESK_MAC, timeout=0) is desk
        assert client.get_light_by_id(KITCHEN_MAC, timeout=0) is kitchen
        with pytest.raises(LightNotFoundError) as exc_info:
            client.get_light_by_id("d0:73:d5:ff:ff:ff", timeout=0)
        assert exc_info.value.kind == "ID"
        assert exc_info.value.key == "d0:73:d5:ff:ff:ff"

    @patch("lifxctl.client.time")
    @patch("lifxctl.client.LifxLAN")
    def test_get_light_by_id_waits_for_light(self, mock_lan, mock_time):
        desk = mock_light(DESK_MAC, "Desk")
        mock_lan.return_value.get_lights.side_effect = [[], [desk]]
        mock_time.monotonic.side_effect = [0.0, 0.1]

        assert LightClient().get_light_by_id(DESK_MAC, timeout=1) is desk
        mock_time.sleep.assert_called_once_with(POLL_INTERVAL)

    @patch("lifxctl.client.LifxLAN")
    def test_get_light_by_label(self, mock_lan):
        kitchen = mock_light(KITCHEN_MAC, "Kitchen")
        desk = mock_light(DESK_MAC, "Desk")
        mock_lan.return_value.get_lights.return_value = [kitchen, desk]
        client = LightClient()

        assert client.get_light_by_label("Desk", timeout=0) is desk
        with pytest.raises(LightNotFoundError) as exc_info:
            client.get_light_by_label("Attic", timeout=0)
        assert exc_info.value.kind == "label"
        assert "Attic" in str(exc_info.value)

    @patch("lifxctl.client.LifxLAN")
    def test_get_light_by_label_ignores_switches(self, mock_lan):
        switch = MagicMock(spec=["get_label", "get_mac_addr", "set_power"])
        switch.get_label.return_value = "Hall"
        mock_lan.return_value.get_devices.return_value = [switch]
        mock_lan.return_value.get_device_by_name.return_value = switch
        mock_lan.return_value.get_lights.return_value = [mock_light(DESK_MAC, "Desk")]

        with pytest.raises(LightNotFoundError):
            LightClient().get_light_by_label("Hall", timeout=0)

    @patch("lifxctl.client.time")
    @patch("lifxctl.client.LifxLAN")
    def test_get_light_by_label_waits_for_light(self, mock_lan, mock_time):
        desk = mock_light(DESK_MAC, "Desk")
        mock_lan.return_value.get_lights.side_effect = [[], [desk]]
        mock_time.monotonic.side_effect = [0.0, 0.1]

        assert LightClient().get_light_by_label("Desk", timeout=1) is desk
        assert mock_lan.return_value.get_lights.call_count == 2

    @patch("lifxctl.client.LifxLAN")
    def test_broadcast(self, mock_lan):
        client = LightClient()
        client.set_power(True, 500)
        mock_lan.return_value.set_power_all_lights.assert_called_once_with(True, 500)
        client.set_color((1, 2, 3, 3500))
        mock_lan.return_value.set_color_all_lights.assert_called_once_with(
            [1, 2, 3, 3500], 0
        )


@patch("lifxctl.cli.LightClient")
class TestCli(unittest.TestCase):
    def run_main(self, argv):
        with patch("sys.stdout", new_callable=io.StringIO) as stdout, patch(
            "sys.stderr", new_callable=io.StringIO
        ):
            with self.assertRaises(SystemExit) as cm:
                main(argv)
        return cm.exception.code, stdout.getvalue()

    def test_list(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.poll_lights.return_value = [
            mock_light(KITCHEN_MAC.upper(), "Kitchen"),
            mock_light(
                DESK_MAC, "Desk", power=0, color=(100, 200, 300, 2700), ip="10.0.0.2"
            ),
        ]

        code, out = self.run_main(["light", "list"])

        assert code == 0
        client.poll_lights.assert_called_once_with(DEFAULT_TIMEOUT)
        lines = out.splitlines()
        assert lines[0].split() == ["ID", "IP", "Label", "Power", "Color"]
        assert lines[1].split()[:4] == [KITCHEN_MAC, "192.168.1.10", "Kitchen", "on"]
        assert lines[1].endswith("{Hue:0 Saturation:0 Brightness:65535 Kelvin:3500}")
        assert lines[2].split()[:4] == [DESK_MAC, "10.0.0.2", "Desk", "off"]
        assert lines[2].endswith("{Hue:100 Saturation:200 Brightness:300 Kelvin:2700}")
        # columns line up
        assert lines[0].index("Label") == lines[1].index("Kitchen")

    def test_list_timeout(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.poll_lights.return_value = [mock_light(KITCHEN_MAC, "Kitchen")]
        code, _ = self.run_main(["-t", "1.5", "-n", "2", "light", "list"])
        assert code == 0
        mock_client_cls.assert_called_once_with(2)
        client.poll_lights.assert_called_once_with(1.5)

    def test_list_no_lights(self, mock_client_cls):
        mock_client_cls.return_value.poll_lights.return_value = []
        with self.assertLogs("lifxctl.cli", level="ERROR") as logs:
            code, out = self.run_main(["light", "list"])
        assert code == 1
        assert out == ""
        assert "No lights found" in logs.output[0]

    def test_list_skips_unreadable_lights(self, mock_client_cls):
        broken = mock_light(DESK_MAC, "Desk")
        broken.get_color.side_effect = WorkflowException("no response")
        mock_client_cls.return_value.poll_lights.return_value = [
            broken,
            mock_light(KITCHEN_MAC, "Kitchen"),
        ]

        with self.assertLogs("lifxctl.cli", level="WARNING") as logs:
            code, out = self.run_main(["light", "list"])

        assert code == 0
        assert "Couldn't get color for light d0:73:d5:0a:0b:0c" in logs.output[0]
        assert "Kitchen" in out
        assert DESK_MAC not in out

    def test_list_filtered(self, mock_client_cls):
        mock_client_cls.return_value.poll_lights.return_value = [
            mock_light(KITCHEN_MAC, "Kitchen"),
            mock_light(DESK_MAC, "Desk"),
            mock_light("d0:73:d5:00:00:01", "Attic"),
        ]

        code, out = self.run_main(
            ["-i", str(light_id_to_int(KITCHEN_MAC)), "-l", "Attic", "light", "list"]
        )

        assert code == 0
        assert "Kitchen" in out
        assert "Attic" in out
        assert "Desk" not in out

    def test_list_filtered_no_match(self, mock_client_cls):
        mock_client_cls.return_value.poll_lights.return_value = [
            mock_light(KITCHEN_MAC, "Kitchen"),
        ]
        with self.assertLogs("lifxctl.cli", level="ERROR"):
            code, _ = self.run_main(["-l", "Desk", "light", "list"])
        assert code == 1

    def test_power_all(self, mock_client_cls):
        client = mock_client_cls.return_value
        code, out = self.run_main(["light", "power", "on"])
        assert code == 0
        client.set_power.assert_called_once_with(True, 0)
        client.get_light_by_id.assert_not_called()
        client.get_light_by_label.assert_not_called()
        assert "Turning on all lights" in out

    def test_power_selected_lights(self, mock_client_cls):
        client = mock_client_cls.return_value
        kitchen = mock_light(KITCHEN_MAC, "Kitchen")
        desk = mock_light(DESK_MAC, "Desk")
        client.get_light_by_id.return_value = kitchen
        client.get_light_by_label.return_value = desk

        code, out = self.run_main(
            ["-l", "Desk", "-i", "D0-73-D5-01-02-03", "light", "power", "OFF", "-d", "2s"]
        )

        assert code == 0
        client.get_light_by_id.assert_called_once_with(KITCHEN_MAC, DEFAULT_TIMEOUT)
        client.get_light_by_label.assert_called_once_with("Desk", DEFAULT_TIMEOUT)
        kitchen.set_power.assert_called_once_with(False, 2000)
        desk.set_power.assert_called_once_with(False, 2000)
        client.set_power.assert_not_called()
        # ids are resolved before labels
        assert out.index(KITCHEN_MAC) < out.index(DESK_MAC)

    def test_power_comma_separated_labels(self, mock_client_cls):
        client = mock_client_cls.return_value
        code, _ = self.run_main(["-l", "Kitchen,Desk", "light", "power", "on"])
        assert code == 0
        assert client.get_light_by_label.call_args_list == [
            call("Kitchen", DEFAULT_TIMEOUT),
            call("Desk", DEFAULT_TIMEOUT),
        ]

    def test_power_missing_state(self, mock_client_cls):
        code, _ = self.run_main(["light", "power"])
        assert code == 2
        mock_client_cls.assert_not_called()

    def test_power_invalid_state(self, mock_client_cls):
        code, _ = self.run_main(["light", "power", "dim"])
        assert code == 2
        mock_client_cls.return_value.set_power.assert_not_called()

    def test_power_light_not_found(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.get_light_by_id.side_effect = LightNotFoundError("ID", KITCHEN_MAC)

        with self.assertLogs("lifxctl.cli", level="ERROR") as logs:
            code, _ = self.run_main(["-i", KITCHEN_MAC, "light", "power", "on"])

        assert code == 1
        assert f"Could not find light with ID '{KITCHEN_MAC}'" in logs.output[0]
        client.set_power.assert_not_called()

    def test_power_label_not_found(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.get_light_by_label.side_effect = LightNotFoundError("label", "Attic")

        with self.assertLogs("lifxctl.cli", level="ERROR") as logs:
            code, _ = self.run_main(["-l", "Attic", "light", "power", "on"])

        assert code == 1
        assert "Could not find light with label 'Attic'" in logs.output[0]

    def test_power_library_error(self, mock_client_cls):
        mock_client_cls.return_value.set_power.side_effect = WorkflowException(
            "no ack"
        )
        with self.assertLogs("lifxctl.cli", level="ERROR") as logs:
            code, _ = self.run_main(["light", "power", "on"])
        assert code == 1
        assert "no ack" in logs.output[0]

    def test_color_hsbk(self, mock_client_cls):
        client = mock_client_cls.return_value
        code, _ = self.run_main(
            ["light", "color", "-H", "100", "-S", "200", "-B", "300", "-K", "3500"]
            + ["-d", "1s"]
        )
        assert code == 0
        client.set_color.assert_called_once_with((100, 200, 300, 3500), 1000)

    def test_color_named_on_selected_light(self, mock_client_cls):
        client = mock_client_cls.return_value
        desk = mock_light(DESK_MAC, "Desk")
        client.get_light_by_label.return_value = desk

        code, _ = self.run_main(["-l", "Desk", "light", "color", "-c", "red"])

        assert code == 0
        desk.set_color.assert_called_once_with([0, 65535, 65535, 3500], 0)
        client.set_color.assert_not_called()

    def test_color_rgb_with_kelvin(self, mock_client_cls):
        client = mock_client_cls.return_value
        code, _ = self.run_main(["light", "color", "-c", "0,0,255", "-K", "2700"])
        assert code == 0
        client.set_color.assert_called_once_with((43690, 65535, 65535, 2700), 0)

    def test_color_usage_errors(self, mock_client_cls):
        for argv in (
            ["light", "color"],
            ["light", "color", "-H", "0", "-S", "0", "-B", "0", "-K", "0"],
            ["light", "color", "-H", "100"],
            ["light", "color", "-H", "70000", "-S", "0", "-B", "0", "-K", "3500"],
            ["light", "color", "-H", "1", "-S", "1", "-B", "1", "-K", "12000"],
            ["light", "color", "-c", "notacolor"],
            ["light", "color", "-c", "red", "-K", "100"],
            ["light", "color", "-c", "red", "-H", "100"],
            ["light", "color", "-c", "red", "-d", "soon"],
        ):
            code, _ = self.run_main(argv)
            assert code == 2, argv
        mock_client_cls.return_value.set_color.assert_not_called()

    def test_light_without_command_shows_help(self, mock_client_cls):
        code, out = self.run_main(["light"])
        assert code == 0
        assert "Usage:" in out
        mock_client_cls.assert_not_called()

    def test_usage_errors(self, mock_client_cls):
        for argv in (
            [],
            ["lamp", "list"],
            ["light", "dance"],
            ["-i", "kitchen", "light", "list"],
            ["-t", "-1", "light", "list"],
        ):
            code, _ = self.run_main(argv)
            assert code == 2, argv
        mock_client_cls.assert_not_called()

    def test_examples(self, mock_client_cls):
        code, out = self.run_main(["--examples"])
        assert code == 0
        assert "Examples:" in out
        assert "light power on" in out

    def test_listcolors(self, mock_client_cls):
        code, out = self.run_main(["--listcolors"])
        assert code == 0
        assert "springgreen, " in out
