from __future__ import annotations

import logging
import sys

import pytest

from modules.power.services.invoker import CommandInvoker
from modules.power.services.preflight import check_command, is_raspberry_pi


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="reads the device-tree model")
def test_model_file(tmp_path):
    model = tmp_path / "model"
    model.write_text("Raspberry Pi 4 Model B Rev 1.4\x00", encoding="utf-8")
    assert is_raspberry_pi(str(model)) is True
    model.write_text("QEMU Virtual Machine", encoding="utf-8")
    assert is_raspberry_pi(str(model)) is False


def test_missing_model_file(tmp_path):
    assert is_raspberry_pi(str(tmp_path / "nope")) is False


def test_present_command():
    assert check_command(CommandInvoker(sys.executable)) is True


def test_missing_command_only_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="power.preflight"):
        assert check_command(CommandInvoker("definitely-not-a-real-command-4711")) is False
    assert "not found in PATH" in caplog.text


def test_service_with_missing_command_still_starts(caplog):
    from modules.power.xPowerService import xPowerService

    svc = xPowerService(config_overrides={"command": "definitely-not-a-real-command-4711"})
    with caplog.at_level(logging.WARNING, logger="power.preflight"):
        svc.start()
    try:
        assert "not found in PATH" in caplog.text
        reading = svc.cache.get().reading
        assert reading.last_error.startswith("exec failed: definitely-not-a-real-command-4711 measure_temp")
    finally:
        svc.stop()
