import pytest

from elemental.mkfs import MkfsCall, format_device
from elemental.parted import PartitionerError


class FakeRunner:
    def __init__(self, return_value="", error=None):
        self.cmds = []
        self.return_value = return_value
        self.error = error

    def run(self, command, *args):
        self.cmds.append([command, *args])
        if self.error is not None:
            raise self.error
        return self.return_value


@pytest.fixture
def runner():
    return FakeRunner()


def test_formats_with_xfs(runner):
    MkfsCall("/dev/device", "xfs", "OEM", runner).apply()
    assert runner.cmds == [["mkfs.xfs", "-L", "OEM", "/dev/device"]]


def test_formats_with_vfat(runner):
    MkfsCall("/dev/device", "vfat", "EFI", runner).apply()
    assert runner.cmds == [["mkfs.vfat", "-n", "EFI", "/dev/device"]]


def test_fails_for_unsupported_filesystem(runner):
    with pytest.raises(PartitionerError):
        MkfsCall("/dev/device", "btrfs", "OEM", runner).apply()
    assert runner.cmds == []


def test_format_device_existing_partition(runner):
    format_device(runner, "/dev/device1", "ext4", "MY_LABEL")
    assert runner.cmds == [["mkfs.ext4", "-L", "MY_LABEL", "/dev/device1"]]


def test_custom_options_precede_device(runner):
    format_device(runner, "/dev/device1", "ext4", "MY_LABEL", "-F", "-q")
    assert runner.cmds == [["mkfs.ext4", "-L", "MY_LABEL", "-F", "-q", "/dev/device1"]]


def test_build_options_without_label(runner):
    assert MkfsCall("/dev/device", "ext2", "", runner).build_options() == ["/dev/device"]


def test_apply_returns_output():
    runner = FakeRunner(return_value="created")
    assert MkfsCall("/dev/device", "ext4", "L", runner).apply() == "created"


def test_runner_error_propagates():
    runner = FakeRunner(error=RuntimeError("mkfs failed"))
    with pytest.raises(RuntimeError, match="mkfs failed"):
        format_device(runner, "/dev/device1", "ext4", "MY_LABEL")