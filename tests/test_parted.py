import pytest

from elemental.parted import Partition, PartedCall, PartitionerError

PRINT_OUTPUT = """BYT;
/dev/loop0:50593792s:loopback:512:512:msdos:Loopback device:;
1:2048s:98303s:96256s:ext4::type=83;
2:98304s:29394943s:29296640s:ext4::boot, type=83;
3:29394944s:45019135s:15624192s:ext4::type=83;
4:45019136s:50331647s:5312512s:ext4::type=83;"""

PREFIX = ["parted", "--script", "--machine", "--", "/dev/device", "unit", "s"]


class FakeRunner:
    def __init__(self, return_value="ok", error=None):
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


@pytest.fixture
def pc(runner):
    return PartedCall("/dev/device", runner)


def test_write_changes_does_nothing_with_empty_setup(pc, runner):
    assert pc.write_changes() == ""
    assert runner.cmds == []


def test_runs_complex_command(pc, runner):
    pc.create_partition(Partition(0, 2048, 204800, "p.efi", "vfat"))
    pc.create_partition(Partition(0, 206848, 0, "p.root", "ext4"))
    pc.wipe_table(True)
    assert pc.write_changes() == "ok"
    assert runner.cmds == [
        PREFIX + ["mklabel", "gpt", "mkpart", "p.efi", "fat32", "2048", "206847",
                  "mkpart", "p.root", "ext4", "206848", "100%"]
    ]


def test_set_new_partition_label(pc, runner):
    pc.set_partition_table_label("msdos")
    pc.wipe_table(True)
    assert pc.write_changes() == "ok"
    assert runner.cmds == [PREFIX + ["mklabel", "msdos"]]


def test_creates_new_partition(pc, runner):
    pc.create_partition(Partition(0, 2048, 204800, "p.root", "ext4"))
    assert pc.write_changes() == "ok"
    pc.create_partition(Partition(0, 2048, 0, "p.root", "ext4"))
    assert pc.write_changes() == "ok"
    assert runner.cmds == [
        PREFIX + ["mkpart", "p.root", "ext4", "2048", "206847"],
        PREFIX + ["mkpart", "p.root", "ext4", "2048", "100%"],
    ]


def test_deletes_partitions(pc, runner):
    pc.delete_partition(1)
    pc.delete_partition(2)
    assert pc.write_changes() == "ok"
    assert runner.cmds == [PREFIX + ["rm", "1", "rm", "2"]]


def test_sets_partition_flags(pc, runner):
    pc.set_partition_flag(1, "flag", True)
    pc.set_partition_flag(2, "flag", False)
    assert pc.write_changes() == "ok"
    assert runner.cmds == [PREFIX + ["set", "1", "flag", "on", "set", "2", "flag", "off"]]


def test_wipes_table_creating_gpt(pc, runner):
    pc.wipe_table(True)
    assert pc.write_changes() == "ok"
    assert runner.cmds == [PREFIX + ["mklabel", "gpt"]]


def test_invalid_label_falls_back_to_gpt(pc, runner):
    pc.set_partition_table_label("bogus")
    pc.wipe_table(True)
    assert pc.write_changes() == "ok"
    assert runner.cmds == [PREFIX + ["mklabel", "gpt"]]


def test_gpt_partition_without_label_gets_generated_name(pc, runner):
    pc.create_partition(Partition(3, 2048, 0, "", "ext4"))
    assert pc.write_changes() == "ok"
    assert runner.cmds == [PREFIX + ["mkpart", "part3", "ext4", "2048", "100%"]]


def test_msdos_partition_is_primary(pc, runner):
    pc.set_partition_table_label("msdos")
    pc.create_partition(Partition(1, 2048, 0, "ignored", "ext4"))
    assert pc.write_changes() == "ok"
    assert runner.cmds == [PREFIX + ["mkpart", "primary", "ext4", "2048", "100%"]]


def test_write_changes_clears_queue_after_failure():
    failing = FakeRunner(error=RuntimeError("parted failed"))
    pc = PartedCall("/dev/device", failing)
    pc.wipe_table(True)
    pc.delete_partition(1)
    with pytest.raises(RuntimeError):
        pc.write_changes()
    assert pc.write_changes() == ""
    assert len(failing.cmds) == 1


def test_write_changes_returns_output():
    pc = PartedCall("/dev/device", FakeRunner(return_value="done"))
    pc.wipe_table(True)
    assert pc.write_changes() == "done"


def test_prints_partition_table_info(pc, runner):
    assert pc.print() == "ok"
    assert runner.cmds == [PREFIX + ["print"]]


def test_gets_last_sector(pc):
    assert pc.get_last_sector(PRINT_OUTPUT) == 50593792
    with pytest.raises(PartitionerError):
        pc.get_last_sector("invalid parted print output")


def test_gets_sector_size(pc):
    assert pc.get_sector_size(PRINT_OUTPUT) == 512
    with pytest.raises(PartitionerError):
        pc.get_sector_size("invalid parted print output")


def test_gets_partition_table_label(pc):
    assert pc.get_partition_table_label(PRINT_OUTPUT) == "msdos"
    with pytest.raises(PartitionerError):
        pc.get_partition_table_label("invalid parted print output")


def test_gets_partitions(pc):
    parts = pc.get_partitions(PRINT_OUTPUT)
    assert len(parts) == 4
    assert parts[1].start_s == 98304
    assert parts[0] == Partition(1, 2048, 96256, "", "")
    assert [p.number for p in parts] == [1, 2, 3, 4]


def test_gets_no_partitions_from_invalid_output(pc):
    assert pc.get_partitions("invalid parted print output") == []