"""Build and run parted commands, and parse parted's machine-readable output."""

import re
from dataclasses import dataclass, field

from elemental.constants import GPT

_HEADER_RE = re.compile(r"(.*):(\d+)s:(.*):(\d+):(\d+):(.*):(.*):(.*);")
_PARTITION_RE = re.compile(r"(\d+):(\d+)s:(\d+)s:(\d+)s:(.*):(.*):(.*);")
_LABEL_RE = re.compile(f"msdos|{GPT}")
_FAT_RE = re.compile("fat|vfat")


class PartitionerError(Exception):
    """Raised when a partitioning operation cannot be carried out."""


@dataclass
class Partition:
    """A partition described in sectors; file_system only selects the parted type."""

    number: int
    start_s: int
    size_s: int
    p_label: str = ""
    file_system: str = ""


@dataclass(frozen=True)
class _PartFlag:
    flag: str
    active: bool
    number: int


@dataclass
class PartedCall:
    """Queues partition table changes for a device and applies them with parted."""

    dev: str
    runner: object
    wipe: bool = False
    label: str = ""
    parts: list = field(default_factory=list)
    deletions: list = field(default_factory=list)
    flags: list = field(default_factory=list)

    def __init__(self, dev, runner):
        self.dev = dev
        self.runner = runner
        self.wipe = False
        self.label = ""
        self.parts = []
        self.deletions = []
        self.flags = []

    def _options(self):
        label = self.label if _LABEL_RE.search(self.label) else GPT
        opts = []

        if self.wipe:
            opts += ["mklabel", label]

        for num in self.deletions:
            opts += ["rm", str(num)]

        for part in self.parts:
            if label == GPT:
                p_label = part.p_label or f"part{part.number}"
            else:
                p_label = "primary"
            opts += ["mkpart", p_label]
            opts.append("fat32" if _FAT_RE.search(part.file_system) else part.file_system)
            if part.size_s == 0:
                opts += [str(part.start_s), "100%"]
            else:
                opts += [str(part.start_s), str(part.start_s + part.size_s - 1)]

        for flag in self.flags:
            opts += ["set", str(flag.number), flag.flag, "on" if flag.active else "off"]

        if not opts:
            return []
        return ["--script", "--machine", "--", self.dev, "unit", "s", *opts]

    def write_changes(self):
        """Run parted with the queued changes and return its output."""
        opts = self._options()
        if not opts:
            return ""
        try:
            return self.runner.run("parted", *opts)
        finally:
            self.wipe = False
            self.parts = []
            self.deletions = []

    def set_partition_table_label(self, label):
        self.label = label

    def create_partition(self, partition):
        self.parts.append(partition)

    def delete_partition(self, num):
        self.deletions.append(num)

    def set_partition_flag(self, num, flag, active):
        self.flags.append(_PartFlag(flag=flag, active=active, number=num))

    def wipe_table(self, wipe):
        self.wipe = wipe

    def print(self):
        """Return parted's machine-readable description of the device."""
        return self.runner.run(
            "parted", "--script", "--machine", "--", self.dev, "unit", "s", "print"
        )

    @staticmethod
    def _lines(print_out):
        return (line.strip() for line in print_out.strip().splitlines())

    def _header_field(self, print_out, index):
        for line in self._lines(print_out):
            match = _HEADER_RE.fullmatch(line)
            if match:
                return match.group(index)
        raise PartitionerError("failed parsing parted header data")

    def get_last_sector(self, print_out):
        try:
            return int(self._header_field(print_out, 2))
        except PartitionerError as err:
            raise PartitionerError("Failed parsing last sector") from err

    def get_sector_size(self, print_out):
        try:
            return int(self._header_field(print_out, 4))
        except PartitionerError as err:
            raise PartitionerError("Failed parsing sector size") from err

    def get_partition_table_label(self, print_out):
        return self._header_field(print_out, 6)

    def get_partitions(self, print_out):
        """Return the partitions listed in parted's print output."""
        partitions = []
        for line in self._lines(print_out):
            match = _PARTITION_RE.fullmatch(line)
            if not match:
                continue
            start = int(match.group(2))
            end = int(match.group(3))
            partitions.append(
                Partition(
                    number=int(match.group(1)),
                    start_s=start,
                    size_s=end - start + 1,
                    p_label=match.group(6),
                    file_system="",
                )
            )
        return partitions