"""Inspect and change a disk's partition table and the file systems on it."""

import contextlib
import logging
import os
import re
import tempfile
import time
from dataclasses import replace

from elemental.mkfs import MkfsCall
from elemental.parted import PartedCall, PartitionerError

# parted prints this when a disk grew but the GPT backup header was not moved
_PARTED_WARN = "Not all of the space available"
_TRAILING_DIGIT_RE = re.compile(r".*\d+$")
_TABLE_LABEL_RE = re.compile("msdos|gpt")
_MIB = 1024 * 1024


def mib_to_sectors(size, sector_size):
    """Convert a size in MiB into a number of sectors of the given size."""
    return size * _MIB // sector_size


class Disk:
    """A block device whose partition layout is read and changed through parted.

    Device paths are looked up below ``root``; ``fs_probe`` is a callable that
    returns the file system type of a partition device.
    """

    partition_tries = 10
    retry_delay = 1.0

    def __init__(self, device, runner, logger=None, root="/", fs_probe=None):
        self.device = device
        self.runner = runner
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.root = root
        self.fs_probe = fs_probe
        self.sector_size = 0
        self.last_sector = 0
        self.label = ""
        self.parts = []

    def __str__(self):
        return self.device

    def _path(self, path):
        return os.path.join(self.root, path.lstrip("/"))

    def exists(self):
        """Tell whether the device exists, resolving it if it is a symlink."""
        path = self._path(self.device)
        if os.path.islink(path):
            target = os.readlink(path)
            if not os.path.isabs(target):
                target = os.path.normpath(os.path.join(os.path.dirname(self.device), target))
            if not os.path.exists(self._path(target)):
                return False
            self.device = target
            return True
        return os.path.exists(path)

    def reload(self):
        """Read the partition table of the device again."""
        pc = PartedCall(str(self), self.runner)
        out = pc.print()
        if _PARTED_WARN in out:
            # Move the GPT headers to the end of the disk, then read again.
            self.runner.run("sgdisk", "-e", self.device)
            out = pc.print()

        sector_size = pc.get_sector_size(out)
        last_sector = pc.get_last_sector(out)
        label = pc.get_partition_table_label(out)
        self.parts = pc.get_partitions(out)
        self.sector_size = sector_size
        self.last_sector = last_sector
        self.label = label

    def _ensure_loaded(self):
        if self.sector_size == 0:
            self._reload_or_log()

    def _reload_or_log(self):
        try:
            self.reload()
        except Exception as err:
            self.logger.error("Failed analyzing disk: %s", err)
            raise

    def check_disk_free_space_mib(self, min_space):
        """Tell whether at least ``min_space`` MiB are unallocated."""
        try:
            free = self.get_free_space()
        except Exception:
            self.logger.warning("Could not calculate disk free space")
            return False
        return free >= mib_to_sectors(min_space, self.sector_size)

    def get_free_space(self):
        """Return the number of unallocated sectors after the last partition."""
        self._ensure_loaded()
        return self._compute_free_space()

    def _compute_free_space(self):
        if self.parts:
            last = self.parts[-1]
            return self.last_sector - (last.start_s + last.size_s - 1)
        # The first partition starts at a 1 MiB offset
        return self.last_sector - (_MIB // self.sector_size - 1)

    def _compute_free_space_without_last(self):
        if len(self.parts) > 1:
            part = self.parts[-2]
            return self.last_sector - (part.start_s + part.size_s - 1)
        return self.last_sector - (_MIB // self.sector_size - 1)

    def new_partition_table(self, label):
        """Write a new, empty msdos or gpt partition table and return parted's output."""
        if not _TABLE_LABEL_RE.search(label):
            raise PartitionerError("Invalid partition table type, only msdos and gpt are supported")
        pc = PartedCall(str(self), self.runner)
        pc.set_partition_table_label(label)
        pc.wipe_table(True)
        out = pc.write_changes()
        self._reload_or_log()
        return out

    def add_partition(self, size, file_system, p_label, *args):
        """Append a partition of ``size`` MiB (0 for all free space) and return its number.

        Extra arguments are partition flags to switch on.
        """
        pc = PartedCall(str(self), self.runner)
        self._ensure_loaded()
        pc.set_partition_table_label(self.label)

        if self.parts:
            last = self.parts[-1]
            part_num = last.number
            start = last.start_s + last.size_s
        else:
            part_num = 0
            start = _MIB // self.sector_size

        size = mib_to_sectors(size, self.sector_size)
        free = self._compute_free_space()
        if size > free:
            raise PartitionerError(
                f"not enough free space in disk. Required: {size} sectors; "
                f"Available {free} sectors"
            )

        part_num += 1
        pc.create_partition(
            _new_partition(part_num, start, size, p_label, file_system)
        )
        for flag in args:
            pc.set_partition_flag(part_num, flag, True)

        try:
            out = pc.write_changes()
        except Exception as err:
            self.logger.error("Failed creating partition: %s", err)
            raise
        self.logger.debug("partitioner output: %s", out)

        self._reload_or_log()
        return part_num

    def format_partition(self, part_num, file_system, label):
        """Create a file system on the given partition and return mkfs output."""
        device = self.find_partition_device(part_num)
        return MkfsCall(device, file_system, label, self.runner).apply()

    def wipe_fs_on_partition(self, device):
        """Erase every file system signature on the given device."""
        self.runner.run("wipefs", "--all", device)

    def find_partition_device(self, part_num):
        """Return the device path of partition ``part_num``, waiting for udev."""
        if _TRAILING_DIGIT_RE.match(self.device):
            device = f"{self.device}p{part_num}"
        else:
            device = f"{self.device}{part_num}"

        for attempt in range(1, self.partition_tries + 2):
            self.logger.debug(
                "Trying to find the partition device %d of device %s (try number %d)",
                part_num,
                self,
                attempt,
            )
            with contextlib.suppress(Exception):
                self.runner.run("udevadm", "settle")
            if os.path.exists(self._path(device)):
                return device
            time.sleep(self.retry_delay)
        raise PartitionerError(
            f"could not find partition device '{device}' for partition {part_num}"
        )

    def expand_last_partition(self, size):
        """Grow the last partition to ``size`` MiB (0 for all free space) and its file system."""
        pc = PartedCall(str(self), self.runner)
        self._ensure_loaded()
        pc.set_partition_table_label(self.label)

        if not self.parts:
            raise PartitionerError("There is no partition to expand")

        part = self.parts[-1]
        if size > 0:
            size = mib_to_sectors(size, self.sector_size)
            if size < part.size_s:
                raise PartitionerError("Layout plugin can only expand a partition, not shrink it")
            if size > self._compute_free_space_without_last():
                raise PartitionerError(
                    f"not enough free space for to expand last partition up to {size} sectors"
                )

        part = replace(part, size_s=size)
        pc.delete_partition(part.number)
        pc.create_partition(part)
        pc.write_changes()
        self.reload()
        device = self.find_partition_device(part.number)
        return self._expand_filesystem(device)

    def _expand_filesystem(self, device):
        if self.fs_probe is None:
            raise PartitionerError(f"could not determine the file system of {device}")
        fs_type = self.fs_probe(device).strip()

        if fs_type in ("ext2", "ext3", "ext4"):
            self.runner.run("e2fsck", "-fy", device)
            self.runner.run("resize2fs", device)
        elif fs_type == "xfs":
            # xfs can only be grown while mounted
            with tempfile.TemporaryDirectory(prefix="partitioner") as mount_dir:
                self.runner.run("mount", "-t", "xfs", device, mount_dir)
                try:
                    self.runner.run("xfs_growfs", mount_dir)
                except Exception:
                    self.runner.run("umount", mount_dir)
                    raise
                self.runner.run("umount", mount_dir)
        else:
            raise PartitionerError(
                f"could not find filesystem for {device}, not resizing the filesystem"
            )
        return ""


def _new_partition(number, start, size, p_label, file_system):
    from elemental.parted import Partition

    return Partition(
        number=number,
        start_s=start,
        size_s=size,
        p_label=p_label,
        file_system=file_system,
    )