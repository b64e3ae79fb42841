"""Format block devices with the mkfs tool matching a file system."""

import re

from elemental.parted import PartitionerError

_LINUX_FS_RE = re.compile("ext[2-4]|xfs")
_FAT_FS_RE = re.compile("fat|vfat")


class MkfsCall:
    """A prepared mkfs invocation for one device."""

    def __init__(self, dev, file_system, label, runner, *args):
        self.dev = dev
        self.file_system = file_system
        self.label = label
        self.runner = runner
        self.custom_opts = list(args)

    def build_options(self):
        """Return the mkfs arguments, raising PartitionerError for unsupported file systems."""
        if _LINUX_FS_RE.search(self.file_system):
            label_flag = "-L"
        elif _FAT_FS_RE.search(self.file_system):
            label_flag = "-n"
        else:
            raise PartitionerError(f"unsupported filesystem: {self.file_system}")
        opts = [label_flag, self.label] if self.label else []
        return [*opts, *self.custom_opts, self.dev]

    def apply(self):
        """Run mkfs and return its output."""
        opts = self.build_options()
        return self.runner.run(f"mkfs.{self.file_system}", *opts)


def format_device(runner, device, file_system, label, *args):
    """Format a block device and return the mkfs output."""
    return MkfsCall(device, file_system, label, runner, *args).apply()