# elemental

Building blocks for laying out and preparing disks during an operating
system installation. The package expresses partition tables and
filesystems as commands. It passes those commands to a runner that you
supply, so every call to an external tool goes through your code and can
be replaced in tests.

## Installation

```
pip install elemental
```

## Runners

A runner is any object that has a `run(command, *args)` method. The
method returns the command's output as text. It raises an exception when
the command fails. You decide what the runner does: it can record
commands, return simulated output, or forward the commands to the system.

```python
from elemental.parted import PartedCall, Partition

class RecordingRunner:
    def __init__(self):
        self.calls = []

    def run(self, command, *args):
        self.calls.append([command, *args])
        return ""

runner = RecordingRunner()
call = PartedCall("/dev/sda", runner)
call.wipe_table(True)
call.create_partition(
    Partition(number=1, start_s=2048, size_s=0, p_label="p.root", file_system="ext4")
)
call.write_changes()
print(runner.calls[0])
# ['parted', '--script', '--machine', '--', '/dev/sda', 'unit', 's',
#  'mklabel', 'gpt', 'mkpart', 'p.root', 'ext4', '2048', '100%']
```

## Modules

### `elemental.constants`

Default partition labels and names, filesystem names, sizes in MiB,
mount paths and permissions. The module has two functions:

- `get_cloud_init_paths()` returns the directories that are searched for cloud-config files.
- `get_default_squashfs_options()` returns the default `mksquashfs` options. The BCJ filter in those options is `arm` on ARM machines and `x86` on all others.

### `elemental.parted`

- `Partition` is a dataclass that describes a partition in sectors. It has the fields `number`, `start_s`, `size_s`, `p_label` and `file_system`. A `size_s` of 0 means "up to the end of the disk".
- `PartedCall(dev, runner)` queues changes to the partition table of one device. The methods that queue changes are:
  - `wipe_table`
  - `set_partition_table_label`
  - `create_partition`
  - `delete_partition`
  - `set_partition_flag`

  `write_changes()` sends everything queued as a single `parted` command and returns its output. When nothing is queued it does nothing and returns `""`.
- Partition naming depends on the table label. An empty or unknown table label falls back to `gpt`. On GPT, partitions take their `p_label`, or `part<N>` when the label is empty. On msdos every partition is `primary`. Any fat filesystem is passed to parted as `fat32`.
- `print()` returns the output of `parted ... unit s print`. You parse that output with these methods:
  - `get_last_sector`
  - `get_sector_size`
  - `get_partition_table_label`
  - `get_partitions`
- `PartitionerError` is raised when output cannot be parsed. The other modules in the package also raise it for invalid requests.

### `elemental.mkfs`

- `MkfsCall(dev, file_system, label, runner, *custom_opts)` builds a `mkfs.<fs>` command.
  - ext2–4 and xfs take the label with `-L`.
  - fat and vfat take it with `-n`.
  - Any other filesystem raises `PartitionerError`.
- `build_options()` returns the argument list.
- `apply()` runs the command.
- `format_device(runner, device, file_system, label, *custom_opts)` formats a device in one call.

### `elemental.disk`

`Disk(device, runner, logger=None, root="/", fs_probe=None)` tracks one
block device.

- Device paths are looked up below `root`. This lets tests work inside a temporary directory.
- `fs_probe` is a callable that returns the filesystem type of a partition device.

What `Disk` can do:

- `exists()` checks that the device is present. If the device is a symlink, it resolves the link.
- `reload()` reads sector size, last sector, table label and partitions. If parted reports unallocated space at the end of an enlarged disk, it first runs `sgdisk -e`. The values read are kept in `sector_size`, `last_sector`, `label` and `parts`.
- `get_free_space()` returns the number of free sectors after the last partition. `check_disk_free_space_mib(min_space)` tells whether at least that many MiB are free.
- `new_partition_table(label)` writes a fresh `msdos` or `gpt` table.
- `add_partition(size, file_system, p_label, *flags)` appends a partition of `size` MiB, where 0 means all remaining space. It switches on the given flags and returns the new partition number. It raises `PartitionerError` when there is not enough room.
- `format_partition(part_num, file_system, label)` runs mkfs on a partition.
- `wipe_fs_on_partition(device)` runs `wipefs --all` on a device.
- `find_partition_device(part_num)` returns the partition's device path: `/dev/sda1`, or `/dev/loop0p1` when the disk name ends in a digit.
  - Before each check it runs `udevadm settle`.
  - It retries `partition_tries` times, waiting `retry_delay` seconds between attempts.
- `expand_last_partition(size)` grows the last partition to `size` MiB, where 0 means the rest of the disk. Shrinking is refused. It then grows the filesystem:
  - ext2–4 with `e2fsck` and `resize2fs`;
  - xfs with `xfs_growfs`, on a temporary mount.

`mib_to_sectors(size, sector_size)` converts MiB to sectors.

### `elemental.http_client`

- `Client(timeout=60)` downloads with the standard library.
- `get_url(url, destination)` saves the response to `destination` and returns the path that was written.
  - When `destination` is an existing directory, the file name comes from the `Content-Disposition` header, or else from the URL.
  - Progress is logged at debug level.
  - Network failures raise `OSError`.

All logging goes through the standard `logging` module.

## What it does not do

The package is a library and has no command-line tool. It does not
mount partitions, deploy system images, or run cloud-config stages. It
does not detect filesystem types on its own: `Disk.expand_last_partition`
needs an `fs_probe` callable. It never starts processes itself. Every
command goes through the runner you supply.