"""Default labels, paths, sizes and options used when installing a system."""

import platform

GRUB_CONF = "/etc/cos/grub.cfg"
GRUB_OEM_ENV = "grub_oem_env"
GRUB_DEF_ENTRY = "cOs"
BIOS_PART_NAME = "p.bios"
EFI_LABEL = "COS_GRUB"
EFI_PART_NAME = "p.grub"
ACTIVE_LABEL = "COS_ACTIVE"
PASSIVE_LABEL = "COS_PASSIVE"
SYSTEM_LABEL = "COS_SYSTEM"
RECOVERY_LABEL = "COS_RECOVERY"
RECOVERY_PART_NAME = "p.recovery"
STATE_LABEL = "COS_STATE"
STATE_PART_NAME = "p.state"
PERSISTENT_LABEL = "COS_PERSISTENT"
PERSISTENT_PART_NAME = "p.persistent"
OEM_LABEL = "COS_OEM"
OEM_PART_NAME = "p.oem"
MOUNT_BINARY = "/usr/bin/mount"
EFI_DEVICE = "/sys/firmware/efi"
LINUX_FS = "ext4"
LINUX_IMG_FS = "ext2"
SQUASH_FS = "squashfs"
EFI_FS = "vfat"
BIOS_FS = ""
EFI_SIZE = 64
OEM_SIZE = 64
STATE_SIZE = 15360
RECOVERY_SIZE = 8192
PERSISTENT_SIZE = 0
BIOS_SIZE = 1
IMG_SIZE = 3072
HTTP_TIMEOUT = 60
PART_STAGE = "partitioning"
ISO_MNT = "/run/initramfs/live"
RECOVERY_DIR = "/run/cos/recovery"
STATE_DIR = "/run/cos/state"
OEM_DIR = "/run/cos/oem"
PERSISTENT_DIR = "/run/cos/persistent"
ACTIVE_DIR = "/run/cos/active"
EFI_DIR = "/run/cos/efi"
RECOVERY_SQUASH_FILE = "recovery.squashfs"
ISO_ROOT_FILE = "rootfs.squashfs"
ACTIVE_IMG_FILE = "active.img"
PASSIVE_IMG_FILE = "passive.img"
RECOVERY_IMG_FILE = "recovery.img"
ISO_BASE_TREE = "/run/rootfsbase"
COS_SETUP = "/usr/bin/cos-setup"
AFTER_INSTALL_CHROOT_HOOK = "after-install-chroot"
AFTER_INSTALL_HOOK = "after-install"
BEFORE_INSTALL_HOOK = "before-install"
AFTER_RESET_CHROOT_HOOK = "after-reset-chroot"
AFTER_RESET_HOOK = "after-reset"
BEFORE_RESET_HOOK = "before-reset"
LUET_COSIGN_PLUGIN = "luet-cosign"
LUET_MTREE_PLUGIN = "luet-mtree"
UPGRADE_ACTIVE = "active"
UPGRADE_RECOVERY = "recovery"
CHANNEL_SOURCE = "system/cos"
UPGRADE_RECOVERY_DIR = "/run/initramfs/live"
TRANSITION_IMG_FILE = "transition.img"
TRANSITION_SQUASH_FILE = "transition.squashfs"
RUNNING_STATE_DIR = "/run/initramfs/cos-state"
ACTIVE_IMG_NAME = "active"
PASSIVE_IMG_NAME = "passive"
RECOVERY_IMG_NAME = "recovery"
GPT = "gpt"

DIR_PERM = 0o777
FILE_PERM = 0o666

EJECT_SCRIPT = "#!/bin/sh\n/usr/bin/eject -rmF"

_ARM_MACHINES = frozenset({"aarch64", "arm64"})


def get_cloud_init_paths():
    """Return the directories searched for cloud-init configuration."""
    return ["/system/oem", "/oem/", "/usr/local/cloud-config/"]


def get_default_squashfs_options():
    """Return the default mksquashfs options, with a BCJ filter for this architecture."""
    options = ["-b", "1024k", "-comp", "xz", "-Xbcj"]
    if platform.machine().lower() in _ARM_MACHINES:
        options.append("arm")
    else:
        options.append("x86")
    return options