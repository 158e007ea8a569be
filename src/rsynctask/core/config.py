"""rsync option set.

This module maps RsyncOptions onto the command-line flags passed to rsync.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

# Boolean options in the order their flags are emitted.
_FLAG_OPTIONS = (
    "verbose",
    "quiet",
    "checksum",
    "archive",
    "recursive",
    "relative",
    "update",
    "links",
    "copy_links",
    "hard_links",
    "perms",
    "acls",
    "xattrs",
    "owner",
    "group",
    "devices",
    "specials",
    "times",
    "omit_dir_times",
    "dry_run",
    "whole_file",
    "one_file_system",
    "existing",
    "ignore_existing",
    "remove_source_files",
    "delete",
    "delete_excluded",
    "partial",
    "force",
    "prune_empty_dirs",
    "ignore_times",
    "size_only",
    "compress",
    "stats",
    "human_readable",
    "progress",
    "ipv4",
    "ipv6",
)

# Valued options, emitted as --name=value when set.
_VALUE_OPTIONS = (
    "info",
    "rsh",
    "rsync_path",
    "partial_dir",
    "password_file",
    "chmod",
    "bwlimit",
    "timeout",
    "port",
)

# Options that may be repeated, one flag per entry.
_LIST_OPTIONS = ("exclude", "include", "filter")

def _flag(name: str) -> str:
    return "--" + name.replace("_", "-")


@dataclass
class RsyncOptions:
    """Options for an rsync invocation.

    Every field maps to one rsync flag of the same name, with underscores
    turned into dashes (``dry_run`` -> ``--dry-run``). Empty strings, zero
    integers and empty lists are left out of the command line.

    Attributes:
        archive: Archive mode, equivalent to -rlptgoD.
        partial: Keep partially transferred files.
        progress: Show progress during transfer.
        human_readable: Output numbers in a human-readable format.
        info: Fine-grained informational verbosity (e.g. "progress2").
        bwlimit: Bandwidth limit, as accepted by rsync (e.g. "1.5m").
        timeout: I/O timeout in seconds.
        port: Alternate port for the rsync daemon.
        exclude: Patterns to exclude.
        include: Patterns not to exclude.
        filter: Filter rules.
    """

    verbose: bool = False
    quiet: bool = False
    checksum: bool = False
    archive: bool = False
    recursive: bool = False
    relative: bool = False
    update: bool = False
    links: bool = False
    copy_links: bool = False
    hard_links: bool = False
    perms: bool = False
    acls: bool = False
    xattrs: bool = False
    owner: bool = False
    group: bool = False
    devices: bool = False
    specials: bool = False
    times: bool = False
    omit_dir_times: bool = False
    dry_run: bool = False
    whole_file: bool = False
    one_file_system: bool = False
    existing: bool = False
    ignore_existing: bool = False
    remove_source_files: bool = False
    delete: bool = False
    delete_excluded: bool = False
    partial: bool = False
    force: bool = False
    prune_empty_dirs: bool = False
    ignore_times: bool = False
    size_only: bool = False
    compress: bool = False
    stats: bool = False
    human_readable: bool = False
    progress: bool = False
    ipv4: bool = False
    ipv6: bool = False

    info: str = ""
    rsh: str = ""
    rsync_path: str = ""
    partial_dir: str = ""
    password_file: str = ""
    chmod: str = ""
    bwlimit: str = ""
    timeout: int = 0
    port: int = 0

    exclude: list[str] = field(default_factory=list)
    include: list[str] = field(default_factory=list)
    filter: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RsyncOptions:
        """Create options from a configuration dictionary.

        Keys may use either underscores or dashes (``dry-run``).

        Raises:
            ValueError: If a key does not name a known option.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = key.replace("-", "_")
            if name not in known:
                raise ValueError(f"Unknown rsync option: {key}")
            if name in _LIST_OPTIONS and isinstance(value, str):
                value = [value]
            kwargs[name] = value
        return cls(**kwargs)

    def to_args(self) -> list[str]:
        """Build the rsync command-line flags for these options.

        Returns:
            Flags in a stable order: switches, then valued options,
            then repeated options.
        """
        args = [_flag(name) for name in _FLAG_OPTIONS if getattr(self, name)]

        for name in _VALUE_OPTIONS:
            value = getattr(self, name)
            if value:
                args.append(f"{_flag(name)}={value}")

        for name in _LIST_OPTIONS:
            for value in getattr(self, name):
                args.append(f"{_flag(name)}={value}")

        return args
