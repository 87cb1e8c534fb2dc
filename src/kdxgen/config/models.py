"""Configuration models describing kdxgen settings."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAX_NAME_LENGTH = 48


class KdxgenBaseModel(BaseModel):
    """Shared configuration for kdxgen Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class CollectionSettings(KdxgenBaseModel):
    """Options shaping the generated collections.

    Attributes:
        max_name_length: Maximum number of characters in a collection name.
            Longer names are shortened and suffixed with an ellipsis.
        uppercase_hex: Whether checksum keys use uppercase hexadecimal digits.
        locale: Locale tag appended to every collection name in the output.
    """

    max_name_length: int = Field(default=DEFAULT_MAX_NAME_LENGTH, ge=4)
    uppercase_hex: bool = False
    locale: str = "en-US"


class DeviceSettings(KdxgenBaseModel):
    """Layout of the mounted reading device.

    Attributes:
        documents_dir: Name of the directory holding the e-books.
        signature_dirs: Directories that must all exist at the device root.
        mount_prefix: Path of the documents directory as seen by the device.
        collections_file: Location of the collections file relative to the root.
        backup_existing: Whether an existing collections file is kept as a backup.
    """

    documents_dir: str = "documents"
    signature_dirs: List[str] = Field(
        default_factory=lambda: ["audible", "documents", "music", "system"]
    )
    mount_prefix: str = "/mnt/us/documents/"
    collections_file: str = "system/collections.json"
    backup_existing: bool = True


class LoggingSettings(KdxgenBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Path of the rotating log file.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "INFO"
    file: str = "~/.kdxgen/kdxgen.log"
    max_size_mb: int = 5
    backup_count: int = 3


class CLIOptions(KdxgenBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        verbose_default: Whether log records are echoed to the console by default.
    """

    quiet_default: bool = False
    verbose_default: bool = False


class KdxgenConfig(KdxgenBaseModel):
    """Top-level configuration struct for kdxgen."""

    collections: CollectionSettings = Field(default_factory=CollectionSettings)
    device: DeviceSettings = Field(default_factory=DeviceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_MAX_NAME_LENGTH",
    "KdxgenBaseModel",
    "CollectionSettings",
    "DeviceSettings",
    "LoggingSettings",
    "CLIOptions",
    "KdxgenConfig",
]
