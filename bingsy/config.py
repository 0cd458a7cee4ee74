"""
bingsy Configuration Management

This file handles utilities related to generating and loading variables from a configuration file.
A BingsyConfig should be loaded once at startup by the command entry point and then passed explicitly
to every pipeline step. Raise a BingsyConfigError for any issues that arise in processing or retrieving
these configuration variables.

The configuration file is "config.json" and for Ubuntu (current development target) this is saved
at ~/.config/bingsy/config.json as per modern Linux app development conventions. The directory
can be moved by setting the BINGSY_CONFIG_DIR environment variable.

The allow-lists for resolutions, picture options and markets mirror what the Bing archive and the
Gnome background schema accept.
"""

import json
import os
from dataclasses import dataclass
from dataclasses import asdict
from dataclasses import replace
from pathlib import Path, PurePath
from typing import Optional

from bingsy.cli_utils.console import warn


BING_SERVICE = "www.bing.com:443"
NR_IMAGES = 1
MAX_INDEX = 7

RESOLUTIONS = ("1024x768", "1280x720", "1366x768", "1920x1080", "1920x1200")
PICTURE_OPTIONS = (
    "none",
    "wallpaper",
    "centered",
    "scaled",
    "stretched",
    "zoom",
    "spanned",
)
MARKETS = ("en-US", "zh-CN", "ja-JP", "en-AU", "en-UK", "de-DE", "en-NZ", "en-CA")
BACKENDS = ("gsettings", "gio")

DEFAULT_RESOLUTION = "1920x1080"
DEFAULT_PICTURE_OPTION = "zoom"
DEFAULT_MARKET = "en-UK"
DEFAULT_BACKEND = "gsettings"


def default_image_dir() -> Path:
    """
    Images go to ~/Pictures/BingWallpaper. If the home directory cannot be determined fall back
    to a BingWallpaper directory relative to the working directory.
    """

    home = Path("~").expanduser()
    if str(home) == "~":
        return Path("BingWallpaper")

    return home / "Pictures" / "BingWallpaper"


def config_dir() -> Path:
    """Directory holding config.json, taken from BINGSY_CONFIG_DIR if set."""

    try:
        return Path(os.environ["BINGSY_CONFIG_DIR"]).expanduser()

    except KeyError:
        return Path("~/.config/bingsy").expanduser()


class BingsyConfigError(Exception):
    """Raise when an issue occurs with handling bingsy configuration."""

    pass


class PathEncoder(json.JSONEncoder):
    """
    custom encoder adds support for serializing pathlib objects as strings
    """

    def default(self, o):
        if isinstance(o, PurePath):
            return str(o)

        else:
            return json.JSONEncoder.default(self, o)


@dataclass(frozen=True)
class BingsyConfig:
    """
    Immutable set of settings for a single bingsy run.

    A BingsyConfig is created from the keyword arguments of a deserialized json object and then
    overridden by any options given on the command line (see dataclasses.replace). The json object
    is kept flat on purpose so each key maps directly onto a field here.
    """

    image_dir: Path = default_image_dir()
    resolution: str = DEFAULT_RESOLUTION
    picture_option: str = DEFAULT_PICTURE_OPTION
    market: str = DEFAULT_MARKET
    index: int = 0
    keep: int = 10
    clean: bool = True
    retries: int = 5
    retry_delay: float = 10.0
    request_timeout: Optional[float] = None
    backend: str = DEFAULT_BACKEND

    def __post_init__(self):
        """
        Handle the case where a new BingsyConfig is created from JSON, which cannot
        deserialize a str into a Path. The dataclass is frozen so the converted value
        has to be written with object.__setattr__.
        """

        object.__setattr__(self, "image_dir", Path(self.image_dir).expanduser())

    def validated(self) -> "BingsyConfig":
        """
        Return a copy of this config in which every value outside its allow-list is replaced by
        the default. Each replacement is reported as a warning rather than an error so that a typo
        in a scheduled job still produces a wallpaper.
        """

        changes = {}

        if self.resolution not in RESOLUTIONS:
            warn(f"invalid resolution {self.resolution}, fall back to default.")
            changes["resolution"] = DEFAULT_RESOLUTION

        if self.picture_option not in PICTURE_OPTIONS:
            warn(f"invalid picture option {self.picture_option}, fall back to default.")
            changes["picture_option"] = DEFAULT_PICTURE_OPTION

        if self.market not in MARKETS:
            warn(f"invalid market {self.market}, fall back to default.")
            changes["market"] = DEFAULT_MARKET

        if self.backend not in BACKENDS:
            warn(f"invalid backend {self.backend}, fall back to default.")
            changes["backend"] = DEFAULT_BACKEND

        if not 0 <= self.index <= MAX_INDEX:
            clamped = min(max(self.index, 0), MAX_INDEX)
            warn(f"index {self.index} out of range 0-{MAX_INDEX}, using {clamped}.")
            changes["index"] = clamped

        if self.keep < 1:
            raise BingsyConfigError(f"keep must be at least 1, got {self.keep}.")

        if self.retries < 1:
            raise BingsyConfigError(f"retries must be at least 1, got {self.retries}.")

        if self.retry_delay < 0:
            raise BingsyConfigError(
                f"retry_delay must not be negative, got {self.retry_delay}."
            )

        if self.request_timeout is not None and self.request_timeout <= 0:
            raise BingsyConfigError(
                f"request_timeout must be greater than 0, got {self.request_timeout}."
            )

        return replace(self, **changes)

    def generate_config_json(self, dest_dir: Path = None) -> Path:
        """
        Write the BingsyConfig to file, serializing to JSON. Returns filepath of written
        config.json file which is located at dest_dir (default: config_dir()).

        Warning: will overwrite any existing config file for bingsy, by design.
        """

        if dest_dir is None:
            dest_dir = config_dir()

        try:
            to_json = json.dumps(
                asdict(self), sort_keys=True, indent=4, cls=PathEncoder
            )

        except TypeError as error:
            raise BingsyConfigError(
                f"There was an error trying to serialize config data to JSON: {error}"
            )

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            dest_file = dest_dir / "config.json"
            with open(dest_file, "w") as file:
                file.write(to_json)

        except OSError as error:
            raise BingsyConfigError(
                f"There was an error saving the configuration file: {error}."
            )

        return dest_file


def load_config() -> BingsyConfig:
    """
    Load config.json from config_dir() and instantiate variables as a BingsyConfig dataclass.
    Raise BingsyConfigError if the file is missing, unreadable, or does not describe a BingsyConfig.
    """

    config_src = config_dir() / "config.json"

    try:
        with config_src.open("r") as file:
            from_json = json.loads(file.read())
            config = BingsyConfig(**from_json)

    except json.JSONDecodeError as error:
        raise BingsyConfigError(f"There was an issue reading the config: {error}")

    except TypeError as error:
        raise BingsyConfigError(f"Unknown setting in {config_src}: {error}")

    except OSError as error:
        raise BingsyConfigError(f"There was an issue opening the config: {error}")

    return config


def init(write: bool = True) -> BingsyConfig:
    """
    Initialize bingsy settings. If no config file exists yet the defaults are used and, unless
    write is False, written out; a config file that exists but cannot be parsed is an error.
    """

    if not (config_dir() / "config.json").exists():
        config = BingsyConfig()

        if not write:
            return config

        try:
            config.generate_config_json()

        except BingsyConfigError as error:
            # a read-only home directory should not stop the wallpaper update
            warn(f"could not write default config: {error}")

        return config

    return load_config()
