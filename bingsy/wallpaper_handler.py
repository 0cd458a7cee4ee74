"""
Gnome Wallpaper Handler

This module handles updates to the Gnome desktop background. Settings for desktop backgrounds are
defined under the schema: org.gnome.desktop.background. More information on this schema can be found at:
https://github.com/GNOME/gsettings-desktop-schemas/blob/master/schemas/org.gnome.desktop.background.gschema.xml.in

Two keys are written, in order: 'picture-uri' (the image) and 'picture-options' (how the image is
scaled to the screen). A BackdropSetter is the narrow interface used for that. The default one drops
into the gsettings shell command; the Gio one talks to the same schema through PyGObject:
https://pygobject.readthedocs.io/en/latest/
"""

import subprocess
from collections import OrderedDict
from pathlib import Path

from bingsy import image_handler

SCHEMA = "org.gnome.desktop.background"


class WallpaperUpdateError(Exception):
    """
    Raised when an attempt to update Gnome desktop background fails.
    """

    pass


class BackdropSetter:
    """
    Sets the desktop background image and its scaling mode.
    """

    def set_image(self, img_path: Path) -> None:
        raise NotImplementedError

    def set_mode(self, mode: str) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        """Make sure written values reach the settings backend. Nothing to do by default."""

        pass


class GsettingsBackdropSetter(BackdropSetter):
    """
    Update the background through the gsettings command line tool.
    """

    def __init__(self, cmd: str = "gsettings"):
        self.cmd = cmd

    def _set(self, key: str, value: str):
        set_desktop_background = OrderedDict(
            [
                ("cmd", self.cmd),
                ("subcmd", "set"),
                ("schema", SCHEMA),
                ("key", key),
                ("value", value),
            ]
        )

        subprocess.run(
            list(set_desktop_background.values()),
            text=True,
            check=True,
            stdin=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            stdout=subprocess.PIPE,
        )

    def set_image(self, img_path: Path):
        self._set("picture-uri", Path(img_path).as_uri())

    def set_mode(self, mode: str):
        self._set("picture-options", mode)


class GioBackdropSetter(BackdropSetter):
    """
    Update the background through the Gio.Settings object, which provides dict-like access to the
    key-value pairs of the schema. Requires PyGObject (pip install bingsy[gio]).

    Writes through Gio.Settings are delayed. bingsy exits right after updating the background, so
    flush() calls Gio.Settings.sync() to wait until the values are stored.
    """

    def __init__(self, settings=None, sync=None):
        if settings is None:
            # see PyGObject API ref for Gio.Settings or >>> help(Gio.Settings) in REPL
            from gi.repository import Gio

            settings = Gio.Settings.new(SCHEMA)
            sync = Gio.Settings.sync

        self.settings = settings
        self.sync = sync

    def set_image(self, img_path: Path):
        self.settings["picture-uri"] = Path(img_path).as_uri()

    def set_mode(self, mode: str):
        self.settings["picture-options"] = mode

    def flush(self):
        if self.sync is not None:
            self.sync()


def get_setter(backend: str = "gsettings") -> BackdropSetter:
    """Return the BackdropSetter for a configured backend name."""

    if backend == "gio":
        return GioBackdropSetter()

    return GsettingsBackdropSetter()


def update_wallpaper(
    img_path: Path, picture_option: str, setter: BackdropSetter = None
) -> None:
    """
    Update the background image to the one specified by img_path and apply picture_option.
    Raise WallpaperUpdateError if issues are encountered during the attempt. If setting the
    option fails after the image was set, the new image stays in place.
    """

    if setter is None:
        setter = GsettingsBackdropSetter()

    try:
        wallpaper_location = Path(img_path).expanduser().resolve()
    except TypeError:
        raise WallpaperUpdateError(
            f"Invalid parameter: {img_path} is not a valid Pathlike object."
        )

    # the schema is written directly, gnome does no validation of the path itself.
    # an invalid value silently leaves the desktop without an image, so catch this first.
    if not wallpaper_location.is_file():
        raise WallpaperUpdateError(
            f"Invalid path provided for image location: {img_path} does not exist."
        )

    try:
        image_handler.validate_image(wallpaper_location)
    except image_handler.InvalidImageError:
        raise WallpaperUpdateError(
            f"Invalid image type provided. {wallpaper_location.name} is not a valid image."
        )

    steps = (
        ("set background image", setter.set_image, wallpaper_location),
        ("set background options", setter.set_mode, picture_option),
    )

    for step, action, value in steps:
        try:
            action(value)

        except subprocess.CalledProcessError as error:
            detail = (error.stderr or "").strip() or error
            raise WallpaperUpdateError(f"{step}: {detail}")

        except (OSError, TypeError, ValueError) as error:
            raise WallpaperUpdateError(f"{step}: {error}")

    try:
        setter.flush()
    except (OSError, RuntimeError) as error:
        raise WallpaperUpdateError(f"sync background settings: {error}")
