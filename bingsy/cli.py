"""
bingsy

Download the Bing image of the day, install it as the Gnome desktop background and keep the
wallpaper folder tidy.

This module defines the entry point to the bingsy CLI. Settings are read from the config file
(see config.py), overridden by any options given on the command line, and then passed explicitly
through the pipeline:

    reachability check -> image metadata -> image download -> desktop update -> cleanup

Each step raises its own exception type on failure. The @catch_errors decorator turns any of these
into a formatted message on stderr and a non-zero exit code; failures to delete single old images
during cleanup are only reported as warnings.
"""

from dataclasses import replace
from io import StringIO
from pathlib import Path

import click
from click.core import ParameterSource

from bingsy import config as bingsy_config
from bingsy import bing_handler
from bingsy import cleanup_handler
from bingsy import image_handler
from bingsy import network_handler
from bingsy import wallpaper_handler

from bingsy.cli_utils.console import console
from bingsy.cli_utils.console import describe
from bingsy.cli_utils.console import confirm_success
from bingsy.cli_utils.console import warn
from bingsy.cli_utils.decorators import catch_errors


def overrides(ctx: click.Context, options: dict) -> dict:
    """Drop options that were not given on the command line so the config file values stay."""

    return {
        key: value
        for key, value in options.items()
        if ctx.get_parameter_source(key) is not ParameterSource.DEFAULT
    }


@click.command()
@catch_errors
@click.pass_context
@click.option(
    "--index",
    type=int,
    help=f"0=today, 1=yesterday, ... {bingsy_config.MAX_INDEX}.",
)
@click.option(
    "--res",
    "resolution",
    help=f"Preferred resolution: {', '.join(bingsy_config.RESOLUTIONS)}.",
)
@click.option(
    "--img-opt",
    "picture_option",
    help=f"How the image fits the screen: {', '.join(bingsy_config.PICTURE_OPTIONS)}.",
)
@click.option(
    "--market",
    help=f"Bing market: {', '.join(bingsy_config.MARKETS)}.",
)
@click.option(
    "--img-dir",
    "image_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Image directory (default: ~/Pictures/BingWallpaper).",
)
@click.option(
    "--clean/--no-clean",
    default=True,
    help="Keep only the newest --keep images and remove the others.",
)
@click.option(
    "--keep",
    type=click.IntRange(min=1),
    help="Number of images to keep when cleaning up.",
)
@click.option(
    "--backend",
    type=click.Choice(bingsy_config.BACKENDS),
    help="Mechanism used to update the desktop background.",
)
@click.option(
    "--timeout",
    "request_timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Timeout in seconds for each http request (default: none).",
)
@click.option(
    "--info",
    is_flag=True,
    default=False,
    help="Show image meta info only, no download, no clean.",
)
@click.option(
    "--quiet",
    is_flag=True,
    default=False,
    help="Silence all output printed to stdout. Errors and warnings still go to stderr.",
)
@click.version_option(package_name="bingsy")
def cli(ctx: click.Context, info, quiet, **options):
    """
    bingsy

    Download wallpaper images from the Bing website and install them as the Gnome
    desktop background. You can choose one of this week's images.

    \b
    Set today's image:
        $ bingsy

    \b
    Use yesterday's image from the German market, stretched to the screen:
        $ bingsy --index 1 --market de-DE --img-opt stretched

    \b
    Only show what today's image is:
        $ bingsy --info
    """

    # capture everything meant for stdout in a junk stream
    if quiet:
        console.file = StringIO()

    # --info only reads, it never writes the default config file
    config = replace(
        bingsy_config.init(write=not info), **overrides(ctx, options)
    ).validated()

    # the network might not be up yet if bingsy runs from a startup script
    network_handler.verify_reachable(
        bingsy_config.BING_SERVICE, config.retries, config.retry_delay
    )

    meta = bing_handler.fetch_metadata(
        bing_handler.metadata_url(config.index, bingsy_config.NR_IMAGES, config.market),
        timeout=config.request_timeout,
    )
    image = meta.first

    describe(f"Title: {image.copyright}")
    describe(f"From: {image.start_label} until: {image.end_label}")

    if info:
        return

    try:
        config.image_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise image_handler.ImageDownloadError(f"create image directory: {error}")

    img_path = image_handler.download_image(
        bing_handler.preferred_image_url(image.url_base, config.resolution),
        bing_handler.default_image_url(image.url),
        config.image_dir,
        timeout=config.request_timeout,
    )
    confirm_success(f":white_check_mark-emoji: saved '{img_path.name}' to {img_path.parent}")

    wallpaper_handler.update_wallpaper(
        img_path,
        config.picture_option,
        setter=wallpaper_handler.get_setter(config.backend),
    )
    confirm_success(
        f":desktop_computer-emoji: updated wallpaper to {img_path} ({config.picture_option})"
    )

    if config.clean:
        result = cleanup_handler.prune(config.image_dir, config.keep)

        for name in result.deleted:
            describe(f"cleanup images: deleted {name}")

        for message in result.warnings:
            warn(message)


def main():
    cli()


if __name__ == "__main__":
    main()
