"""
Cleanup Handler

Keep the image directory from growing without bound. Only files ending in the image suffix are
considered; they are ordered by modification time and everything but the newest `keep` files is
deleted. Cleanup is best effort: a file that can't be removed is reported and skipped.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


class CleanupError(Exception):
    """
    Raised when the image directory itself can't be read.
    """

    pass


@dataclass
class PruneResult:
    deleted: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def list_images(image_dir: Path, suffix: str = ".jpg") -> list[os.DirEntry]:
    """
    Return the regular files in image_dir whose name ends with suffix (case-insensitive),
    oldest first. Ties keep the order of the directory listing. A file that is removed while the
    directory is being read is left out.
    """

    images = []

    try:
        with os.scandir(image_dir) as entries:
            for entry in entries:
                if not entry.name.lower().endswith(suffix.lower()):
                    continue

                if not entry.is_file(follow_symlinks=False):
                    continue

                try:
                    mtime = entry.stat(follow_symlinks=False).st_mtime
                except FileNotFoundError:
                    continue

                images.append((mtime, entry))

    except OSError as error:
        raise CleanupError(f"cleanup images: {error}")

    return [entry for _, entry in sorted(images, key=lambda image: image[0])]


def prune(image_dir: Path, keep: int, suffix: str = ".jpg") -> PruneResult:
    """
    Delete the oldest images in image_dir so that at most `keep` remain. Returns the names that were
    deleted and a warning for every file that could not be deleted.
    """

    result = PruneResult()
    images = list_images(image_dir, suffix)

    if len(images) <= keep:
        return result

    for entry in images[: len(images) - keep]:
        try:
            Path(entry.path).unlink()

        except OSError as error:
            result.warnings.append(f"cleanup images: {error}")

        else:
            result.deleted.append(entry.name)

    return result
