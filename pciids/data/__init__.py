from __future__ import annotations
from importlib import resources
from importlib.resources.abc import Traversable

# Resource name the build hook places in the wheel/sdist.
TEXT_NAME = "pci.ids"


def text_resource() -> Traversable:
    return resources.files(__package__).joinpath(TEXT_NAME)


def bundled_text_available() -> bool:
    try:
        return text_resource().is_file()
    except OSError:  # pragma: no cover
        return False
