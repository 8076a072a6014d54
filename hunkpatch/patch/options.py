"""Options controlling how a patch is applied."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class PatchOptions(BaseModel):
    """Options consumed by the engine.

    ``force`` and ``interactive`` describe the caller's prompting policy and
    are carried along untouched.
    """

    reverse: bool = False
    backup: bool = False
    force: bool = False
    interactive: bool = False
    file: Optional[Path] = None
    output_file: Optional[Path] = None
