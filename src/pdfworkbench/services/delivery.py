"""
PDF Workbench - Output Delivery

Hands finished results over to their destination. The file sink writes
into an output directory and never overwrites an existing file.
"""

import logging
import os
from pathlib import Path
from typing import Protocol

from pdfworkbench.utils.exceptions import DeliveryError
from pdfworkbench.utils.i18n import _

logger = logging.getLogger(__name__)


class DeliverySink(Protocol):
    """Destination for transformation results."""

    def deliver(self, payload: bytes | str, suggested_name: str) -> str: ...


class FileDelivery:
    """Write results as files into *output_dir*.

    Text payloads are written as UTF-8. When a file with the suggested name
    exists already, `` (1)``, `` (2)``... is inserted before the extension.
    """

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir).expanduser()

    def _generate_unique_path(self, suggested_name: str) -> Path:
        """Return the first free path for *suggested_name* in the output dir."""
        name, ext = os.path.splitext(os.path.basename(suggested_name) or "output")
        path = self.output_dir / f"{name}{ext}"

        counter = 1
        while path.exists():
            path = self.output_dir / f"{name} ({counter}){ext}"
            counter += 1
        return path

    def deliver(self, payload: bytes | str, suggested_name: str) -> str:
        """Write *payload* and return the path written.

        Raises:
            DeliveryError: If the directory or file cannot be written.
        """
        data = payload.encode("utf-8") if isinstance(payload, str) else payload

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DeliveryError(str(self.output_dir), e.strerror or str(e)) from e

        # "x" mode fails if another writer claimed the name in the meantime
        while True:
            path = self._generate_unique_path(suggested_name)
            try:
                with open(path, "xb") as f:
                    f.write(data)
                break
            except FileExistsError:
                continue
            except OSError as e:
                logger.error("Could not write %s: %s", path, e)
                raise DeliveryError(str(path), e.strerror or str(e)) from e

        if path.name != os.path.basename(suggested_name):
            logger.info(_("Generated unique filename to avoid overwriting: {0}").format(path.name))
        logger.info("Delivered %s (%d bytes)", path, len(data))
        return str(path)
