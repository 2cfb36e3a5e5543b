"""Abstract base class for artifact exporters.

The abstraction hides:
- File format and the library that writes it
- Mapping from decoded artifacts to document objects
- Handling of partially malformed artifacts
"""

from abc import ABC, abstractmethod
from pathlib import Path

from ..reply.models import DecodedReply


class ExportError(Exception):
    """Raised when an artifact cannot be exported at all."""


class ArtifactExporter(ABC):
    """Exports one kind of artifact of a decoded reply to a file.

    Exporters are synchronous, pure transforms of already decoded data.
    They never touch the network.
    """

    @abstractmethod
    def can_export(self, reply: DecodedReply) -> bool:
        """Check whether the reply carries a non-empty artifact of this kind."""

    @abstractmethod
    def export(self, reply: DecodedReply) -> bytes:
        """Render the artifact to file bytes.

        Raises:
            ExportError: If the reply has no artifact or rendering fails
        """

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """File extension including the dot, e.g. '.pptx'."""

    @property
    @abstractmethod
    def default_filename(self) -> str:
        """File name used when the caller does not choose one."""

    def write(self, reply: DecodedReply, path: str | Path | None = None) -> Path:
        """Export the artifact and write it to disk.

        Args:
            reply: Decoded reply holding the artifact
            path: Target file or directory (default: current directory)

        Returns:
            Path of the written file
        """
        target = Path(path) if path is not None else Path(self.default_filename)
        if target.is_dir():
            target = target / self.default_filename

        data = self.export(reply)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return target
