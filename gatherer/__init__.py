from importlib.metadata import version, PackageNotFoundError

from gatherer.services.scanner import scan_extensions, scan_extensions_sync
from gatherer.services.exporter import export, export_sync, export_to_file, export_to_string

try:
    __version__ = version("source-gatherer")
except PackageNotFoundError:
    # Package is not installed (e.g. during local development)
    __version__ = "0.1.0-local"

__all__ = [
    "scan_extensions",
    "scan_extensions_sync",
    "export",
    "export_sync",
    "export_to_file",
    "export_to_string",
    "__version__",
]
