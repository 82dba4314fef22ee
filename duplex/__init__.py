import logging

__title__ = 'duplex'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .apps import *
from .checks import *
from .cli import *
from .commands import *
from .config import *
from .faults import *
from .input import *
from .output import *
from .repl import *
from .utils import Unset, coalesce, coerce

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
    "Unset",
    "coalesce",
    "coerce",
)

# Load the exposed API of the registry
__all__ += apps.__all__  # type: ignore[attr-defined]
# Load the exposed API of the checks
__all__ += checks.__all__  # type: ignore[attr-defined]
# Load the exposed API of the dispatcher
__all__ += cli.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the config store
__all__ += config.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the input helpers
__all__ += input.__all__  # type: ignore[attr-defined]
# Load the exposed API of the output helpers
__all__ += output.__all__  # type: ignore[attr-defined]
# Load the exposed API of the shell
__all__ += repl.__all__  # type: ignore[attr-defined]
