"""execforge - execute and compile visualization objects against the platform."""

__version__ = "0.1.0"

from execforge.compiler.execution_builder import (  # noqa: E402
    ExecutionCompiler,
    md_to_execution_configuration,
)
from execforge.config import ClientConfig  # noqa: E402
from execforge.errors import (  # noqa: E402
    AuthenticationError,
    CompilationError,
    DataResultError,
    ExecforgeError,
    ExecutionFailedError,
    PlatformError,
)
from execforge.executor.http_executor import ExecutionClient  # noqa: E402
from execforge.workspace import Workspace  # noqa: E402

__all__ = [
    "AuthenticationError",
    "ClientConfig",
    "CompilationError",
    "DataResultError",
    "ExecforgeError",
    "ExecutionClient",
    "ExecutionCompiler",
    "ExecutionFailedError",
    "PlatformError",
    "Workspace",
    "__version__",
    "md_to_execution_configuration",
]
