# ruff: noqa: TC003  # Path needed at runtime for dataclass field
"""CLI context for global state management.

The CLIContext is set once at CLI startup and made available to all
commands via contextvars.
"""

import contextvars
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from opensrc.config import Config


_current_cli_context: contextvars.ContextVar["CLIContext | None"] = (
    contextvars.ContextVar("cli_context", default=None)
)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI context with configuration and options.

    Attributes:
        config: Loaded configuration object.
        project_root: Directory whose ``opensrc/`` cache commands operate on.
        verbose: Enable verbose output with additional details.
        quiet: Suppress non-essential output.
        config_error: Error message if config loading failed.
        logger: Structured logger for CLI commands (writes to file only).
    """

    config: "Config" = field(repr=False)
    project_root: Path = field(default_factory=Path.cwd)
    verbose: bool = False
    quiet: bool = False
    config_error: str | None = None
    logger: "FilteringBoundLogger | None" = field(default=None, repr=False)

    @classmethod
    def get_current(cls) -> "CLIContext":
        """Get the active CLIContext, or a default one if none is set."""
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx

        from opensrc.config import Config  # noqa: PLC0415

        return cls(config=Config.from_dict({}))

    @classmethod
    def set_current(cls, ctx: "CLIContext") -> None:
        """Set the active CLIContext."""
        _ = _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Clear the active context. Mainly for tests."""
        _ = _current_cli_context.set(None)

    def get_logger(self, command: str = "") -> "FilteringBoundLogger":
        """Get the CLI logger, bound to ``command`` when given."""
        from opensrc.utils import create_cli_logger  # noqa: PLC0415

        logger = self.logger
        if logger is None:
            logger = create_cli_logger(
                level=self.config.logging.level.value,
                log_format=self.config.logging.format.value,  # type: ignore[arg-type]
                log_file=self.config.logging.file,
            )
        return logger.bind(command=command) if command else logger
