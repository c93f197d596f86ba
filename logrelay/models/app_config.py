"""Per-application log configuration models.

An ``AppConfig`` pairs the options handed to the process supervisor with
the logging options the router consumes.  Every model is frozen: relays
compute a new *effective* configuration instead of patching the one they
were given.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Destination meaning "throw the stream away".
DISCARD = "/dev/null"


class LogMode(str, Enum):
    """How an application's output reaches its logger."""

    BUS = "bus"
    TAIL_LOG_FILE = "tailLogFile"


class Stream(str, Enum):
    """The two output streams of a managed process."""

    STDOUT = "stdout"
    STDERR = "stderr"


class SupervisorOptions(BaseModel):
    """Options the supervisor uses to run the application.

    Only ``name`` and the output destinations are interpreted here.  Any
    other supervisor keys are carried through untouched.

    ``out_file`` and ``error_file`` are the supervisor's older spellings
    of ``output`` and ``error``; relays keep them in sync so the
    supervisor never writes a second, unmanaged copy of the logs.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = Field(min_length=1)
    output: str | None = None
    error: str | None = None
    out_file: str | None = None
    error_file: str | None = None


class AppLogOptions(BaseModel):
    """Logging options for a single application."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mode: LogMode = LogMode.BUS
    show_stdout: bool = Field(default=True, alias="showStdout")
    show_stderr: bool = Field(default=True, alias="showStderr")
    log_to_managed_dir: bool = Field(default=True, alias="logToManagedDir")

    def shows(self, stream: Stream) -> bool:
        """Whether normal output on *stream* should reach the logger."""
        return self.show_stdout if stream is Stream.STDOUT else self.show_stderr


class AppConfig(BaseModel):
    """Everything the router needs to know about one application."""

    model_config = ConfigDict(frozen=True)

    supervisor: SupervisorOptions
    logging: AppLogOptions = AppLogOptions()

    @property
    def name(self) -> str:
        return self.supervisor.name

    @property
    def output(self) -> str | None:
        return self.supervisor.output

    @property
    def error(self) -> str | None:
        return self.supervisor.error

    def destination(self, stream: Stream) -> str | None:
        """Return the configured file for *stream*."""
        return self.output if stream is Stream.STDOUT else self.error

    def with_destinations(self, output: str | None, error: str | None) -> AppConfig:
        """Return a copy with new output/error paths and aliases synced."""
        supervisor = self.supervisor.model_copy(
            update={
                "output": output,
                "error": error,
                "out_file": output,
                "error_file": error,
            }
        )
        return self.model_copy(update={"supervisor": supervisor})
