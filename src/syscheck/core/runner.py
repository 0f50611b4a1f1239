"""Command execution using the invoke library."""

import contextlib
import os
import signal
import subprocess

from invoke import Context, Local, Result
from invoke.exceptions import CommandTimedOut


class GroupLocal(Local):
    """invoke's local runner, with the command in its own process group.

    The shell forks whatever the command runs. Killing only the shell
    on timeout would leave those children holding the output pipe
    open, and invoke waits for the pipe to close. Killing the group
    takes them all down.
    """

    def start(self, command: str, shell: str, env: dict) -> None:
        if self.using_pty or os.name != "posix":
            super().start(command, shell, env)
            return
        self.process = subprocess.Popen(
            command,
            shell=True,
            executable=shell,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.PIPE,
            start_new_session=True,
        )

    def kill(self) -> None:
        pid = self.get_pid()
        with contextlib.suppress(ProcessLookupError):
            if os.name == "posix":
                os.killpg(pid, signal.SIGKILL)
            else:
                # No SIGKILL on Windows; os.kill hands 9 to TerminateProcess
                os.kill(pid, 9)


class Runner(Context):
    """Runs one check command through invoke.

    Each check gets its own Runner, so no Context state (cd stack,
    config overrides) is shared between worker threads.
    """

    def __init__(self, shell: str | None = None):
        super().__init__()
        self.config.runners.local = GroupLocal
        if shell:
            self.config.run.shell = shell

    def execute(self, command: str, timeout: float | None = None) -> Result:
        """Run a command with stderr folded into stdout.

        Never raises for a non-zero exit. When the timeout fires the
        whole process group is killed and the returned result has
        exited == -1.
        """
        # Newline lets the command end in a comment
        wrapped = f"{{ {command}\n}} 2>&1"
        try:
            return self.run(
                wrapped,
                hide=True,
                warn=True,
                # stdin belongs to the key reader
                in_stream=False,
                timeout=timeout or None,
            )
        except CommandTimedOut as e:
            result = e.result
            result.exited = -1
            return result
