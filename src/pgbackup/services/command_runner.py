"""Subprocess execution service for pgbackup."""

import subprocess
import tempfile
from typing import Dict, List, Optional

from pgbackup.errors import BackupError
from pgbackup.models import CommandOutcome


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger):
        self.logger = logger

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                env=env,
            )
        except FileNotFoundError as exc:
            raise BackupError(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except Exception as exc:
            raise BackupError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise BackupError(message)

        self.logger.debug(message)
        return result

    def attempt(self, cmd: List[str], env: Optional[Dict[str, str]] = None) -> CommandOutcome:
        """Runs a command once and reports the result instead of raising."""
        cmd_str = " ".join(cmd)
        try:
            result = self.run(cmd, check=False, capture_output=True, env=env)
        except BackupError as exc:
            return CommandOutcome(command=cmd_str, returncode=127, diagnostic=str(exc))

        return CommandOutcome(
            command=cmd_str,
            returncode=result.returncode,
            diagnostic=(result.stderr or "").strip(),
        )

    def run_pipeline(
        self,
        producer: List[str],
        consumer: List[str],
        output_path: str,
        env: Optional[Dict[str, str]] = None,
    ) -> CommandOutcome:
        """Runs ``producer | consumer > output_path`` and checks both exit codes."""
        cmd_str = f"{' '.join(producer)} | {' '.join(consumer)} > {output_path}"
        self.logger.debug("Executing: %s", cmd_str)

        try:
            with open(output_path, "wb") as output_file, tempfile.TemporaryFile() as producer_err, \
                    tempfile.TemporaryFile() as consumer_err:
                first = subprocess.Popen(producer, stdout=subprocess.PIPE, stderr=producer_err, env=env)
                try:
                    second = subprocess.Popen(
                        consumer,
                        stdin=first.stdout,
                        stdout=output_file,
                        stderr=consumer_err,
                    )
                except OSError:
                    first.kill()
                    first.wait()
                    raise
                finally:
                    first.stdout.close()

                second.wait()
                first.wait()

                producer_err.seek(0)
                consumer_err.seek(0)
                producer_text = producer_err.read().decode("utf-8", errors="replace").strip()
                consumer_text = consumer_err.read().decode("utf-8", errors="replace").strip()
        except FileNotFoundError as exc:
            missing = exc.filename or producer[0]
            return CommandOutcome(
                command=cmd_str,
                returncode=127,
                diagnostic=f"Required command not found: {missing}. Please install it and try again.",
            )
        except OSError as exc:
            return CommandOutcome(command=cmd_str, returncode=1, diagnostic=f"Failed to execute pipeline: {exc}")

        if first.returncode != 0:
            return CommandOutcome(command=cmd_str, returncode=first.returncode, diagnostic=producer_text)
        if second.returncode != 0:
            return CommandOutcome(command=cmd_str, returncode=second.returncode, diagnostic=consumer_text)

        if producer_text:
            self.logger.debug("Command stderr: %s", producer_text)
        return CommandOutcome(command=cmd_str, returncode=0)
