"""
Container engine client.

Wraps the docker-compatible CLI (docker, podman, nerdctl, ...) used to log
in, pull, tag, push and remove images. Each call blocks until the process
exits; exit status zero is success, anything else raises EngineError.
"""

import subprocess
from typing import List, Sequence

from regcopy.error_utils import create_engine_error
from regcopy.logging_utils import get_logger

logger = get_logger(__name__)


class EngineClient:
    """Runs container engine commands"""

    def __init__(self, executable: str = "docker"):
        self.executable = executable

    @staticmethod
    def _redact_command_for_logging(cmd: Sequence[str]) -> List[str]:
        """Return a copy of the command with any credentials redacted."""
        redacted = list(cmd)
        for i, token in enumerate(redacted):
            if token in ("--password", "-p") and i + 1 < len(redacted):
                redacted[i + 1] = "****"
        return redacted

    def run(self, args: Sequence[str]) -> str:
        """Run ``<executable> args...`` and return its stdout.

        Raises:
            EngineError: If the process cannot be started or exits non-zero
        """
        cmd = [self.executable, *args]
        log_cmd = self._redact_command_for_logging(cmd)
        logger.debug(f"Running: {' '.join(log_cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        except subprocess.CalledProcessError as e:
            raise create_engine_error(log_cmd, e.returncode, e.stderr)
        except OSError as e:
            raise create_engine_error(log_cmd, None, str(e))
        return result.stdout

    def login(self, url: str, username: str, password: str) -> None:
        self.run(["login", "--username", username, "--password", password, url])

    def pull(self, image: str) -> None:
        self.run(["image", "pull", "-q", image])

    def tag(self, source: str, target: str) -> None:
        self.run(["image", "tag", source, target])

    def push(self, image: str) -> None:
        self.run(["image", "push", image])

    def remove(self, *images: str) -> None:
        self.run(["image", "rm", *images])
