import os
import shutil
import logging
import subprocess
from typing import Callable, Optional
from pydantic import ValidationError
from .models import Command
from .response import ResponseWrapper, ResponseType, ErrorKind

logger = logging.getLogger(__name__)

# Executes a Command and reports the outcome; replaced by a fake in tests
CommandRunner = Callable[[Command], ResponseType]


def run_command(command: Command) -> ResponseType:
    """Run an external command and return structured response.

    Interactive commands inherit the terminal so the tool can prompt the
    operator; their diagnostics go straight to the terminal and only the exit
    status is reported back. Other commands have stdout and stderr captured.

    Args:
        command: The command to execute

    Returns:
        SuccessResponse with stdout as output, or ErrorResponse carrying the
        tool's stderr (SubprocessFailure) or ToolMissing if it isn't installed
    """
    logger.debug("Running: %s", command)
    try:
        if command.interactive:
            result = subprocess.run(command.argv, input=command.input, text=True)
            stdout = stderr = ""
        else:
            result = subprocess.run(
                command.argv,
                input=command.input,
                capture_output=True,
                text=True
            )
            stdout, stderr = result.stdout.strip(), result.stderr.strip()
    except FileNotFoundError:
        logger.error("Executable not found: %s", command.command)
        return ResponseWrapper.error_response(
            f"{command.command} is not installed or not in PATH", kind=ErrorKind.TOOL_MISSING)
    except PermissionError as e:
        return ResponseWrapper.error_response(str(e), kind=ErrorKind.PERMISSION_DENIED)

    if result.returncode != 0:
        message = stderr or stdout or f"`{command}` exited with status {result.returncode}"
        if command.interactive:
            message = f"{message} (see the {command.command} output above)"
        logger.error("Command failed (%d): %s", result.returncode, command)
        return ResponseWrapper.error_response(message, kind=ErrorKind.SUBPROCESS_FAILURE)
    # nginx -v and friends print their version on stderr
    return ResponseWrapper.success_response(stdout or stderr)


def is_executable_available(name: str) -> bool:
    return shutil.which(name) is not None


def ensure_directory_exists(path: str) -> ResponseType:
    """Create ``path`` if it is missing.

    Args:
        path: Directory to create

    Returns:
        SuccessResponse with ``created`` in data, or a PermissionDenied error
    """
    if os.path.isdir(path):
        return ResponseWrapper.success_response(f"Using {path}", {"path": path, "created": False})
    try:
        os.makedirs(path)
    except OSError as e:
        logger.error("Error creating directory %s: %s", path, e)
        return ResponseWrapper.error_response(
            f"Error creating certs directory {path}: {e.strerror or e}",
            kind=ErrorKind.PERMISSION_DENIED)
    logger.info("Created certs directory at %s", path)
    return ResponseWrapper.success_response(f"Created certs directory at {path}", {"path": path, "created": True})


def remove_files(*paths: str) -> Optional[str]:
    """Delete the given files, skipping ones already gone.

    Returns:
        None on success, otherwise the error message of the first failure
    """
    for path in paths:
        try:
            if os.path.exists(path):
                os.unlink(path)
        except OSError as e:
            logging.error(f"Failed to clean up {path}: {e}")
            return str(e)
    return None


def is_wsl(proc_version: str = "/proc/version") -> bool:
    try:
        with open(proc_version, encoding="utf-8") as f:
            release = f.read().lower()
    except OSError:
        return False
    return "microsoft" in release or "wsl" in release


def first_validation_error(error: ValidationError) -> str:
    """Operator-readable message of the first failed pydantic constraint."""
    message = error.errors()[0]["msg"]
    return message.replace("Value error, ", "")
