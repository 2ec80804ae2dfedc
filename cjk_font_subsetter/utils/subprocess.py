"""
Subprocess execution utilities with consistent error handling.
"""

import subprocess
from pathlib import Path

from cjk_font_subsetter.core.errors import SubsetJobError
from cjk_font_subsetter.utils.logging import logger


def run_command(
    cmd: list[str],
    description: str | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess:
    """
    Run a subprocess command with consistent logging and error handling.

    Args:
        cmd: Command and arguments to run
        description: Optional description for logging
        timeout: Seconds to wait before killing the process

    Returns:
        CompletedProcess result

    Raises:
        SubsetJobError: If the command cannot be started, exits non-zero
            or times out. The error carries the command's diagnostic output.
    """
    if description:
        logger.info(description)

    try:
        result = subprocess.run(
            cmd, check=True, capture_output=True, text=True, timeout=timeout
        )
    except subprocess.CalledProcessError as e:
        logger.error(f"Command failed: {' '.join(cmd)}")
        if e.stderr:
            logger.error(e.stderr)
        raise SubsetJobError(
            f"{cmd[0]} exited with status {e.returncode}",
            output=e.stderr or e.stdout or "",
        ) from e
    except subprocess.TimeoutExpired as e:
        logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
        raise SubsetJobError(f"{cmd[0]} timed out after {timeout}s") from e
    except OSError as e:
        logger.error(f"Command could not be started: {' '.join(cmd)}")
        raise SubsetJobError(f"{cmd[0]} could not be started: {e}") from e

    if result.stdout:
        logger.debug(result.stdout)
    return result


def run_pyftsubset(
    input_font: Path,
    output_file: Path,
    unicodes: str,
    flavor: str,
    *,
    timeout: float | None = None,
) -> subprocess.CompletedProcess:
    """
    Run pyftsubset to subset a font into a web font flavor.

    Args:
        input_font: Input font path
        output_file: Output file path
        unicodes: Comma-separated Unicode ranges
        flavor: Output flavor ("woff" or "woff2")
        timeout: Seconds to wait before giving up

    Returns:
        CompletedProcess result
    """
    cmd = [
        "pyftsubset",
        str(input_font),
        f"--output-file={output_file}",
        f"--unicodes={unicodes}",
        f"--flavor={flavor}",
    ]

    return run_command(cmd, timeout=timeout)
