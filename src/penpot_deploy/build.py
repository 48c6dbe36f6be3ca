"""Container image build."""

from __future__ import annotations

from .config import RunConfiguration
from .console import info, success
from .errors import BuildFailure, CommandError
from .runner import run_cmd


def build_image(config: RunConfiguration) -> str:
    """
    Build the image from the working tree and tag it.

    Success is the build command's exit status only; output is streamed to
    the terminal and not parsed.

    Returns:
        The image reference that was built (name:tag).
    """
    info("Building Docker image...", image=config.image_ref)

    cmd = ['docker', 'build', '-t', config.image_ref, str(config.working_dir)]
    try:
        run_cmd(cmd, cwd=config.working_dir, capture_output=False)
    except CommandError as e:
        raise BuildFailure(
            f"Docker build failed with exit code {e.returncode}",
            remediation=f"Inspect the build output above, then re-run: {' '.join(cmd)}",
        ) from e

    success("Docker image built successfully!")
    return config.image_ref
