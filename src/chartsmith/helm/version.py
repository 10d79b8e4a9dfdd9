"""
Parsing of `helm version` output.
"""

import re
from typing import Optional

from chartsmith.core.errors import CollaboratorError
from chartsmith.core.models import BuildInfo
from chartsmith.helm.runner import HelmRunner, format_command

VERSION_PATTERN = re.compile(
    r'(?i)Version:"(?P<version>v\d+\.\d+\.\d+[^"]*)"'
    r'.*GitCommit:"(?P<git_commit>[^"]*)"'
    r'.*GitTreeState:"(?P<git_tree_state>[^"]*)"'
    r'.*GoVersion:"(?P<go_version>[^"]*)"'
)


def parse_build_info(output: str) -> BuildInfo:
    """Fields missing from the output are left empty."""
    match = VERSION_PATTERN.search(output)
    if not match:
        return BuildInfo()
    return BuildInfo(**match.groupdict())


def helm_version(runner: Optional[HelmRunner] = None) -> BuildInfo:
    runner = runner or HelmRunner()
    args = ["version"]
    cmd = runner.command(args)
    result = runner.run(args)
    if result.returncode != 0 or result.stderr:
        raise CollaboratorError(
            f"running {format_command(cmd)}: {result.stderr.strip()}", cmd, result.stderr
        )
    return parse_build_info(result.stdout)
