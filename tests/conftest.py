"""
Shared test fixtures — a throwaway workspace with one deployable project.

    <tmp>/workspaces/main/
        Kernel.Service/
            Kernel.Service.csproj
            Environment.config
            .Deploy/Portfolio/DEV1.config
            .Deploy/Portfolio/PROD.config
"""

import textwrap
from pathlib import Path

import pytest

from envdeploy.core.models.settings import DeploySettings, StartupSettings

LEGACY_CSPROJ = textwrap.dedent("""\
    <?xml version="1.0" encoding="utf-8"?>
    <Project ToolsVersion="15.0" xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
      <PropertyGroup>
        <OutputType>Library</OutputType>
      </PropertyGroup>
      <ItemGroup>
        <None Include="Environment.config">
          <CopyToOutputDirectory>PreserveNewest</CopyToOutputDirectory>
        </None>
      </ItemGroup>
    </Project>
""")

DEV1_CONFIG = "Server=localhost;Drive=C:\\data"
ORIGINAL_TARGET = "Server=old-host;Drive=E:\\old"


def build_project(
    root: Path,
    name: str = "Kernel.Service",
    csproj: str = LEGACY_CSPROJ,
    instances: dict[str, dict[str, str]] | None = None,
    target: str | None = ORIGINAL_TARGET,
) -> Path:
    """Create a project directory with a deploy area; return the directory."""
    project_dir = root / name
    project_dir.mkdir(parents=True)
    (project_dir / f"{name}.csproj").write_text(csproj, encoding="utf-8")
    if target is not None:
        (project_dir / "Environment.config").write_text(target, encoding="utf-8")

    if instances is None:
        instances = {"Portfolio": {"DEV1": DEV1_CONFIG, "PROD": "Server=localhost"}}
    for instance, envs in instances.items():
        folder = project_dir / ".Deploy" / instance
        folder.mkdir(parents=True)
        for env, content in envs.items():
            (folder / f"{env}.config").write_text(content, encoding="utf-8")

    return project_dir


@pytest.fixture
def workspace_base(tmp_path: Path) -> Path:
    base = tmp_path / "workspaces"
    base.mkdir()
    return base


@pytest.fixture
def workspace(workspace_base: Path) -> Path:
    """The 'main' workspace holding Kernel.Service."""
    root = workspace_base / "main"
    build_project(root)
    return root


@pytest.fixture
def project_dir(workspace: Path) -> Path:
    return workspace / "Kernel.Service"


@pytest.fixture
def settings(workspace_base: Path) -> DeploySettings:
    """Settings rooted at the temp workspace base, startup prompt off."""
    return DeploySettings(
        workspace_base=str(workspace_base),
        startup=StartupSettings(enabled=False),
    )
