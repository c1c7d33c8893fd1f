"""
Tests for metadata documents — copy directive and debug launch settings.
"""

import textwrap
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from envdeploy.core.errors import CorruptMetadataError
from envdeploy.core.models.artifacts import ProjectDescriptor
from envdeploy.core.models.settings import DeploySettings
from envdeploy.core.services.copy_directive import ensure_copy_always
from envdeploy.core.services.debug_launch import (
    desired_launch_values,
    ensure_debug_launch,
    open_user_settings,
)
from envdeploy.core.services.metadata import MSBUILD_NS, MetadataDocument

from tests.conftest import LEGACY_CSPROJ

NS = {"m": MSBUILD_NS}

SDK_CSPROJ = textwrap.dedent("""\
    <Project Sdk="Microsoft.NET.Sdk">
      <ItemGroup>
        <None Update="Config\\Environment.config" CopyToOutputDirectory="PreserveNewest" />
      </ItemGroup>
    </Project>
""")

ALWAYS_CSPROJ = LEGACY_CSPROJ.replace("PreserveNewest", "Always")


def _write(tmp_path: Path, content: str, name: str = "Kernel.Service.csproj") -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


# ── MetadataDocument ─────────────────────────────────────────────────


class TestMetadataDocument:
    def test_corrupt_document(self, tmp_path: Path):
        path = _write(tmp_path, "<Project><ItemGroup></Project>")
        with pytest.raises(CorruptMetadataError) as exc:
            MetadataDocument.load(path)
        assert exc.value.kind == "corrupt_metadata"
        assert str(path) in str(exc.value)

    def test_namespace_detected(self, tmp_path: Path):
        legacy = MetadataDocument.load(_write(tmp_path, LEGACY_CSPROJ))
        sdk = MetadataDocument.load(_write(tmp_path, SDK_CSPROJ, "sdk.csproj"))
        assert legacy.namespace == MSBUILD_NS
        assert sdk.namespace == ""

    def test_clean_document_not_saved(self, tmp_path: Path):
        path = _write(tmp_path, LEGACY_CSPROJ)
        doc = MetadataDocument.load(path)
        assert doc.save() is False

    def test_new_document_is_dirty(self, tmp_path: Path):
        doc = MetadataDocument.load_or_create(tmp_path / "x.csproj.user")
        assert doc.exists is False
        assert doc.dirty is True
        assert doc.save() is True
        assert (tmp_path / "x.csproj.user").is_file()

    def test_declaration_and_leading_comment_kept(self, tmp_path: Path):
        header = '<?xml version="1.0" encoding="utf-8"?>\n<!-- generated by the build team -->\n'
        content = LEGACY_CSPROJ.replace('<?xml version="1.0" encoding="utf-8"?>\n', header)
        path = _write(tmp_path, content)

        doc = MetadataDocument.load(path)
        ensure_copy_always(doc, "Environment.config")
        assert doc.save() is True

        assert path.read_text(encoding="utf-8").startswith(header + "<Project")

    def test_missing_declaration_not_added(self, tmp_path: Path):
        path = _write(tmp_path, SDK_CSPROJ)

        doc = MetadataDocument.load(path)
        ensure_copy_always(doc, "Environment.config")
        doc.save()

        assert path.read_bytes().startswith(b"<Project")

    def test_new_document_gets_declaration(self, tmp_path: Path):
        doc = MetadataDocument.load_or_create(tmp_path / "x.csproj.user")
        doc.save()
        assert (tmp_path / "x.csproj.user").read_bytes().startswith(
            b'<?xml version="1.0" encoding="utf-8"?>\n<Project'
        )

    def test_comments_survive_save(self, tmp_path: Path):
        content = LEGACY_CSPROJ.replace("<ItemGroup>", "<!-- keep me --><ItemGroup>")
        path = _write(tmp_path, content)
        doc = MetadataDocument.load(path)
        ensure_copy_always(doc, "Environment.config")
        doc.save()
        assert "keep me" in path.read_text(encoding="utf-8")


# ── Copy directive ───────────────────────────────────────────────────


class TestCopyDirective:
    def test_already_always_is_byte_identical(self, tmp_path: Path):
        path = _write(tmp_path, ALWAYS_CSPROJ)
        before = path.read_bytes()

        doc = MetadataDocument.load(path)
        outcome = ensure_copy_always(doc, "Environment.config")

        assert outcome.found is True
        assert outcome.changed is False
        assert doc.save() is False
        assert path.read_bytes() == before

    def test_preserve_newest_becomes_always(self, tmp_path: Path):
        path = _write(tmp_path, LEGACY_CSPROJ)

        doc = MetadataDocument.load(path)
        outcome = ensure_copy_always(doc, "environment.config")
        assert outcome.changed is True
        assert outcome.previous == "PreserveNewest"
        assert outcome.item_type == "None"
        assert doc.save() is True

        root = ET.parse(path).getroot()
        value = root.find("m:ItemGroup/m:None/m:CopyToOutputDirectory", NS).text
        assert value == "Always"

    def test_missing_field_is_added(self, tmp_path: Path):
        content = textwrap.dedent("""\
            <Project xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
              <ItemGroup>
                <Content Include="Settings\\Environment.config" />
              </ItemGroup>
            </Project>
        """)
        path = _write(tmp_path, content)

        doc = MetadataDocument.load(path)
        outcome = ensure_copy_always(doc, "Environment.config")
        doc.save()

        assert outcome.changed is True
        assert outcome.previous is None
        root = ET.parse(path).getroot()
        assert root.find("m:ItemGroup/m:Content/m:CopyToOutputDirectory", NS).text == "Always"

    def test_attribute_form(self, tmp_path: Path):
        path = _write(tmp_path, SDK_CSPROJ)

        doc = MetadataDocument.load(path)
        outcome = ensure_copy_always(doc, "Environment.config")
        doc.save()

        assert outcome.changed is True
        root = ET.parse(path).getroot()
        assert root.find("ItemGroup/None").get("CopyToOutputDirectory") == "Always"
        assert b"ns0:" not in path.read_bytes()

    def test_no_item_reported_not_failed(self, tmp_path: Path):
        content = '<Project xmlns="http://schemas.microsoft.com/developer/msbuild/2003" />'
        path = _write(tmp_path, content)

        doc = MetadataDocument.load(path)
        outcome = ensure_copy_always(doc, "Environment.config")

        assert outcome.found is False
        assert doc.dirty is False

    def test_second_pass_no_change(self, tmp_path: Path):
        path = _write(tmp_path, LEGACY_CSPROJ)
        first = MetadataDocument.load(path)
        ensure_copy_always(first, "Environment.config")
        assert first.save() is True
        written = path.read_bytes()

        second = MetadataDocument.load(path)
        assert ensure_copy_always(second, "Environment.config").changed is False
        assert second.save() is False
        assert path.read_bytes() == written


# ── Debug launch ─────────────────────────────────────────────────────


def _descriptor(tmp_path: Path) -> ProjectDescriptor:
    file_path = _write(tmp_path, LEGACY_CSPROJ)
    return ProjectDescriptor(
        name="Kernel.Service", loose_pattern="Service", file_path=file_path, directory=tmp_path
    )


class TestDebugLaunch:
    def test_desired_values(self, tmp_path: Path):
        settings = DeploySettings()
        settings.debug_launch.start_arguments = "-env {environment} -host {hostname} -p {project}"
        values = desired_launch_values(settings, "DEV1", "Portfolio", _descriptor(tmp_path))

        assert values["StartAction"] == "Program"
        assert values["StartProgram"] == settings.debug_launch.start_program
        assert values["StartArguments"] == "-env DEV1 -host DEV1.corp.local -p Kernel.Service"

    def test_creates_user_file(self, tmp_path: Path):
        project = _descriptor(tmp_path)
        values = desired_launch_values(DeploySettings(), "DEV1", "Portfolio", project)

        doc = open_user_settings(project)
        changed = ensure_debug_launch(doc, values)
        assert doc.save() is True

        assert changed == ["StartAction", "StartProgram", "StartArguments"]
        user_path = tmp_path / "Kernel.Service.csproj.user"
        root = ET.parse(user_path).getroot()
        group = root.find("m:PropertyGroup", NS)
        assert "Debug|AnyCPU" in group.get("Condition")
        assert group.find("m:StartArguments", NS).text == "-env DEV1 -instance Portfolio"

    def test_applied_twice_writes_once(self, tmp_path: Path):
        project = _descriptor(tmp_path)
        values = desired_launch_values(DeploySettings(), "DEV1", "Portfolio", project)

        writes = 0
        for _ in range(2):
            doc = open_user_settings(project)
            ensure_debug_launch(doc, values)
            writes += doc.save()

        assert writes == 1

    def test_only_changed_fields_reported(self, tmp_path: Path):
        project = _descriptor(tmp_path)
        settings = DeploySettings()

        doc = open_user_settings(project)
        ensure_debug_launch(doc, desired_launch_values(settings, "DEV1", "Portfolio", project))
        doc.save()

        doc = open_user_settings(project)
        changed = ensure_debug_launch(doc, desired_launch_values(settings, "PROD", "Portfolio", project))
        assert changed == ["StartArguments"]

    def test_existing_group_reused_despite_spacing(self, tmp_path: Path):
        user = tmp_path / "Kernel.Service.csproj.user"
        user.write_text(textwrap.dedent("""\
            <?xml version="1.0" encoding="utf-8"?>
            <Project xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
              <PropertyGroup Condition=" '$(Configuration)|$(Platform)'=='Debug|AnyCPU' ">
                <StartAction>Project</StartAction>
              </PropertyGroup>
              <PropertyGroup Condition="'$(Configuration)|$(Platform)' == 'Release|AnyCPU'" />
            </Project>
        """))
        project = _descriptor(tmp_path)

        doc = open_user_settings(project)
        changed = ensure_debug_launch(
            doc, desired_launch_values(DeploySettings(), "DEV1", "Portfolio", project)
        )
        doc.save()

        assert "StartAction" in changed
        groups = ET.parse(user).getroot().findall("m:PropertyGroup", NS)
        assert len(groups) == 2
        assert groups[0].find("m:StartAction", NS).text == "Program"
