"""Project profile: toolchain facts used to derive build, test and run commands."""

from __future__ import annotations

import enum

from pydantic import BaseModel


class ProjectType(str, enum.Enum):
    NODE = "node"
    PYTHON = "python"
    RUST = "rust"
    GO = "go"
    DOTNET = "dotnet"
    ANDROID = "android"
    FLUTTER = "flutter"
    UNKNOWN = "unknown"


_TEST_COMMANDS: dict[ProjectType, str] = {
    ProjectType.NODE: "{pm} test",
    ProjectType.PYTHON: "pytest",
    ProjectType.RUST: "cargo test",
    ProjectType.GO: "go test ./...",
    ProjectType.DOTNET: "dotnet test",
    ProjectType.ANDROID: "./gradlew test",
    ProjectType.FLUTTER: "flutter test",
}

_BUILD_COMMANDS: dict[ProjectType, str] = {
    ProjectType.NODE: "{pm} run build",
    ProjectType.PYTHON: "python -m build",
    ProjectType.RUST: "cargo build",
    ProjectType.GO: "go build",
    ProjectType.DOTNET: "dotnet build",
    ProjectType.ANDROID: "./gradlew assembleDebug",
    ProjectType.FLUTTER: "flutter build",
}

_RUN_COMMANDS: dict[ProjectType, str] = {
    ProjectType.NODE: "{pm} start",
    ProjectType.PYTHON: "python main.py",
    ProjectType.RUST: "cargo run",
    ProjectType.GO: "go run .",
    ProjectType.DOTNET: "dotnet run",
    ProjectType.ANDROID: "./gradlew installDebug",
    ProjectType.FLUTTER: "flutter run",
}

# Frameworks whose dev server is the way to run the app.
_DEV_SERVER_FRAMEWORKS = frozenset({"nextjs", "electron"})


class ProjectProfile(BaseModel):
    project_type: ProjectType = ProjectType.UNKNOWN
    package_manager: str | None = None
    framework: str | None = None
    test_framework: str | None = None

    def test_command(self) -> str | None:
        return self._render(_TEST_COMMANDS)

    def build_command(self) -> str | None:
        return self._render(_BUILD_COMMANDS)

    def run_command(self) -> str | None:
        if self.project_type == ProjectType.NODE and self.framework in _DEV_SERVER_FRAMEWORKS:
            return f"{self.package_manager or 'npm'} run dev"
        return self._render(_RUN_COMMANDS)

    def _render(self, table: dict[ProjectType, str]) -> str | None:
        template = table.get(self.project_type)
        if template is None:
            return None
        return template.format(pm=self.package_manager or "npm")
