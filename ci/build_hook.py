"""Hatch build hook for compiling the native cdk-ffi library."""

import os
import platform
import shutil
import subprocess
import sys
from pathlib import Path

from hatchling.builders.hooks.plugin.interface import BuildHookInterface


class CargoBuildHook(BuildHookInterface):
    """Build hook that compiles the cdk-ffi shared library before packaging."""

    PLUGIN_NAME = "cargo-build"

    CRATE_NAME = "cdk-ffi"

    def initialize(self, version: str, build_data: dict) -> None:
        """Run cargo build before packaging."""
        package_root = Path(self.root)

        # Sync VERSION to _version.py (for builds from sdist)
        self._sync_version(package_root)

        if self.target_name == "sdist":
            # Don't build for sdist - just include source
            return

        if os.environ.get("CDK_FFI_SKIP_NATIVE"):
            self._log("Skipping native build (CDK_FFI_SKIP_NATIVE is set)")
            return

        lib_name = self._get_lib_name()
        target_lib = package_root / "cdk" / lib_name

        # Check if library already exists (pre-built in CI)
        if target_lib.exists():
            self._log(f"Using existing {lib_name}")
            return

        crate_root = self._resolve_crate_root(package_root)
        if crate_root is None:
            # Editable installs against a library provided through CDK_FFI_LIBRARY
            self._log(
                f"No {self.CRATE_NAME} sources found; set CDK_FFI_ROOT to build {lib_name}. "
                "Runtime will need CDK_FFI_LIBRARY."
            )
            return

        self._log(f"Building {lib_name} from {crate_root}...")
        built_lib = self._run_build(crate_root)
        if not built_lib.exists():
            raise RuntimeError(f"Build failed: {built_lib} not found")

        shutil.copy2(built_lib, target_lib)
        self._log(f"Copied {lib_name} to cdk/")

    def _get_lib_name(self) -> str:
        """Get platform-specific library name."""
        system = platform.system()
        if system == "Darwin":
            return "libcdk_ffi.dylib"
        elif system == "Windows":
            return "cdk_ffi.dll"
        else:
            return "libcdk_ffi.so"

    def _resolve_crate_root(self, package_root: Path) -> Path | None:
        """Resolve the cargo workspace containing the cdk-ffi crate."""
        override = os.environ.get("CDK_FFI_ROOT")
        if override:
            root = Path(override)
            if not (root / "Cargo.toml").exists():
                raise RuntimeError(f"CDK_FFI_ROOT={override} has no Cargo.toml")
            return root

        vendor_root = package_root / "vendor" / self.CRATE_NAME
        if (vendor_root / "Cargo.toml").exists():
            return vendor_root

        for candidate in [package_root, *package_root.parents]:
            if (candidate / "crates" / self.CRATE_NAME / "Cargo.toml").exists():
                return candidate
        return None

    def _run_build(self, crate_root: Path) -> Path:
        """Run cargo and return the path of the built library."""
        if not shutil.which("cargo"):
            raise RuntimeError("Cargo not found. Install Rust from https://rustup.rs/")

        subprocess.run(
            ["cargo", "build", "--release", "--package", self.CRATE_NAME],
            cwd=crate_root,
            env=os.environ.copy(),
            check=True,
        )
        lib_path = crate_root / "target" / "release" / self._get_lib_name()

        # macOS strip needs -x for dylibs
        if shutil.which("strip") and lib_path.exists() and platform.system() != "Windows":
            is_macos = platform.system() == "Darwin"
            strip_cmd = ["strip", "-x", str(lib_path)] if is_macos else ["strip", str(lib_path)]
            subprocess.run(strip_cmd, check=False)
        return lib_path

    def _sync_version(self, package_root: Path) -> None:
        """Sync the VERSION file to _version.py.

        Resolution order:
        1. vendor/cdk-ffi/VERSION_PYTHON (CI sdist, pre-stamped PEP 440)
        2. VERSION next to pyproject.toml or in a parent directory
        """
        version_file = package_root / "vendor" / self.CRATE_NAME / "VERSION_PYTHON"
        if version_file.exists():
            version = version_file.read_text().strip()
        else:
            version = self._find_version_base(package_root)
            if version is None:
                raise RuntimeError(
                    "Cannot determine package version: no VERSION file found. "
                    "Ensure the repo root contains a VERSION file or build from an sdist."
                )

        version_py = package_root / "cdk" / "_version.py"
        content = f'"""Version from VERSION file."""\n__version__ = "{version}"\n'
        if not version_py.exists() or version_py.read_text() != content:
            version_py.write_text(content)
            self._log(f"Synced version {version} to _version.py")

    def _find_version_base(self, package_root: Path) -> str | None:
        """Find the version string from a VERSION file."""
        for candidate in (p / "VERSION" for p in [package_root, *package_root.parents]):
            if candidate.exists():
                return candidate.read_text().strip()
        return None

    def _log(self, msg: str) -> None:
        """Log build progress."""
        print(f"[cargo-build] {msg}", file=sys.stderr)
