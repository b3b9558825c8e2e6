"""Check of the pose model placed by the asset-provisioning prebuild plugin.

The plugin downloads the model during regeneration and only logs when the
download fails; the app then runs without camera rep counting. The build
carries on, but the operator gets a warning.
"""

from __future__ import annotations

from ftrelease.core.config import ProjectLayout
from ftrelease.output.console import ConsoleProtocol, Style


def check_model_asset(layout: ProjectLayout, console: ConsoleProtocol) -> bool:
    model = layout.assets_dir / layout.settings.model_asset
    if model.is_file():
        console.info(f"model asset present: {model.name}")
        return True

    console.warning(f"{model.name} missing from native assets, rep counter will be disabled")
    console.print(f"hint: download it from {layout.settings.model_url}", Style.DIM)
    console.print(f"      into {model.parent.relative_to(layout.root)}", Style.DIM)
    return False
