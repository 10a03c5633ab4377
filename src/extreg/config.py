"""Run configuration.

``PublishConfig`` is built once at the entry point and handed to the
code that needs it.  Library functions never read the environment
themselves; everything they need arrives as an explicit argument.

Environment variables read by ``PublishConfig.from_env``:

    S3_PREFIX           Key prefix for published extensions (default "extensions")
    SHOULD_PUBLISH      "true" to select unpublished extensions for publishing
    EXTENSIONS_TOML     Registry path (default "extensions.toml")
    GITMODULES          Submodule file path (default ".gitmodules")
    ALLOW_SSH_SUBMODULES  "true" to accept git@/ssh:// submodule urls
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from extreg.selection.selector import SelectionMode
from extreg.validator.rules import UrlPolicy

_TRUE_VALUES = frozenset({"true", "1", "yes"})


def _flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class PublishConfig:
    """Immutable settings for one packaging run."""

    prefix: str = "extensions"
    should_publish: bool = False
    registry_path: Path = Path("extensions.toml")
    gitmodules_path: Path = Path(".gitmodules")
    url_policy: UrlPolicy = UrlPolicy.HTTPS_ONLY

    @property
    def selection_mode(self) -> SelectionMode:
        """Return the selection policy implied by ``should_publish``."""
        return SelectionMode.PUBLISH if self.should_publish else SelectionMode.CHANGED

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "PublishConfig":
        """Build a config from an environment mapping such as ``os.environ``."""
        return cls(
            prefix=environ.get("S3_PREFIX") or "extensions",
            should_publish=_flag(environ.get("SHOULD_PUBLISH")),
            registry_path=Path(environ.get("EXTENSIONS_TOML") or "extensions.toml"),
            gitmodules_path=Path(environ.get("GITMODULES") or ".gitmodules"),
            url_policy=(
                UrlPolicy.PERMISSIVE
                if _flag(environ.get("ALLOW_SSH_SUBMODULES"))
                else UrlPolicy.HTTPS_ONLY
            ),
        )
