"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "config.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Analyzer configuration template for mod-config-analyzer.
# Every setting is optional; remove a line to fall back to its default.
# Relative directories resolve against the folder holding this file.

cache:
  # Versioned copies of every fetched mod document live here.
  directory: "mod-cache"
  # Always fetch from GitHub and ignore documents already cached (env: SKIP_LOCAL_CACHE=true).
  skip_local_cache: false
  # Analyze cached documents only, without contacting GitHub (env: LOCAL_CACHE_ONLY=true).
  local_cache_only: false

github:
  # Personal access token; raises the API rate limit (env: GITHUB_TOKEN).
  # token: "<OPTIONAL>"
  mod_database_repo: "ow-mods/ow-mod-db"
  mod_database_path: "mods.json"
  # Restrict fetching to these mod unique names (env: MOD_ALLOW_LIST, comma separated).
  allow_list: []
  timeout_seconds: 30

analysis:
  # Per config type summaries, index.html and field-usage.xlsx are written here.
  output_directory: "analysis"
  # Number of config types analyzed at the same time.
  parallelism: 1
  write_workbook: true
"""


def build_placeholder_configuration() -> str:
    """Build a YAML analyzer configuration template with defaults and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the analyzer configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
