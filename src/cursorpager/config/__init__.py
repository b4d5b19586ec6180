"""Configuration loading utilities.

Precedence of configuration sources:
    1. Package defaults (``defaults.yml``)
    2. Optional user-provided YAML passed to :func:`load_config`
    3. Environment variables named by ``store.*_env`` (connection URI,
       database and collection)
"""

from .schema import ConfigModel, load_config, require_store

__all__ = ["ConfigModel", "load_config", "require_store"]
