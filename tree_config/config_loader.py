# AGPL-3.0 License

from os.path import abspath, dirname, join

from dynaconf import Dynaconf

current_dir = dirname(abspath(__file__))
global_settings = Dynaconf(
    envvar_prefix=False,
    merge_enabled=True,
    settings_files=[join(current_dir, f) for f in [
        "settings/configuration.toml",
        "settings/.secrets.toml",
    ]],
)


def get_settings():
    """
    Get the plugin-instance settings.

    Values come from settings/configuration.toml and may be overridden by
    environment variables using Dynaconf's nested syntax, e.g.
    ``CONFIG__CONCAT=true`` or ``GITHUB__TOKEN=...``.
    """
    return global_settings
