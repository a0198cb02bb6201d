import zirconium as zr
import pathlib
import os
import logging
import zrlog

from storetree import __version__


def _config_paths():
    yield pathlib.Path(".").absolute()
    yield pathlib.Path("~").expanduser().absolute()
    custom_config_path = os.environ.get("STORETREE_CONFIG_SEARCH_PATHS", "")
    if custom_config_path:
        paths = custom_config_path.split(";")
        for path in paths:
            if path:
                p = pathlib.Path(path).absolute()
                if p.exists():
                    yield p


def init_storetree(app_type: str):
    # Request logging from urllib3 is too verbose at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO)

    @zr.configure
    def set_config(app_config: zr.ApplicationConfig):
        config_paths = [x for x in _config_paths()]
        logging.getLogger("storetree.boot").info(f"Config Search Paths: {';'.join(str(x) for x in config_paths)}")
        for path in config_paths:
            app_config.register_default_file(path / ".storetree.defaults.toml")
            app_config.register_default_file(path / f".storetree.{app_type}.defaults.toml")
            app_config.register_file(path / ".storetree.toml")
            app_config.register_file(path / f".storetree.{app_type}.toml")
    zrlog.set_default_extra("app_type", app_type)
    zrlog.set_default_extra("version", __version__)
    zrlog.init_logging()
