import logging
import os
import pathlib
import zirconium as zr
import zrlog
from ossdir import __VERSION__


def _config_paths():
    yield pathlib.Path(".").absolute()
    yield pathlib.Path("~").expanduser().absolute()
    custom_config_path = os.environ.get("OSSDIR_CONFIG_SEARCH_PATHS", "./config")
    if custom_config_path:
        paths = custom_config_path.split(";")
        for path in paths:
            if path:
                p = pathlib.Path(path).absolute()
                if p.exists():
                    yield p


def init_ossdir(app_type: str):
    # oss2 logs every request at INFO
    logging.getLogger("oss2").setLevel(logging.WARNING)

    @zr.configure
    def set_config(app_config: zr.ApplicationConfig):
        config_paths = [x for x in _config_paths()]
        logging.getLogger("ossdir.boot").info(f"Config Search Paths: {';'.join(str(x) for x in config_paths)}")
        for path in config_paths:
            app_config.register_default_file(path / ".ossdir.defaults.toml")
            app_config.register_default_file(path / f".ossdir.{app_type}.defaults.toml")
            app_config.register_file(path / ".ossdir.toml")
            app_config.register_file(path / f".ossdir.{app_type}.toml")
    zrlog.set_default_extra("app_type", app_type)
    zrlog.set_default_extra("version", __VERSION__)
    zrlog.init_logging()
