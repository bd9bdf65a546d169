import tomllib
from pathlib import Path

CONFIG_FILE_NAME = ".seqtrack.toml"
DEFAULT_JSON_PATH = "working_con_db.json"


def load_config(config_dir: Path = None) -> dict:
    """
    Reads `.seqtrack.toml` from the given directory (default: cwd).
    Returns an empty dict when the file does not exist.
    """
    config_file = Path(config_dir or Path.cwd()) / CONFIG_FILE_NAME
    if config_file.exists():
        with config_file.open("rb") as f:
            return tomllib.load(f)
    return {}


def get_json_path_from_config(config_dir: Path = None):
    return load_config(config_dir).get("database", {}).get("json_path")


def get_schema_path_from_config(config_dir: Path = None):
    return load_config(config_dir).get("database", {}).get("schema_path")


def get_log_settings(config_dir: Path = None) -> dict:
    logging_cfg = load_config(config_dir).get("logging", {})
    return {
        "log_level": logging_cfg.get("level", "INFO"),
        # `log_file = ""` in the config disables the file handler
        "log_file": logging_cfg.get("log_file", "seqtrack.log") or None,
    }
